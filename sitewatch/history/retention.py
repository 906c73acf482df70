"""Retention: bounds the run history and removes evicted runs' artifacts."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from sitewatch.errors import StorageEvictionError
from sitewatch.models.run import IndexEntry

logger = logging.getLogger(__name__)


class RetentionManager:
    """Count-based eviction over a newest-first index."""

    def __init__(self, reports_dir: Path):
        self.reports_dir = reports_dir

    def prune(self, entries: list[IndexEntry], limit: int) -> list[IndexEntry]:
        """Keep the newest ``limit`` entries and delete the artifacts of the rest.

        Deletion failures are logged and never stop the truncation.
        """
        limit = max(1, limit)
        if len(entries) <= limit:
            return list(entries)

        kept, evicted = list(entries[:limit]), entries[limit:]
        logger.info("Retention limit %d reached, evicting %d run(s)", limit, len(evicted))
        for entry in evicted:
            try:
                self.evict(entry)
            except StorageEvictionError as e:
                logger.warning("%s", e)
        return kept

    def run_dir(self, run_id: str) -> Path:
        """Artifact directory of a run, refusing ids that escape the reports dir."""
        try:
            base = self.reports_dir.resolve()
            target = (self.reports_dir / run_id).resolve()
        except (OSError, ValueError) as e:
            raise StorageEvictionError(f"Cannot resolve artifacts of run {run_id!r}: {e}") from e
        if not run_id or target == base or base not in target.parents:
            raise StorageEvictionError(f"Refusing to delete run {run_id!r}: outside {base}")
        return target

    def evict(self, entry: IndexEntry) -> None:
        """Remove one run's artifact directory."""
        target = self.run_dir(entry.id)
        try:
            if not target.exists():
                logger.debug("Run %s has no artifact directory, nothing to delete", entry.id)
                return
            shutil.rmtree(target)
        except OSError as e:
            raise StorageEvictionError(f"Failed to delete artifacts of run {entry.id}: {e}") from e
        logger.debug("Deleted %s", target)
