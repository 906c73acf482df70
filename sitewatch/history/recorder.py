"""Run recorder: turns capture results into a persisted Run and index entry."""

from __future__ import annotations

import logging
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from sitewatch.models.run import CaptureResult, IndexEntry, Run, RunIndex, iso_timestamp

from .retention import RetentionManager
from .storage import read_json, write_json

logger = logging.getLogger(__name__)

REPORTS_DIR_NAME = "reports"
INDEX_FILE_NAME = "index.json"
RUN_RECORD_NAME = "run.json"


def new_run_id(now: datetime | None = None, taken: set[str] | frozenset[str] = frozenset()) -> str:
    """Second-precision UTC id, e.g. ``2026-10-19_08-30-00``.

    Sorts lexicographically in time order. When the id is already in
    ``taken`` a zero-padded ``-NNN`` suffix is appended, which keeps the
    order for up to 999 runs started within the same second.
    """
    now = now or datetime.now(timezone.utc)
    base = now.astimezone(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
    run_id, n = base, 1
    while run_id in taken:
        run_id = f"{base}-{n:03d}"
        n += 1
    return run_id


class RunRecorder:
    """Owns the load -> prepend -> prune -> save lifecycle of the run history.

    ``begin()`` is called before any capture starts and ``record()`` once all
    captures have finished, so the history is never written concurrently.
    """

    def __init__(
        self,
        root: Path,
        retention_runs: int = 200,
        retention: RetentionManager | None = None,
    ):
        self.root = root
        self.reports_dir = root / REPORTS_DIR_NAME
        self.index_path = self.reports_dir / INDEX_FILE_NAME
        self.retention_runs = retention_runs
        self.retention = retention or RetentionManager(self.reports_dir)

        self.index: RunIndex | None = None
        self.run_id: str | None = None
        self.started_at: str | None = None
        self._start_time: float | None = None

    def load_index(self) -> RunIndex:
        """Load the index from disk, or start an empty history."""
        data = read_json(self.index_path, fallback=None)
        if data is None:
            return RunIndex()
        try:
            return RunIndex.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring invalid run index %s: %s", self.index_path, e)
            return RunIndex()

    def begin(self) -> str:
        """Start a run: load the index, allocate the run id and its artifact dir."""
        self.index = self.load_index()
        taken = {entry.id for entry in self.index.runs}
        if self.reports_dir.exists():
            taken.update(p.name for p in self.reports_dir.iterdir())
        self.run_id = new_run_id(taken=taken)
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.started_at = iso_timestamp()
        self._start_time = time.monotonic()
        logger.info("Starting run %s (%d run(s) in history)", self.run_id, len(self.index.runs))
        return self.run_id

    @property
    def run_dir(self) -> Path:
        return self.reports_dir / self._require_run_id()

    @property
    def artifact_dir(self) -> str:
        """Artifact directory relative to the project root, as the dashboard sees it."""
        return f"{REPORTS_DIR_NAME}/{self._require_run_id()}"

    def record(self, results: list[CaptureResult]) -> Run:
        """Persist the finished run and the updated, pruned index."""
        run_id = self._require_run_id()
        duration_ms = int((time.monotonic() - self._start_time) * 1000)
        run = Run.from_results(
            run_id,
            results,
            started_at=self.started_at,
            finished_at=iso_timestamp(),
            duration_ms=duration_ms,
        )

        run_record_path = f"{self.artifact_dir}/{RUN_RECORD_NAME}"
        write_json(self.root / run_record_path, run.to_json_dict())

        runs = [IndexEntry.for_run(run, run_record_path)]
        runs.extend(entry for entry in self.index.runs if entry.id != run_id)
        self.index = RunIndex(runs=self.retention.prune(runs, self.retention_runs))
        write_json(self.index_path, self.index.to_json_dict())

        logger.info(
            "Recorded run %s: %s (%d/%d failed, %d run(s) kept)",
            run.id, run.overall, run.failed, run.total, len(self.index.runs),
        )
        return run

    def discard(self) -> None:
        """Remove the artifact directory of a run that will never be recorded."""
        run_dir = self.run_dir
        try:
            shutil.rmtree(run_dir)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Could not remove artifacts of aborted run %s: %s", self.run_id, e)
            return
        logger.info("Removed artifacts of aborted run %s", self.run_id)

    def load_run(self, entry: IndexEntry) -> Run | None:
        """Load the full record behind an index entry."""
        data = read_json(self.root / entry.run_record_path, fallback=None)
        if data is None:
            return None
        try:
            return Run.model_validate(data)
        except ValidationError as e:
            logger.warning("Invalid run record %s: %s", entry.run_record_path, e)
            return None

    def _require_run_id(self) -> str:
        if self.run_id is None:
            raise RuntimeError("RunRecorder.begin() has not been called")
        return self.run_id
