"""Run orchestrator: captures every site once and records the run."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from playwright.async_api import async_playwright

from sitewatch.errors import ConfigError
from sitewatch.executor.capture_worker import CaptureWorker
from sitewatch.executor.scheduler import run_all
from sitewatch.history.recorder import RunRecorder
from sitewatch.models.config import MonitorConfig
from sitewatch.models.run import CaptureResult, Run
from sitewatch.utils.browser import launch_browser

logger = logging.getLogger(__name__)


class Orchestrator:
    """Captures every configured site once and records the run."""

    def __init__(self, config: MonitorConfig, root: str | Path = "."):
        if not config.sites:
            raise ConfigError("No sites configured")
        self.config = config
        self.settings = config.settings
        self.root = Path(root)
        self.recorder = RunRecorder(self.root, self.settings.retention_runs)

    def run(self) -> Run:
        """Execute one full capture run."""
        return asyncio.run(self._run())

    async def _run(self) -> Run:
        sites = self.config.sites
        run_id = self.recorder.begin()
        logger.info(
            "=== Run %s: %d site(s), concurrency %d, timeout %dms ===",
            run_id, len(sites), self.settings.concurrency, self.settings.timeout_ms,
        )

        try:
            results = await self._capture_all()
        except BaseException:
            logger.error("Run %s aborted before recording", run_id)
            self.recorder.discard()
            raise
        run = self.recorder.record(results)

        logger.info(
            "=== Run %s complete: %s, %d/%d failed in %.1fs ===",
            run.id, run.overall, run.failed, run.total, run.duration_ms / 1000,
        )
        return run

    async def _capture_all(self) -> list[CaptureResult]:
        sites = self.config.sites
        async with async_playwright() as p:
            logger.debug("Launching Chromium (headless=%s)...", self.settings.headless)
            browser = await launch_browser(p, headless=self.settings.headless)
            try:
                worker = CaptureWorker(
                    browser,
                    self.settings,
                    run_dir=self.recorder.run_dir,
                    artifact_dir=self.recorder.artifact_dir,
                    site_count=len(sites),
                )
                return await run_all(sites, self.settings.concurrency, worker.capture)
            finally:
                await browser.close()
