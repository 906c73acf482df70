"""Capture worker: checks one site and screenshots it in an isolated context."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sitewatch.errors import (
    CaptureIOError,
    NavigationError,
    NavigationTimeoutError,
    ReadinessError,
    ReadinessTimeoutError,
)
from sitewatch.models.config import Settings, SiteSpec
from sitewatch.models.run import CaptureResult, iso_timestamp
from sitewatch.url_utils import screenshot_name, sequence_width
from sitewatch.utils.browser import create_capture_context

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.monotonic() - start) * 1000))


class CaptureWorker:
    """Runs the per-site state machine against a shared browser.

    Init -> Navigating -> (ReadyWait) -> Capturing -> OK, with any failure on
    the way landing in FAIL. Every call owns exactly one browser context and
    closes it before returning.
    """

    def __init__(
        self,
        browser: Browser,
        settings: Settings,
        run_dir: Path,
        artifact_dir: str,
        site_count: int,
    ):
        self.browser = browser
        self.settings = settings
        self.run_dir = run_dir
        self.artifact_dir = artifact_dir.rstrip("/")
        self._seq_width = sequence_width(site_count)

    async def capture(self, site: SiteSpec, index: int) -> CaptureResult:
        """Check one site. Never raises; failures are reported in the result."""
        position = index + 1
        name = site.display_name(position)
        file_name = screenshot_name(position, site.name or site.url, self._seq_width)
        shot_path = self.run_dir / file_name
        checked_at = iso_timestamp()

        status = "FAIL"
        http_status: Optional[int] = None
        error: Optional[str] = None
        stage: str | None = None
        context: BrowserContext | None = None
        page: Page | None = None

        start = time.monotonic()
        try:
            context = await create_capture_context(self.browser, self.settings)
            page = await context.new_page()
            page.set_default_timeout(self.settings.timeout_ms)

            http_status = await self._navigate(page, site)
            if site.ready_selector:
                await self._wait_ready(page, site.ready_selector)
            await self._screenshot(page, shot_path)

            status = "OK"
            duration_ms = _elapsed_ms(start)
        except Exception as e:
            duration_ms = _elapsed_ms(start)
            error = str(e) or e.__class__.__name__
            stage = getattr(e, "stage", "unexpected error")
            if page is not None:
                await self._best_effort_screenshot(page, shot_path)
        finally:
            if context is not None:
                await self._release(context, name)

        if status == "OK":
            logger.info("[OK] %s (%s) %dms", name, site.url, duration_ms)
        else:
            logger.warning("[FAIL] %s (%s) at %s: %s", name, site.url, stage, error)

        return CaptureResult(
            name=name,
            url=site.url,
            status=status,
            http_status=http_status,
            duration_ms=duration_ms,
            error=error,
            screenshot_path=f"{self.artifact_dir}/{file_name}",
            checked_at=checked_at,
        )

    async def _navigate(self, page: Page, site: SiteSpec) -> Optional[int]:
        logger.debug("Navigating to %s (wait_until=%s)", site.url, site.wait_until)
        try:
            response = await page.goto(
                site.url,
                wait_until=site.wait_until,
                timeout=self.settings.timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(f"Navigation timed out: {e.message}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation failed: {e.message}") from e
        # goto() yields no response for same-document navigations.
        return response.status if response is not None else None

    async def _wait_ready(self, page: Page, selector: str) -> None:
        logger.debug("Waiting for ready selector %r", selector)
        try:
            await page.wait_for_selector(selector, timeout=self.settings.timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ReadinessTimeoutError(
                f"Ready selector {selector!r} did not appear: {e.message}"
            ) from e
        except PlaywrightError as e:
            raise ReadinessError(f"Ready selector {selector!r} failed: {e.message}") from e

    async def _screenshot(self, page: Page, path: Path) -> None:
        try:
            await page.screenshot(
                path=str(path), full_page=True, timeout=self.settings.timeout_ms,
            )
        except (PlaywrightError, OSError) as e:
            message = e.message if isinstance(e, PlaywrightError) else str(e)
            raise CaptureIOError(f"Screenshot failed: {message}") from e

    async def _best_effort_screenshot(self, page: Page, path: Path) -> str | None:
        """Capture whatever the page shows after a failure, for diagnosis."""
        try:
            await page.screenshot(
                path=str(path), full_page=True, timeout=self.settings.timeout_ms,
            )
            return str(path)
        except Exception as e:
            logger.debug("Diagnostic screenshot failed for %s: %s", path.name, e)
            return None

    async def _release(self, context: BrowserContext, name: str) -> None:
        try:
            await context.close()
        except Exception as e:
            logger.warning("Failed to close browser context for %s: %s", name, e)
