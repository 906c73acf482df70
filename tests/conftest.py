"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from playwright.async_api import Browser, BrowserContext, Page

from sitewatch.models.config import MonitorConfig, Settings, SiteSpec, ViewportConfig
from sitewatch.models.run import CaptureResult, IndexEntry


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with a short timeout and small history."""
    return Settings(
        concurrency=2,
        timeout_ms=1000,
        retention_runs=5,
        viewport=ViewportConfig(width=1280, height=720),
    )


@pytest.fixture
def sites() -> list[SiteSpec]:
    return [
        SiteSpec(name="Alpha", url="https://alpha.example.com"),
        SiteSpec(name="Beta", url="https://beta.example.com"),
        SiteSpec(name="Gamma", url="https://gamma.example.com", ready_selector="#app"),
    ]


@pytest.fixture
def monitor_config(sites: list[SiteSpec], settings: Settings) -> MonitorConfig:
    return MonitorConfig(sites=sites, settings=settings)


# ============================================================================
# Result Fixtures
# ============================================================================


def make_result(
    name: str = "Alpha",
    status: str = "OK",
    url: str | None = None,
    error: str | None = None,
    http_status: int | None = 200,
) -> CaptureResult:
    """Build a CaptureResult with sensible defaults."""
    return CaptureResult(
        name=name,
        url=url or f"https://{name.lower()}.example.com",
        status=status,
        http_status=http_status,
        duration_ms=1234,
        error=error if status == "OK" else (error or "Navigation timed out"),
        screenshot_path=f"reports/2026-01-01_00-00-00/01_{name.lower()}.png",
        checked_at="2026-01-01T00:00:00.000Z",
    )


def make_entry(run_id: str, overall: str = "OK") -> IndexEntry:
    """Build an IndexEntry for an existing run id."""
    return IndexEntry(
        id=run_id,
        overall=overall,
        total=1,
        failed=1 if overall == "FAIL" else 0,
        started_at="2026-01-01T00:00:00.000Z",
        finished_at="2026-01-01T00:00:05.000Z",
        duration_ms=5000,
        run_record_path=f"reports/{run_id}/run.json",
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


def make_mock_page(status: int | None = 200) -> AsyncMock:
    """A mock Playwright page whose navigation returns ``status``."""
    page = AsyncMock(spec=Page)
    page.set_default_timeout = Mock()
    page.goto = AsyncMock(return_value=Mock(status=status) if status is not None else None)
    page.wait_for_selector = AsyncMock()
    page.screenshot = AsyncMock()
    return page


def make_mock_context(page: AsyncMock | None = None) -> AsyncMock:
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=page or make_mock_page())
    context.add_init_script = AsyncMock()
    context.close = AsyncMock()
    return context


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    return make_mock_page()


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser context."""
    return make_mock_context(mock_page)


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================


@pytest.fixture
def run_dir(tmp_path: Path) -> Path:
    """Artifact directory of a run in progress."""
    path = tmp_path / "reports" / "2026-01-01_00-00-00"
    path.mkdir(parents=True)
    return path
