"""Browser helpers: one shared Chromium, one isolated context per capture."""

from __future__ import annotations

from playwright.async_api import Browser, BrowserContext, Playwright

from sitewatch.models.config import Settings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Headless Chromium advertises itself through navigator.webdriver; some sites
# serve a bot wall instead of the real page when it is set.
_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch the Chromium instance shared by every capture in a run."""
    return await playwright.chromium.launch(
        headless=headless,
        args=[
            "--no-sandbox",
            "--disable-blink-features=AutomationControlled",
        ],
    )


def accept_language(locale: str) -> str:
    """``ko-KR`` -> ``ko-KR,ko;q=0.9``."""
    primary = locale.split("-")[0]
    if primary == locale:
        return locale
    return f"{locale},{primary};q=0.9"


async def create_capture_context(
    browser: Browser,
    settings: Settings,
) -> BrowserContext:
    """Create an isolated context (own cookies and storage) for one capture."""
    context = await browser.new_context(
        viewport={"width": settings.viewport.width, "height": settings.viewport.height},
        user_agent=settings.user_agent or DEFAULT_USER_AGENT,
        locale=settings.locale,
        timezone_id=settings.timezone_id,
        extra_http_headers={"Accept-Language": accept_language(settings.locale)},
    )
    await context.add_init_script(_INIT_SCRIPT)
    return context
