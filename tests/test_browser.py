"""Tests for browser launch and capture-context helpers."""

from unittest.mock import AsyncMock

import pytest

from sitewatch.models.config import Settings, ViewportConfig
from sitewatch.utils.browser import (
    DEFAULT_USER_AGENT,
    accept_language,
    create_capture_context,
    launch_browser,
)


class TestLaunchBrowser:

    @pytest.mark.asyncio
    async def test_headless_chromium_without_sandbox(self):
        playwright = AsyncMock()
        await launch_browser(playwright)

        kwargs = playwright.chromium.launch.await_args.kwargs
        assert kwargs["headless"] is True
        assert "--no-sandbox" in kwargs["args"]

    @pytest.mark.asyncio
    async def test_headed_mode(self):
        playwright = AsyncMock()
        await launch_browser(playwright, headless=False)
        assert playwright.chromium.launch.await_args.kwargs["headless"] is False


class TestCreateCaptureContext:

    @pytest.mark.asyncio
    async def test_context_kwargs_from_settings(self):
        mock_browser = AsyncMock()
        mock_context = AsyncMock()
        mock_browser.new_context = AsyncMock(return_value=mock_context)
        settings = Settings(
            viewport=ViewportConfig(width=800, height=600),
            locale="en-US",
            timezone_id="America/New_York",
        )

        context = await create_capture_context(mock_browser, settings)

        assert context is mock_context
        kwargs = mock_browser.new_context.call_args.kwargs
        assert kwargs["viewport"] == {"width": 800, "height": 600}
        assert kwargs["locale"] == "en-US"
        assert kwargs["timezone_id"] == "America/New_York"
        assert kwargs["user_agent"] == DEFAULT_USER_AGENT
        assert kwargs["extra_http_headers"] == {"Accept-Language": "en-US,en;q=0.9"}

    @pytest.mark.asyncio
    async def test_custom_user_agent(self):
        mock_browser = AsyncMock()
        mock_browser.new_context = AsyncMock(return_value=AsyncMock())

        await create_capture_context(mock_browser, Settings(user_agent="sitewatch/1.0"))

        assert mock_browser.new_context.call_args.kwargs["user_agent"] == "sitewatch/1.0"

    @pytest.mark.asyncio
    async def test_init_script_applied(self):
        mock_browser = AsyncMock()
        mock_context = AsyncMock()
        mock_browser.new_context = AsyncMock(return_value=mock_context)

        await create_capture_context(mock_browser, Settings())

        mock_context.add_init_script.assert_called_once()


class TestAcceptLanguage:

    @pytest.mark.parametrize("locale,expected", [
        ("ko-KR", "ko-KR,ko;q=0.9"),
        ("en-US", "en-US,en;q=0.9"),
        ("de", "de"),
    ])
    def test_header(self, locale, expected):
        assert accept_language(locale) == expected
