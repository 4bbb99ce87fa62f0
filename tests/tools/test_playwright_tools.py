"""Tests for playwright tools module."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from flowtrace.tools.playwright_tools import (
    AXE_CONTEXT_SCRIPT,
    SCROLL_SCRIPT,
    BrowserConfig,
    BrowserManager,
    PlaywrightTools,
    create_browser_context,
)


class TestBrowserConfig:
    """Tests for BrowserConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = BrowserConfig()
        assert config.headless is True
        assert config.slow_mo == 0
        assert config.viewport_width == 1920
        assert config.viewport_height == 1080
        assert config.timeout_ms == 30000
        assert config.ignore_https_errors is True
        assert config.locale == "en-US"
        assert config.user_agent is None
        assert config.extra_http_headers == {}

    def test_custom_values(self):
        """Test custom configuration values."""
        config = BrowserConfig(
            headless=False,
            slow_mo=100,
            viewport_width=1280,
            viewport_height=720,
            user_agent="Custom Agent",
            extra_http_headers={"X-Custom": "Header"},
        )
        assert config.headless is False
        assert config.slow_mo == 100
        assert config.viewport_width == 1280
        assert config.user_agent == "Custom Agent"
        assert config.extra_http_headers["X-Custom"] == "Header"


def _mock_playwright():
    """Build a mocked async_playwright() chain."""
    page = MagicMock()
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.set_default_timeout = MagicMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    return starter, playwright, browser, context, page


class TestBrowserManager:
    """Tests for BrowserManager class."""

    def test_init_default_config(self):
        """Test initialization with default config."""
        manager = BrowserManager()
        assert manager.config.headless is True
        assert manager.page is None

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        """Test browser lifecycle."""
        starter, playwright, browser, context, page = _mock_playwright()

        with patch("playwright.async_api.async_playwright", return_value=starter):
            manager = BrowserManager(BrowserConfig(timeout_ms=5000))
            await manager.start()

            assert manager.page is page
            playwright.chromium.launch.assert_awaited_once_with(headless=True, slow_mo=0)
            context.set_default_timeout.assert_called_once_with(5000)

            await manager.stop()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert manager.page is None

    @pytest.mark.asyncio
    async def test_create_browser_context(self):
        """Test the context manager starts and always stops the browser."""
        starter, playwright, browser, context, page = _mock_playwright()

        with patch("playwright.async_api.async_playwright", return_value=starter):
            with pytest.raises(RuntimeError):
                async with create_browser_context() as manager:
                    assert manager.page is page
                    raise RuntimeError("replay aborted")

        browser.close.assert_awaited_once()


class TestPlaywrightTools:
    """Tests for PlaywrightTools class."""

    @pytest.fixture
    def tools(self, mock_page):
        return PlaywrightTools(mock_page, timeout_ms=5000)

    @pytest.mark.asyncio
    async def test_goto(self, tools, mock_page):
        """Test navigation returns the final URL."""
        url = await tools.goto("https://example.com")

        assert url == "https://example.com"
        mock_page.goto.assert_awaited_once_with("https://example.com", wait_until="load", timeout=5000)

    @pytest.mark.asyncio
    async def test_click(self, tools, mock_page):
        """Test clicking uses the action timeout."""
        await tools.click("#submit")
        mock_page.click.assert_awaited_once_with("#submit", timeout=5000)

    @pytest.mark.asyncio
    async def test_fill(self, tools, mock_page):
        """Test filling a field."""
        await tools.fill("#email", "a@b.c")
        mock_page.fill.assert_awaited_once_with("#email", "a@b.c", timeout=5000)

    @pytest.mark.asyncio
    async def test_select_option(self, tools, mock_page):
        """Test selecting a dropdown option."""
        selected = await tools.select_option("#country", "us")

        assert selected == ["us"]
        mock_page.select_option.assert_awaited_once_with("#country", value="us", timeout=5000)

    @pytest.mark.asyncio
    async def test_scroll_to(self, tools, mock_page):
        """Test scrolling evaluates the scroll script."""
        await tools.scroll_to(10, 250)
        mock_page.evaluate.assert_awaited_once_with(SCROLL_SCRIPT, {"x": 10, "y": 250})

    @pytest.mark.asyncio
    async def test_press_key(self, tools, mock_page):
        """Test pressing a key."""
        await tools.press_key("Tab")
        mock_page.keyboard.press.assert_awaited_once_with("Tab")

    @pytest.mark.asyncio
    async def test_wait_for_load_state(self, tools, mock_page):
        """Test waiting for network idle."""
        await tools.wait_for_load_state("networkidle", timeout_ms=30000)
        mock_page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=30000)

    @pytest.mark.asyncio
    async def test_wait(self, tools):
        """Test fixed waits use asyncio.sleep in seconds."""
        with patch("flowtrace.tools.playwright_tools.asyncio.sleep", new=AsyncMock()) as sleep:
            await tools.wait(500)
        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_capture(self, tools, mock_page):
        """Test HTML, screenshot and axe context capture."""
        assert (await tools.content()).startswith("<html>")
        assert await tools.screenshot() == b"\x89PNG"
        mock_page.screenshot.assert_awaited_once_with(type="png", full_page=True)

        axe = await tools.axe_context()
        assert axe["include"] == [["html"]]
        mock_page.evaluate.assert_awaited_with(AXE_CONTEXT_SCRIPT)

    @pytest.mark.asyncio
    async def test_evaluate(self, tools, mock_page):
        """Test evaluate passes the argument only when given."""
        await tools.evaluate("() => 1")
        mock_page.evaluate.assert_awaited_with("() => 1")

        await tools.evaluate("(x) => x", 2)
        mock_page.evaluate.assert_awaited_with("(x) => x", 2)
