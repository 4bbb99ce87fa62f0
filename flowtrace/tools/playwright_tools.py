"""Playwright page adapter used by the replay loop."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

logger = structlog.get_logger()

# Captures the DOM summary axe-core needs to scope an analysis
AXE_CONTEXT_SCRIPT = """
() => ({
  include: [['html']],
  exclude: [],
  elementCount: document.querySelectorAll('*').length,
  title: document.title,
  url: window.location.href,
})
"""

SCROLL_SCRIPT = "({ x, y }) => window.scrollTo(x, y)"


@dataclass
class BrowserConfig:
    """Configuration for browser instances."""
    headless: bool = True
    slow_mo: int = 0  # Milliseconds between actions
    viewport_width: int = 1920
    viewport_height: int = 1080
    timeout_ms: int = 30000
    ignore_https_errors: bool = True
    locale: str = "en-US"
    user_agent: Optional[str] = None
    extra_http_headers: dict = field(default_factory=dict)


class BrowserManager:
    """
    Manages a Playwright browser for one replay session.

    Handles browser lifecycle, context creation, and page management.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self.log = logger.bind(component="browser")

    async def start(self) -> None:
        """Start the browser."""
        from playwright.async_api import async_playwright

        self.log.info("Starting browser", headless=self.config.headless)

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            slow_mo=self.config.slow_mo,
        )

        self._context = await self._browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            ignore_https_errors=self.config.ignore_https_errors,
            locale=self.config.locale,
            user_agent=self.config.user_agent,
            extra_http_headers=self.config.extra_http_headers or {},
        )
        self._context.set_default_timeout(self.config.timeout_ms)
        self._page = await self._context.new_page()

        self.log.info("Browser started")

    @property
    def page(self):
        """Get the current page."""
        return self._page

    async def stop(self) -> None:
        """Stop the browser."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self._context = None
        self._page = None
        self.log.info("Browser stopped")

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()


@asynccontextmanager
async def create_browser_context(
    config: Optional[BrowserConfig] = None,
):
    """
    Context manager for browser sessions.

    Usage:
        async with create_browser_context() as browser:
            result = await Replayer().replay(actions, browser.page)
    """
    manager = BrowserManager(config)
    try:
        await manager.start()
        yield manager
    finally:
        await manager.stop()


class PlaywrightTools:
    """
    Page-automation operations the replay loop needs.

    Every method is a suspension point; failures propagate as Playwright
    errors for the caller to wrap.
    """

    def __init__(self, page, timeout_ms: int = 10000):
        """
        Initialize with a Playwright page.

        Args:
            page: Playwright page object
            timeout_ms: Default timeout for element actions
        """
        self.page = page
        self.timeout_ms = timeout_ms
        self.log = logger.bind(component="playwright_tools")

    # ==========================================================================
    # Actions
    # ==========================================================================

    async def goto(self, url: str, wait_until: str = "load") -> str:
        """
        Navigate to URL.

        Returns:
            Final URL after navigation
        """
        self.log.info("Navigating", url=url)
        await self.page.goto(url, wait_until=wait_until, timeout=self.timeout_ms)
        return self.page.url

    async def click(self, selector: str) -> None:
        """Click an element."""
        self.log.debug("Clicking", selector=selector)
        await self.page.click(selector, timeout=self.timeout_ms)

    async def fill(self, selector: str, value: str) -> None:
        """Fill a text input."""
        self.log.debug("Filling", selector=selector, value_length=len(value))
        await self.page.fill(selector, value, timeout=self.timeout_ms)

    async def select_option(self, selector: str, value: str) -> list[str]:
        """
        Select option from dropdown.

        Returns:
            Selected option values
        """
        return await self.page.select_option(selector, value=value, timeout=self.timeout_ms)

    async def hover(self, selector: str) -> None:
        """Hover over an element."""
        await self.page.hover(selector, timeout=self.timeout_ms)

    async def scroll_to(self, x: float = 0, y: float = 0) -> None:
        """Scroll the window to an absolute position."""
        await self.page.evaluate(SCROLL_SCRIPT, {"x": x, "y": y})

    async def press_key(self, key: str) -> None:
        """Press a keyboard key (e.g. "Tab", "Escape")."""
        await self.page.keyboard.press(key)

    # ==========================================================================
    # Waiting
    # ==========================================================================

    async def wait_for_load_state(
        self,
        state: str = "networkidle",
        timeout_ms: int = 30000,
    ) -> None:
        """
        Wait for page load state.

        Args:
            state: "load", "domcontentloaded", "networkidle"
            timeout_ms: Timeout
        """
        await self.page.wait_for_load_state(state, timeout=timeout_ms)

    async def wait(self, ms: int) -> None:
        """Wait for specified milliseconds."""
        await asyncio.sleep(ms / 1000)

    # ==========================================================================
    # Capture
    # ==========================================================================

    async def content(self) -> str:
        """Get the page's full HTML."""
        return await self.page.content()

    async def screenshot(self, full_page: bool = True) -> bytes:
        """Take a PNG screenshot."""
        return await self.page.screenshot(type="png", full_page=full_page)

    async def axe_context(self) -> dict:
        """Get the DOM summary used to scope accessibility analysis."""
        return await self.page.evaluate(AXE_CONTEXT_SCRIPT)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """
        Execute JavaScript in the page.

        Args:
            expression: JavaScript expression or function
            arg: Optional argument passed to the function

        Returns:
            Result of expression
        """
        if arg is None:
            return await self.page.evaluate(expression)
        return await self.page.evaluate(expression, arg)
