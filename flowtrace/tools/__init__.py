"""Browser automation tools - the Playwright page adapter used during replay."""

from .playwright_tools import (
    BrowserConfig,
    BrowserManager,
    PlaywrightTools,
    create_browser_context,
)

__all__ = [
    "BrowserConfig",
    "BrowserManager",
    "PlaywrightTools",
    "create_browser_context",
]
