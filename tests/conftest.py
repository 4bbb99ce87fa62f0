"""Shared fixtures for flowtrace tests."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from flowtrace.replay.focus_trap import (
    ACTIVE_ELEMENT_SCRIPT,
    FOCUS_ELEMENT_SCRIPT,
    PREPARE_SCRIPT,
    RESTORE_FOCUS_SCRIPT,
)
from flowtrace.tools.playwright_tools import AXE_CONTEXT_SCRIPT


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path - included in CI)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring a real browser"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end test"
    )


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Clear FLOWTRACE_* variables so settings fall back to their defaults."""
    for key in list(os.environ):
        if key.startswith("FLOWTRACE_"):
            monkeypatch.delenv(key, raising=False)


class FakeModalPage:
    """Scripted stand-in for a Playwright page showing a modal.

    ``focusables`` are element keys (tag#id.class) in document order. Indices
    in ``outside_indices`` report focus outside the modal when focused
    programmatically. ``tab_escape_at`` makes the N-th real Tab press land on
    ``escaped_tag`` outside the modal; otherwise Tab cycles inside it.
    """

    def __init__(
        self,
        focusables=("BUTTON#first", "INPUT#name", "BUTTON#close"),
        detected=True,
        outside_indices=(),
        tab_escape_at=None,
        escaped_tag="body",
        prepare_error=None,
        keyboard_error=None,
    ):
        self.focusables = list(focusables)
        self.detected = detected
        self.outside_indices = set(outside_indices)
        self.tab_escape_at = tab_escape_at
        self.escaped_tag = escaped_tag
        self.prepare_error = prepare_error
        self.keyboard_error = keyboard_error

        self.active = None
        self.tab_presses = 0
        self.restored = False
        self.scripts = []
        self.keyboard = SimpleNamespace(press=self._press)

    async def evaluate(self, script, arg=None):
        self.scripts.append(script)

        if script == PREPARE_SCRIPT:
            if self.prepare_error:
                raise self.prepare_error
            if not self.detected:
                return {"detected": False}
            return {
                "detected": True,
                "selector": '[role="dialog"]',
                "modalElement": "div",
                "focusableCount": len(self.focusables),
                "hasAriaModal": True,
                "hasRole": True,
            }
        if script == FOCUS_ELEMENT_SCRIPT:
            self.active = arg["index"]
            return self._describe()
        if script == ACTIVE_ELEMENT_SCRIPT:
            return self._describe()
        if script == RESTORE_FOCUS_SCRIPT:
            self.restored = True
            return True
        if script == AXE_CONTEXT_SCRIPT:
            return {"include": [["html"]], "exclude": []}
        raise AssertionError(f"Unexpected script: {script[:40]}")

    async def _press(self, key):
        if self.keyboard_error:
            raise self.keyboard_error
        assert key == "Tab"
        self.tab_presses += 1
        if self.tab_presses == self.tab_escape_at:
            self.active = "outside"
        else:
            self.active = (self.active + 1) % len(self.focusables)

    def _describe(self):
        if self.active == "outside" or self.active in self.outside_indices:
            return {"inModal": False, "key": "A#skip-link", "tag": self.escaped_tag}
        key = self.focusables[self.active]
        return {"inModal": True, "key": key, "tag": key.split("#")[0].lower()}


@pytest.fixture
def fake_modal_page():
    """Factory for scripted modal pages."""
    return FakeModalPage


@pytest.fixture
def mock_page():
    """Create a mock Playwright page with no modal on it."""
    page = MagicMock()
    page.url = "https://example.com"
    page.goto = AsyncMock()
    page.click = AsyncMock()
    page.fill = AsyncMock()
    page.select_option = AsyncMock(return_value=["us"])
    page.hover = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.content = AsyncMock(return_value="<html><body>" + "x" * 387 + "</body></html>")
    page.screenshot = AsyncMock(return_value=b"\x89PNG")
    page.keyboard = MagicMock()
    page.keyboard.press = AsyncMock()

    async def evaluate(script, arg=None):
        if script == PREPARE_SCRIPT:
            return {"detected": False}
        if script == AXE_CONTEXT_SCRIPT:
            return {"include": [["html"]], "exclude": [], "title": "Example"}
        return None

    page.evaluate = AsyncMock(side_effect=evaluate)
    return page


@pytest.fixture
def sample_raw_actions():
    """Raw recorder actions for a help-modal session."""
    return [
        {"type": "navigate", "url": "https://example.com", "timestamp": "2024-01-01T10:00:00Z"},
        {"type": "click", "selector": "#open-help-modal", "timestamp": "2024-01-01T10:00:02Z"},
        {"type": "click", "selector": "#modal-close-button", "timestamp": "2024-01-01T10:00:04Z"},
        {"type": "click", "selector": "#submit", "timestamp": "2024-01-01T10:00:06Z"},
    ]


@pytest.fixture
def sample_actions(sample_raw_actions):
    """Parsed actions for a help-modal session."""
    from flowtrace.recording.action_parser import parse_actions

    return parse_actions(sample_raw_actions)
