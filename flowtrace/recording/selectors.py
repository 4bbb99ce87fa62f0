"""Selector classification heuristics.

All keyword matching on CSS selectors lives here. The context tracker only
sees ``SelectorTraits``, so a stronger signal (ARIA role/state captured at
record time) can replace these keyword lists without touching stack logic.
Matching is case-insensitive substring matching.
"""

from dataclasses import dataclass
from typing import Optional

MODAL_KEYWORDS = (
    "modal", "dialog", "popup", "overlay", "lightbox",
    "drawer", "sidebar", "tooltip", "popover",
)

MODAL_OPEN_KEYWORDS = (
    "open", "show", "trigger", "launch", "activate",
    "help", "info", "more", "expand",
)

MODAL_CLOSE_KEYWORDS = (
    "close", "cancel", "dismiss", "hide", "exit",
    "back", "return", "overlay",
)

# Close glyphs commonly used as button text
MODAL_CLOSE_GLYPHS = ("×", "✕")

# Controls such as buttons and submits act on a form without establishing one
FORM_KEYWORDS = (
    "form", "input", "select", "textarea",
    "field", "checkbox", "radio",
)

FORM_START_KEYWORDS = (
    "start", "begin", "new", "create", "add",
    "register", "signup", "login",
)

FORM_CANCEL_KEYWORDS = ("cancel", "reset", "clear", "back", "previous")

EXPANDABLE_KEYWORDS = (
    "expand", "collapse", "toggle", "accordion",
    "dropdown", "menu", "details", "summary",
)


def _contains_any(selector: str, keywords: tuple[str, ...]) -> bool:
    lowered = selector.lower()
    return any(keyword in lowered for keyword in keywords)


@dataclass(frozen=True)
class SelectorTraits:
    """What a selector suggests about the element it targets."""

    is_modal: bool = False
    is_modal_open: bool = False
    is_modal_close: bool = False
    is_form: bool = False
    is_form_start: bool = False
    is_form_cancel: bool = False
    is_expandable: bool = False


NO_TRAITS = SelectorTraits()


def classify_selector(selector: Optional[str]) -> SelectorTraits:
    """Classify a CSS selector using keyword heuristics.

    Args:
        selector: CSS selector of the interaction target, if any

    Returns:
        SelectorTraits; all flags are False for a missing selector
    """
    if not isinstance(selector, str) or not selector:
        return NO_TRAITS

    is_modal = _contains_any(selector, MODAL_KEYWORDS)

    return SelectorTraits(
        is_modal=is_modal,
        is_modal_open=is_modal or _contains_any(selector, MODAL_OPEN_KEYWORDS),
        is_modal_close=(
            _contains_any(selector, MODAL_CLOSE_KEYWORDS)
            or any(glyph in selector for glyph in MODAL_CLOSE_GLYPHS)
        ),
        is_form=_contains_any(selector, FORM_KEYWORDS),
        is_form_start=_contains_any(selector, FORM_START_KEYWORDS),
        is_form_cancel=_contains_any(selector, FORM_CANCEL_KEYWORDS),
        is_expandable=_contains_any(selector, EXPANDABLE_KEYWORDS),
    )
