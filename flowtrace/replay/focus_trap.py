"""Focus-trap probe for modal dialogs.

During replay, each step is checked for a visible modal. When one is found,
focus is walked forward through the modal's focusable elements twice:

- DOM pass: focus is moved programmatically to the next enumerated element
- keyboard pass: real Tab key presses, checking where focus lands

Both passes are bounded. The DOM pass takes at most
``min(2 * focusable_count + 2, 15)`` steps; the keyboard pass at most 8
presses. A pass fails as soon as focus lands outside the modal. The DOM pass
passes strongly when every element (keyed by tag, id and first class) has
been revisited, and weakly when the bound runs out while still confined.

Every page call is awaited and every failure is converted into a
``tested=False`` result; a probe must never abort the replay loop.
"""

from typing import Any, Optional

import structlog

from ..tools.playwright_tools import PlaywrightTools
from .models import FocusTrapResult, ModalInfo, TraversalResult

logger = structlog.get_logger()

MODAL_SELECTORS = (
    '[role="dialog"]',
    '[aria-modal="true"]',
    '.modal:not([style*="display: none"])',
    '.dialog:not([style*="display: none"])',
    '[data-modal="true"]',
)

FOCUSABLE_SELECTOR = 'a, button, input, textarea, select, [tabindex]:not([tabindex^="-"])'

MAX_DOM_TABS = 15
MAX_KEYBOARD_TABS = 8

REASON_NO_MODAL = "No modal detected"
REASON_NO_FOCUSABLE = "Modal has no focusable elements"
REASON_ESCAPED = "Focus escaped modal"
REASON_CYCLE = "Focus properly trapped - completed cycle"
REASON_CONFINED = "Focus remained within modal during test"

STATE_KEY = "__flowtraceFocusTrap"

# Finds the first visible modal, enumerates its visible enabled focusables
# and remembers the originally focused element for restoration.
PREPARE_SCRIPT = """
({ modalSelectors, focusableSelector, stateKey }) => {
  const isVisible = (el) =>
    !!(el.offsetWidth || el.offsetHeight || el.getClientRects().length);
  for (const selector of modalSelectors) {
    const modal = document.querySelector(selector);
    if (!modal || !isVisible(modal)) continue;
    const elements = Array.from(modal.querySelectorAll(focusableSelector))
      .filter((el) => isVisible(el) && !el.disabled);
    window[stateKey] = { modal, elements, original: document.activeElement };
    return {
      detected: true,
      selector,
      modalElement: modal.tagName.toLowerCase(),
      focusableCount: elements.length,
      hasAriaModal: modal.getAttribute('aria-modal') === 'true',
      hasRole: modal.getAttribute('role') === 'dialog',
    };
  }
  return { detected: false };
}
"""

_DESCRIBE_ACTIVE = """
  const active = document.activeElement;
  if (!active) return { inModal: false, key: null, tag: 'unknown' };
  const key = active.tagName
    + (active.id ? '#' + active.id : '')
    + (active.classList && active.classList.length ? '.' + active.classList[0] : '');
  return {
    inModal: state.modal.contains(active),
    key,
    tag: active.tagName.toLowerCase(),
  };
"""

FOCUS_ELEMENT_SCRIPT = """
({ index, stateKey }) => {
  const state = window[stateKey];
  if (!state) throw new Error('Focus trap state missing');
  state.elements[index].focus();
""" + _DESCRIBE_ACTIVE + "}"

ACTIVE_ELEMENT_SCRIPT = """
({ stateKey }) => {
  const state = window[stateKey];
  if (!state) throw new Error('Focus trap state missing');
""" + _DESCRIBE_ACTIVE + "}"

RESTORE_FOCUS_SCRIPT = """
({ stateKey }) => {
  const state = window[stateKey];
  delete window[stateKey];
  if (state && state.original && typeof state.original.focus === 'function') {
    try { state.original.focus({ preventScroll: true }); } catch (e) { return false; }
  }
  return true;
}
"""


class FocusTrapTester:
    """Probes visible modals for keyboard focus trapping.

    Example:
        tester = FocusTrapTester()
        result = await tester.test_focus_trap(page, step_number=3)
    """

    def __init__(
        self,
        max_tabs: int = MAX_DOM_TABS,
        max_keyboard_tabs: int = MAX_KEYBOARD_TABS,
    ):
        """Initialize tester.

        Args:
            max_tabs: Hard cap on DOM-level traversal steps
            max_keyboard_tabs: Hard cap on real Tab presses
        """
        self.max_tabs = max_tabs
        self.max_keyboard_tabs = max_keyboard_tabs
        self.log = logger.bind(component="focus_trap")

    def traversal_bound(self, focusable_count: int) -> int:
        """Number of DOM traversal steps for a modal with this many focusables."""
        return min(2 * focusable_count + 2, self.max_tabs)

    async def test_focus_trap(self, page: Any, step_number: int) -> FocusTrapResult:
        """Probe the page for a visible modal and test its focus trap.

        Args:
            page: PlaywrightTools, or a raw Playwright page to wrap in one
            step_number: Replay step the verdict is attached to

        Returns:
            FocusTrapResult; never raises
        """
        tools = page if isinstance(page, PlaywrightTools) else PlaywrightTools(page)

        try:
            detection = await tools.evaluate(PREPARE_SCRIPT, {
                "modalSelectors": list(MODAL_SELECTORS),
                "focusableSelector": FOCUSABLE_SELECTOR,
                "stateKey": STATE_KEY,
            })
        except Exception as e:
            self.log.warning("Focus trap test failed", step=step_number, error=str(e))
            return FocusTrapResult(step=step_number, tested=False, reason=f"Test error: {e}")

        if not detection or not detection.get("detected"):
            return FocusTrapResult(step=step_number, tested=False, reason=REASON_NO_MODAL)

        modal_info = ModalInfo.from_dict(detection)
        self.log.info(
            "Modal detected, testing focus trap",
            step=step_number,
            selector=modal_info.selector,
            focusable_count=modal_info.focusable_count,
        )

        try:
            if modal_info.focusable_count == 0:
                return FocusTrapResult(
                    step=step_number,
                    tested=False,
                    reason=REASON_NO_FOCUSABLE,
                    modal_info=modal_info,
                )

            dom_test = await self._dom_traversal(tools, modal_info.focusable_count)
            keyboard_test = await self._keyboard_traversal(tools, modal_info.focusable_count)

        except Exception as e:
            self.log.warning("Focus trap test failed", step=step_number, error=str(e))
            return FocusTrapResult(
                step=step_number,
                tested=False,
                reason=f"Test error: {e}",
                modal_info=modal_info,
            )

        finally:
            await self._restore_focus(tools, step_number)

        return self._compose(step_number, modal_info, dom_test, keyboard_test)

    async def _dom_traversal(self, tools: PlaywrightTools, focusable_count: int) -> TraversalResult:
        max_tabs = self.traversal_bound(focusable_count)
        visited: set[Optional[str]] = set()
        index = 0

        await self._focus_element(tools, index)

        for tab_count in range(1, max_tabs + 1):
            index = (index + 1) % focusable_count
            focus = await self._focus_element(tools, index)

            if not focus.get("inModal"):
                return TraversalResult(
                    method="dom",
                    success=False,
                    reason=REASON_ESCAPED,
                    tab_count=tab_count,
                    focusable_count=focusable_count,
                    escaped_to=focus.get("tag") or "unknown",
                )

            key = focus.get("key")
            if key in visited and len(visited) == focusable_count:
                return TraversalResult(
                    method="dom",
                    success=True,
                    reason=REASON_CYCLE,
                    tab_count=tab_count,
                    focusable_count=focusable_count,
                )
            visited.add(key)

        return TraversalResult(
            method="dom",
            success=True,
            reason=REASON_CONFINED,
            tab_count=max_tabs,
            focusable_count=focusable_count,
        )

    async def _keyboard_traversal(self, tools: PlaywrightTools, focusable_count: int) -> TraversalResult:
        """Tab through the modal with real key events.

        Errors are reported on the result rather than raised; the DOM pass
        verdict still stands without a keyboard verdict.
        """
        max_tabs = min(self.traversal_bound(focusable_count), self.max_keyboard_tabs)
        tab_count = 0

        try:
            await self._focus_element(tools, 0)

            for tab_count in range(1, max_tabs + 1):
                await tools.press_key("Tab")
                focus = await tools.evaluate(ACTIVE_ELEMENT_SCRIPT, {"stateKey": STATE_KEY})

                if not focus.get("inModal"):
                    return TraversalResult(
                        method="keyboard",
                        success=False,
                        reason=REASON_ESCAPED,
                        tab_count=tab_count,
                        escaped_to=focus.get("tag") or "unknown",
                    )

        except Exception as e:
            self.log.warning("Keyboard focus test failed", error=str(e))
            return TraversalResult(method="keyboard", tab_count=tab_count, error=str(e))

        return TraversalResult(
            method="keyboard",
            success=True,
            reason=REASON_CONFINED,
            tab_count=max_tabs,
        )

    async def _focus_element(self, tools: PlaywrightTools, index: int) -> dict:
        return await tools.evaluate(FOCUS_ELEMENT_SCRIPT, {"index": index, "stateKey": STATE_KEY})

    async def _restore_focus(self, tools: PlaywrightTools, step_number: int) -> None:
        try:
            await tools.evaluate(RESTORE_FOCUS_SCRIPT, {"stateKey": STATE_KEY})
        except Exception as e:
            self.log.warning("Could not restore original focus", step=step_number, error=str(e))

    def _compose(
        self,
        step_number: int,
        modal_info: ModalInfo,
        dom_test: TraversalResult,
        keyboard_test: TraversalResult,
    ) -> FocusTrapResult:
        escaped = next((t for t in (dom_test, keyboard_test) if t.escaped), None)

        if escaped is not None:
            self.log.warning(
                "Focus escaped modal",
                step=step_number,
                method=escaped.method,
                tab_count=escaped.tab_count,
                escaped_to=escaped.escaped_to,
            )
            success, reason, tab_count = False, REASON_ESCAPED, escaped.tab_count
        else:
            success, reason, tab_count = True, dom_test.reason, dom_test.tab_count

        return FocusTrapResult(
            step=step_number,
            tested=True,
            reason=reason,
            modal_info=modal_info,
            tab_count=tab_count,
            success=success,
            dom_test=dom_test,
            keyboard_test=keyboard_test,
        )


async def probe_focus_trap(page: Any, step_number: int) -> FocusTrapResult:
    """Convenience function to probe a page with a default tester."""
    return await FocusTrapTester().test_focus_trap(page, step_number)
