"""Context tracker - assigns parent steps from UI nesting.

Consumes recorded actions one at a time, in chronological order, and keeps a
stack of open UI contexts (modals, forms, expanded menus). Each action yields
a StepRecord whose parent step reflects that nesting:

- the first step has no parent
- closing a context (or navigating while one is open) returns to the step
  that opened it
- everything else is parented to the previous step

One tracker holds the state of one session. Create a new tracker (or call
``reset``) for every recording or replay session.
"""

import copy
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog

from .models import (
    Action,
    ActionType,
    ContextFrame,
    ContextType,
    FlowContext,
    FlowStateTally,
    StepCategory,
    StepRecord,
    TrackerState,
    UIState,
)
from .selectors import SelectorTraits, classify_selector

logger = structlog.get_logger()


class ContextTracker:
    """Stack-based parent-step tracker for a single session.

    Example:
        tracker = ContextTracker()
        for action in actions:
            record = tracker.record_action(action)
    """

    def __init__(self, classifier=classify_selector):
        """Initialize tracker.

        Args:
            classifier: Callable mapping a selector to SelectorTraits
        """
        self.classifier = classifier
        self.log = logger.bind(component="context_tracker")
        self.reset()

    def reset(self) -> None:
        """Clear all state for a new session."""
        self._current_step = 0
        self._context_stack: list[ContextFrame] = []
        self._modal_depth = 0
        self._flow_states: dict[FlowContext, FlowStateTally] = {}
        self._root_context = ContextFrame(
            type=ContextType.MAIN,
            start_step=0,
            parent_step=None,
        )

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def modal_depth(self) -> int:
        return self._modal_depth

    @property
    def current_context(self) -> ContextFrame:
        """Innermost open context, or the session's main context."""
        if self._context_stack:
            return self._context_stack[-1]
        return self._root_context

    def record_action(
        self,
        action: Action,
        token_estimate: Optional[int] = None,
    ) -> StepRecord:
        """Record the next action and determine its parent step.

        Args:
            action: The action, strictly after every previously recorded one
            token_estimate: Token estimate of the step's snapshot, if known

        Returns:
            StepRecord for the action
        """
        self._current_step += 1
        step = self._current_step
        traits = self.classifier(action.selector)
        depth_before = self._modal_depth

        if self._is_context_return(action, traits):
            parent_step = self._pop_context()
        elif self._is_context_start(action, traits):
            parent_step = step - 1
            self._push_context(traits)
        else:
            parent_step = step - 1

        if step == 1:
            parent_step = None

        # A step that opens or closes a modal belongs to that modal
        in_modal = max(depth_before, self._modal_depth) > 0

        record = StepRecord(
            step=step,
            parent_step=parent_step,
            action=action.type.value,
            action_type=self._categorize(action, traits),
            interaction_target=action.selector,
            flow_context=self._flow_context(action, traits, in_modal),
            ui_state=self._ui_state(traits, in_modal),
            timestamp=action.timestamp or datetime.now(timezone.utc).isoformat(),
            token_estimate=token_estimate,
        )

        self._update_flow_state(record)

        self.log.debug(
            "Step recorded",
            step=step,
            action=record.action,
            parent_step=parent_step,
            flow_context=record.flow_context.value,
        )
        return record

    def get_state(self) -> TrackerState:
        """Get a snapshot of the tracker state for diagnostics."""
        return TrackerState(
            current_step=self._current_step,
            context_stack=copy.deepcopy(self._context_stack),
            modal_depth=self._modal_depth,
            current_context=copy.deepcopy(self.current_context),
            flow_states=copy.deepcopy(self._flow_states),
        )

    # ==========================================================================
    # Context transitions
    # ==========================================================================

    def _is_context_return(self, action: Action, traits: SelectorTraits) -> bool:
        if action.type == ActionType.CLICK:
            return traits.is_modal_close or traits.is_form_cancel

        return action.type == ActionType.NAVIGATE and bool(self._context_stack)

    def _is_context_start(self, action: Action, traits: SelectorTraits) -> bool:
        if action.type != ActionType.CLICK:
            return False
        return traits.is_modal_open or traits.is_form_start or traits.is_expandable

    def _push_context(self, traits: SelectorTraits) -> None:
        step = self._current_step
        if traits.is_modal_open:
            context_type = ContextType.MODAL
            self._modal_depth += 1
        elif traits.is_form_start:
            context_type = ContextType.FORM
        else:
            # Expanded menus re-parent steps without changing the flow context
            context_type = ContextType.MAIN

        self._context_stack.append(
            ContextFrame(
                type=context_type,
                start_step=step,
                parent_step=step - 1 if step > 1 else None,
            )
        )

    def _pop_context(self) -> Optional[int]:
        """Leave the innermost context and return its opener's parent."""
        if not self._context_stack:
            return self._current_step - 1

        frame = self._context_stack.pop()
        frame.end_step = self._current_step
        if frame.is_modal:
            self._modal_depth = max(0, self._modal_depth - 1)
        return frame.parent_step

    # ==========================================================================
    # Step metadata
    # ==========================================================================

    def _categorize(self, action: Action, traits: SelectorTraits) -> StepCategory:
        if action.type in (ActionType.NAVIGATE, ActionType.SCROLL):
            return StepCategory.NAVIGATION
        if action.type == ActionType.CLICK:
            if traits.is_modal:
                return StepCategory.MODAL_INTERACTION
            if traits.is_form:
                return StepCategory.FORM_INTERACTION
            return StepCategory.INTERACTION
        if action.type in (ActionType.FILL, ActionType.SELECT):
            return StepCategory.FORM_INPUT
        if action.type == ActionType.HOVER:
            return StepCategory.INTERACTION
        return StepCategory.OTHER

    def _flow_context(
        self,
        action: Action,
        traits: SelectorTraits,
        in_modal: bool,
    ) -> FlowContext:
        if in_modal:
            return FlowContext.MODAL
        if action.type == ActionType.NAVIGATE:
            return FlowContext.NAVIGATION
        if traits.is_form:
            return FlowContext.FORM
        if self.current_context.type == ContextType.FORM:
            return FlowContext.FORM
        return FlowContext.MAIN

    def _ui_state(self, traits: SelectorTraits, in_modal: bool) -> UIState:
        if in_modal:
            return UIState.MODAL_OPEN
        if traits.is_form:
            return UIState.FORM_ACTIVE
        return UIState.DEFAULT

    def _update_flow_state(self, record: StepRecord) -> None:
        tally = self._flow_states.get(record.flow_context)
        if tally is None:
            self._flow_states[record.flow_context] = FlowStateTally(
                start_step=record.step,
                last_step=record.step,
            )
        else:
            tally.last_step = record.step
            tally.action_count += 1


def track_actions(
    actions: Iterable[Action],
    token_estimates: Optional[Iterable[Optional[int]]] = None,
) -> list[StepRecord]:
    """Run a fresh tracker over a complete action sequence.

    Args:
        actions: Actions in chronological order
        token_estimates: Optional per-action token estimates, aligned with actions

    Returns:
        One StepRecord per action
    """
    tracker = ContextTracker()
    actions = list(actions)
    estimates = list(token_estimates) if token_estimates is not None else [None] * len(actions)
    if len(estimates) != len(actions):
        raise ValueError("token_estimates must align with actions")

    return [
        tracker.record_action(action, token_estimate=estimate)
        for action, estimate in zip(actions, estimates)
    ]
