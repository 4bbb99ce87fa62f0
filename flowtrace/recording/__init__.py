"""Recording module - recorded actions and parent-step tracking.

Turns a flat, timestamped action sequence into step records whose parent
step reflects UI nesting (modals, forms, expanded menus).
"""

from .action_parser import (
    parse_action,
    parse_actions,
    validate_action_sequence,
)
from .context_tracker import ContextTracker, track_actions
from .models import (
    Action,
    ActionType,
    ActionValidation,
    ContextFrame,
    ContextType,
    FlowContext,
    FlowStateTally,
    Position,
    StepCategory,
    StepRecord,
    TrackerState,
    UIState,
)
from .selectors import SelectorTraits, classify_selector

__all__ = [
    # Models
    "Action",
    "ActionType",
    "ActionValidation",
    "ContextFrame",
    "ContextType",
    "FlowContext",
    "FlowStateTally",
    "Position",
    "StepCategory",
    "StepRecord",
    "TrackerState",
    "UIState",
    # Parsing
    "parse_action",
    "parse_actions",
    "validate_action_sequence",
    # Tracking
    "ContextTracker",
    "track_actions",
    "SelectorTraits",
    "classify_selector",
]
