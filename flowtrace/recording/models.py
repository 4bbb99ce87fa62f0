"""Data models for recorded actions and step tracking."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ActionType(str, Enum):
    """Recorded browser action types."""

    NAVIGATE = "navigate"
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    SCROLL = "scroll"
    HOVER = "hover"
    ERROR = "error"  # Raw action that could not be parsed


class StepCategory(str, Enum):
    """Coarse category of a step, used for flow boundaries and flow typing."""

    NAVIGATION = "navigation"
    INTERACTION = "interaction"
    MODAL_INTERACTION = "modal_interaction"
    FORM_INTERACTION = "form_interaction"
    FORM_INPUT = "form_input"
    OTHER = "other"


class FlowContext(str, Enum):
    """Logical context a step belongs to."""

    MAIN = "main"
    MODAL = "modal"
    FORM = "form"
    NAVIGATION = "navigation"


class UIState(str, Enum):
    """UI state after a step."""

    DEFAULT = "default"
    MODAL_OPEN = "modal_open"
    FORM_ACTIVE = "form_active"


class ContextType(str, Enum):
    """Kinds of nested UI context tracked on the context stack."""

    MAIN = "main"
    MODAL = "modal"
    FORM = "form"


@dataclass(frozen=True)
class Position:
    """Scroll position."""

    x: float = 0
    y: float = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Position"]:
        if data is None:
            return None
        return cls(x=data.get("x") or 0, y=data.get("y") or 0)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class ActionValidation:
    """Validation outcome attached to a parsed action."""

    is_valid: bool = True
    errors: tuple[str, ...] = ()
    is_sensitive: bool = False

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "is_sensitive": self.is_sensitive,
        }


@dataclass(frozen=True)
class Action:
    """A single recorded browser interaction. Immutable once recorded."""

    type: ActionType
    timestamp: str = ""
    selector: Optional[str] = None
    value: Optional[str] = None
    url: Optional[str] = None
    position: Optional[Position] = None
    description: Optional[str] = None
    validation: ActionValidation = field(default_factory=ActionValidation)
    original_action: Optional[dict] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        """Create an Action from a recorder dictionary without validation."""
        raw_type = data.get("type", "")
        try:
            action_type = ActionType(raw_type)
        except ValueError:
            action_type = ActionType.ERROR

        return cls(
            type=action_type,
            timestamp=str(data.get("timestamp") or ""),
            selector=data.get("selector"),
            value=data.get("value"),
            url=data.get("url"),
            position=Position.from_dict(data.get("position")),
        )

    def to_dict(self) -> dict:
        """Convert to a recorder-compatible dictionary."""
        result: dict[str, Any] = {"type": self.type.value, "timestamp": self.timestamp}
        if self.selector is not None:
            result["selector"] = self.selector
        if self.value is not None:
            result["value"] = self.value
        if self.url is not None:
            result["url"] = self.url
        if self.position is not None:
            result["position"] = self.position.to_dict()
        if self.description:
            result["description"] = self.description
        result["validation"] = self.validation.to_dict()
        return result


@dataclass(frozen=True)
class StepRecord:
    """Step emitted by the context tracker, one per recorded action."""

    step: int
    parent_step: Optional[int]
    action: str
    action_type: StepCategory
    interaction_target: Optional[str]
    flow_context: FlowContext
    ui_state: UIState
    timestamp: str
    token_estimate: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "parent_step": self.parent_step,
            "action": self.action,
            "action_type": self.action_type.value,
            "interaction_target": self.interaction_target,
            "flow_context": self.flow_context.value,
            "ui_state": self.ui_state.value,
            "timestamp": self.timestamp,
            "token_estimate": self.token_estimate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StepRecord":
        return cls(
            step=data["step"],
            parent_step=data.get("parent_step"),
            action=data.get("action", ""),
            action_type=StepCategory(data.get("action_type", StepCategory.OTHER.value)),
            interaction_target=data.get("interaction_target"),
            flow_context=FlowContext(data.get("flow_context", FlowContext.MAIN.value)),
            ui_state=UIState(data.get("ui_state", UIState.DEFAULT.value)),
            timestamp=data.get("timestamp", ""),
            token_estimate=data.get("token_estimate"),
        )


@dataclass
class ContextFrame:
    """A nested UI context (modal, form) on the tracker's stack."""

    type: ContextType
    start_step: int
    parent_step: Optional[int]
    end_step: Optional[int] = None

    @property
    def is_modal(self) -> bool:
        return self.type == ContextType.MODAL


@dataclass
class FlowStateTally:
    """Diagnostic tally of steps seen per flow context."""

    start_step: int
    last_step: int
    action_count: int = 1


@dataclass
class TrackerState:
    """Snapshot of the context tracker's internal state."""

    current_step: int
    context_stack: list[ContextFrame]
    modal_depth: int
    current_context: ContextFrame
    flow_states: dict[FlowContext, FlowStateTally]
