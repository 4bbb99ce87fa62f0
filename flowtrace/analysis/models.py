"""Data models for flow segmentation and batch packing."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..recording.models import FlowContext, StepRecord


class FlowType(str, Enum):
    """Classification of a flow by the steps it contains."""

    MODAL_INTERACTION = "modal_interaction"
    NAVIGATION = "navigation"
    FORM_INTERACTION = "form_interaction"
    UI_INTERACTION = "ui_interaction"
    MIXED = "mixed"


class AnalysisType(str, Enum):
    """Kind of accessibility analysis a batch calls for."""

    FORM = "form_accessibility"
    MODAL = "modal_accessibility"
    NAVIGATION = "navigation_accessibility"
    GENERAL = "general_accessibility"


@dataclass(frozen=True)
class Flow:
    """A contiguous run of steps sharing a logical context."""

    flow_id: int
    start_step: int
    end_step: int
    steps: tuple[StepRecord, ...]
    flow_type: FlowType
    flow_context: FlowContext
    is_modal: bool
    parent_flow: Optional[int]
    priority: float
    token_estimate: int
    name: str = ""
    description: str = ""
    analysis_group: str = ""
    session_id: Optional[str] = None
    session_url: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def to_dict(self) -> dict:
        return {
            "flow_id": self.flow_id,
            "start_step": self.start_step,
            "end_step": self.end_step,
            "step_count": self.step_count,
            "steps": [step.to_dict() for step in self.steps],
            "flow_type": self.flow_type.value,
            "flow_context": self.flow_context.value,
            "is_modal": self.is_modal,
            "parent_flow": self.parent_flow,
            "priority": self.priority,
            "token_estimate": self.token_estimate,
            "name": self.name,
            "description": self.description,
            "analysis_group": self.analysis_group,
            "session_id": self.session_id,
            "session_url": self.session_url,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Batch:
    """A token-bounded group of flows submitted together for analysis."""

    batch_id: int
    flows: tuple[Flow, ...]
    token_estimate: int
    analysis_type: AnalysisType

    @property
    def flow_ids(self) -> list[int]:
        return [flow.flow_id for flow in self.flows]

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "flows": [flow.to_dict() for flow in self.flows],
            "token_estimate": self.token_estimate,
            "analysis_type": self.analysis_type.value,
        }


@dataclass
class FlowAnalysis:
    """Flows and batches produced for one session manifest."""

    flows: list[Flow] = field(default_factory=list)
    batches: list[Batch] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.flows

    def to_dict(self) -> dict:
        return {
            "flows": [flow.to_dict() for flow in self.flows],
            "batches": [batch.to_dict() for batch in self.batches],
            "error": self.error,
        }
