"""Data models for replay snapshots, manifests and focus-trap probes."""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..recording.models import FlowContext, StepCategory, StepRecord, UIState


@dataclass(frozen=True)
class ModalInfo:
    """A visible modal found on the page."""

    selector: str
    modal_element: str
    focusable_count: int
    has_aria_modal: bool = False
    has_role: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ModalInfo":
        return cls(
            selector=data.get("selector", ""),
            modal_element=data.get("modalElement", ""),
            focusable_count=int(data.get("focusableCount", 0)),
            has_aria_modal=bool(data.get("hasAriaModal", False)),
            has_role=bool(data.get("hasRole", False)),
        )

    def to_dict(self) -> dict:
        return {
            "selector": self.selector,
            "modal_element": self.modal_element,
            "focusable_count": self.focusable_count,
            "has_aria_modal": self.has_aria_modal,
            "has_role": self.has_role,
        }


@dataclass
class TraversalResult:
    """Outcome of one traversal pass (DOM-simulated or keyboard-driven)."""

    method: str
    success: bool = False
    reason: Optional[str] = None
    tab_count: int = 0
    focusable_count: Optional[int] = None
    escaped_to: Optional[str] = None
    error: Optional[str] = None

    @property
    def escaped(self) -> bool:
        return self.error is None and not self.success

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "method": self.method,
            "success": self.success,
            "reason": self.reason,
            "tab_count": self.tab_count,
        }
        if self.focusable_count is not None:
            result["focusable_count"] = self.focusable_count
        if self.escaped_to is not None:
            result["escaped_to"] = self.escaped_to
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class FocusTrapResult:
    """Verdict of a focus-trap probe for one replay step."""

    step: int
    tested: bool
    reason: Optional[str] = None
    modal_info: Optional[ModalInfo] = None
    tab_count: Optional[int] = None
    success: Optional[bool] = None
    dom_test: Optional[TraversalResult] = None
    keyboard_test: Optional[TraversalResult] = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"step": self.step, "tested": self.tested}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.modal_info is not None:
            result["modal_info"] = self.modal_info.to_dict()
        if self.tab_count is not None:
            result["tab_count"] = self.tab_count
        if self.success is not None:
            result["success"] = self.success
        if self.dom_test is not None:
            result["dom_test"] = self.dom_test.to_dict()
        if self.keyboard_test is not None:
            result["keyboard_test"] = self.keyboard_test.to_dict()
        return result


@dataclass(frozen=True)
class SnapshotFiles:
    """Storage keys for the artifacts of one step."""

    html: str
    axe_context: str
    screenshot: Optional[str] = None

    @classmethod
    def for_step(cls, step: int, with_screenshot: bool) -> "SnapshotFiles":
        return cls(
            html=f"step_{step}_snapshot.html",
            axe_context=f"step_{step}_axe_context.json",
            screenshot=f"step_{step}_screenshot.png" if with_screenshot else None,
        )


@dataclass
class Snapshot:
    """Everything captured after replaying one action."""

    step: int
    action: str
    timestamp: str
    files: SnapshotFiles
    html: str = ""
    axe_context: dict = field(default_factory=dict)
    screenshot: Optional[bytes] = None
    focus_trap_test: Optional[FocusTrapResult] = None

    @property
    def html_length(self) -> int:
        return len(self.html)

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "action": self.action,
            "timestamp": self.timestamp,
            "files": {
                "html": self.files.html,
                "axe_context": self.files.axe_context,
                "screenshot": self.files.screenshot,
            },
            "axe_context": self.axe_context,
            "focus_trap_test": self.focus_trap_test.to_dict() if self.focus_trap_test else None,
        }


@dataclass(frozen=True)
class ManifestStep:
    """A step record joined with the artifacts captured for it."""

    step: int
    parent_step: Optional[int]
    action: str
    action_type: StepCategory
    interaction_target: Optional[str]
    flow_context: FlowContext
    ui_state: UIState
    timestamp: str
    html_file: str
    axe_file: str
    screenshot_file: Optional[str]
    token_estimate: int

    @classmethod
    def from_step(cls, record: StepRecord, snapshot: Snapshot) -> "ManifestStep":
        return cls(
            step=record.step,
            parent_step=record.parent_step,
            action=record.action,
            action_type=record.action_type,
            interaction_target=record.interaction_target,
            flow_context=record.flow_context,
            ui_state=record.ui_state,
            timestamp=snapshot.timestamp,
            html_file=snapshot.files.html,
            axe_file=snapshot.files.axe_context,
            screenshot_file=snapshot.files.screenshot,
            token_estimate=record.token_estimate or 0,
        )

    def to_step_record(self) -> StepRecord:
        return StepRecord(
            step=self.step,
            parent_step=self.parent_step,
            action=self.action,
            action_type=self.action_type,
            interaction_target=self.interaction_target,
            flow_context=self.flow_context,
            ui_state=self.ui_state,
            timestamp=self.timestamp,
            token_estimate=self.token_estimate,
        )

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
            "html_file": self.html_file,
            "axe_file": self.axe_file,
            "screenshot_file": self.screenshot_file,
            "token_estimate": self.token_estimate,
        }


@dataclass
class SessionManifest:
    """Ordered step manifest plus session metadata."""

    session_id: str
    url: Optional[str]
    timestamp: str
    steps: list[ManifestStep] = field(default_factory=list)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step_records(self) -> list[StepRecord]:
        return [step.to_step_record() for step in self.steps]

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "url": self.url,
            "timestamp": self.timestamp,
            "total_steps": self.total_steps,
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass
class ReplayResult:
    """Result of replaying a recorded session."""

    success: bool
    session_id: str
    snapshots: list[Snapshot] = field(default_factory=list)
    manifest: Optional[SessionManifest] = None
    error: Optional[str] = None
    failed_step: Optional[int] = None

    @property
    def snapshot_count(self) -> int:
        return len(self.snapshots)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "session_id": self.session_id,
            "snapshot_count": self.snapshot_count,
            "snapshots": [snapshot.to_dict() for snapshot in self.snapshots],
            "manifest": self.manifest.to_dict() if self.manifest else None,
            "error": self.error,
            "failed_step": self.failed_step,
        }
