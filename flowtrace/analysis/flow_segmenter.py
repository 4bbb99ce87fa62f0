"""Flow segmenter - groups a finished step list into logical flows.

A boundary is declared before step ``i`` when the step navigates, when the
sequence enters or leaves a modal, or when it switches between non-modal,
non-navigation contexts (e.g. main -> form). Each run between boundaries
becomes one Flow with a type, a parent flow, an analysis priority and a
token estimate.
"""

from typing import Optional, Sequence

import structlog

from ..recording.models import FlowContext, StepCategory, StepRecord
from ..utils.tokens import sum_token_estimates
from .models import Flow, FlowType

logger = structlog.get_logger()

DEFAULT_STEP_TOKENS = 1000


def identify_flow_boundaries(steps: Sequence[StepRecord]) -> list[int]:
    """Return the indices that start a new flow. Index 0 always does."""
    if not steps:
        return []

    boundaries = [0]
    for i in range(1, len(steps)):
        current = steps[i]
        previous = steps[i - 1]

        entering_modal = (
            current.flow_context == FlowContext.MODAL
            and previous.flow_context != FlowContext.MODAL
        )
        leaving_modal = (
            current.flow_context != FlowContext.MODAL
            and previous.flow_context == FlowContext.MODAL
        )
        context_switch = (
            current.flow_context != previous.flow_context
            and current.flow_context not in (FlowContext.MODAL, FlowContext.NAVIGATION)
        )

        if (
            current.action_type == StepCategory.NAVIGATION
            or entering_modal
            or leaving_modal
            or context_switch
        ):
            boundaries.append(i)

    return boundaries


def determine_flow_type(steps: Sequence[StepRecord]) -> FlowType:
    """Classify a run of steps."""
    action_types = [step.action_type for step in steps]

    if any(step.flow_context == FlowContext.MODAL for step in steps):
        return FlowType.MODAL_INTERACTION
    if StepCategory.NAVIGATION in action_types:
        return FlowType.NAVIGATION
    if StepCategory.FORM_INPUT in action_types:
        return FlowType.FORM_INTERACTION
    if all(action_type == StepCategory.INTERACTION for action_type in action_types):
        return FlowType.UI_INTERACTION
    return FlowType.MIXED


def calculate_flow_priority(flow_type: FlowType, is_modal: bool, step_count: int) -> float:
    """Score a flow for analysis ordering (higher is analysed first).

    Main flows outrank modals, forms outrank navigation, and longer flows get
    a small boost capped at 3.
    """
    priority = 0.0
    if not is_modal:
        priority += 10
    if flow_type == FlowType.FORM_INTERACTION:
        priority += 8
    if flow_type == FlowType.NAVIGATION:
        priority += 5
    priority += min(step_count * 0.5, 3)
    return priority


def build_step_children(steps: Sequence[StepRecord]) -> dict[int, list[int]]:
    """Map each step number to the steps that name it as parent."""
    children: dict[int, list[int]] = {step.step: [] for step in steps}
    for step in steps:
        if step.parent_step is not None and step.parent_step in children:
            children[step.parent_step].append(step.step)
    return children


def _find_parent_flow(first_step: StepRecord, flows: Sequence[Flow]) -> Optional[int]:
    parent_step = first_step.parent_step
    if parent_step is None:
        return None
    for flow in flows:
        if flow.start_step <= parent_step <= flow.end_step:
            return flow.flow_id
    return None


def _flow_name(flow_type: FlowType, flow_context: FlowContext, is_modal: bool, count: int) -> str:
    if is_modal:
        return f"Modal Interaction ({count} steps)"
    names = {
        FlowType.NAVIGATION: "Page Navigation",
        FlowType.FORM_INTERACTION: "Form Interaction",
        FlowType.UI_INTERACTION: "UI Interaction",
    }
    label = names.get(flow_type, f"{flow_context.value} Flow")
    return f"{label} ({count} steps)"


def _flow_description(flow_type: FlowType, is_modal: bool, steps: Sequence[StepRecord]) -> str:
    if is_modal:
        return f"Modal workflow from step {steps[0].step} to {steps[-1].step}"
    actions = " → ".join(step.action for step in steps)
    return f"{flow_type.value} workflow: {actions}"


def _analysis_group(flow_type: FlowType, is_modal: bool, parent_flow: Optional[int]) -> str:
    if is_modal and parent_flow:
        return f"modal_{parent_flow}"
    if flow_type == FlowType.NAVIGATION:
        return "navigation"
    if flow_type == FlowType.FORM_INTERACTION:
        return "forms"
    return "interactions"


class FlowSegmenter:
    """Segments a complete step list into contiguous flows.

    Example:
        segmenter = FlowSegmenter()
        flows = segmenter.segment(manifest.steps)
    """

    def __init__(self, default_step_tokens: int = DEFAULT_STEP_TOKENS):
        """Initialize segmenter.

        Args:
            default_step_tokens: Token estimate for steps that carry none
        """
        self.default_step_tokens = default_step_tokens
        self.log = logger.bind(component="flow_segmenter")

    def segment(
        self,
        steps: Sequence[StepRecord],
        session_id: Optional[str] = None,
        session_url: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> list[Flow]:
        """Group steps into flows.

        Args:
            steps: Finalized step records in step order
            session_id: Optional session id copied onto each flow
            session_url: Optional session URL copied onto each flow
            timestamp: Optional session timestamp copied onto each flow

        Returns:
            Flows in step order, tiling the input without gaps or overlaps
        """
        if not steps:
            return []

        boundaries = identify_flow_boundaries(steps)
        flows: list[Flow] = []

        for i, start in enumerate(boundaries):
            end = boundaries[i + 1] if i + 1 < len(boundaries) else len(steps)
            run = tuple(steps[start:end])

            flow_type = determine_flow_type(run)
            flow_context = run[0].flow_context
            is_modal = flow_context == FlowContext.MODAL
            parent_flow = _find_parent_flow(run[0], flows)

            flows.append(
                Flow(
                    flow_id=len(flows) + 1,
                    start_step=run[0].step,
                    end_step=run[-1].step,
                    steps=run,
                    flow_type=flow_type,
                    flow_context=flow_context,
                    is_modal=is_modal,
                    parent_flow=parent_flow,
                    priority=calculate_flow_priority(flow_type, is_modal, len(run)),
                    token_estimate=sum_token_estimates(
                        (step.token_estimate for step in run),
                        default=self.default_step_tokens,
                    ),
                    name=_flow_name(flow_type, flow_context, is_modal, len(run)),
                    description=_flow_description(flow_type, is_modal, run),
                    analysis_group=_analysis_group(flow_type, is_modal, parent_flow),
                    session_id=session_id,
                    session_url=session_url,
                    timestamp=timestamp,
                )
            )

        self.log.info("Flows identified", step_count=len(steps), flow_count=len(flows))
        return flows


def segment_flows(steps: Sequence[StepRecord], **kwargs) -> list[Flow]:
    """Convenience function to segment steps with a default segmenter."""
    return FlowSegmenter().segment(steps, **kwargs)
