"""Batch packer - greedy, priority-first packing of flows under a token budget."""

from typing import Sequence

import structlog

from .models import AnalysisType, Batch, Flow, FlowType

logger = structlog.get_logger()

DEFAULT_MAX_TOKENS_PER_BATCH = 800000


def determine_batch_analysis_type(flows: Sequence[Flow]) -> AnalysisType:
    """Pick the analysis type shared by every flow, or the general one."""
    flow_types = [flow.flow_type for flow in flows]

    if all(t == FlowType.FORM_INTERACTION for t in flow_types):
        return AnalysisType.FORM
    if all(t == FlowType.MODAL_INTERACTION for t in flow_types):
        return AnalysisType.MODAL
    if all(t == FlowType.NAVIGATION for t in flow_types):
        return AnalysisType.NAVIGATION
    return AnalysisType.GENERAL


class BatchPacker:
    """Packs flows into batches that respect a token budget.

    Flows are stable-sorted by priority (highest first) and walked once. A
    flow that would push the running batch over budget closes that batch
    and starts the next one. A flow larger than the whole budget gets a
    batch to itself; flows are never dropped or split.
    """

    def __init__(self, max_tokens_per_batch: int = DEFAULT_MAX_TOKENS_PER_BATCH):
        if max_tokens_per_batch <= 0:
            raise ValueError("max_tokens_per_batch must be greater than zero")
        self.max_tokens_per_batch = max_tokens_per_batch
        self.log = logger.bind(component="batch_packer")

    def pack(self, flows: Sequence[Flow]) -> list[Batch]:
        """Pack flows into batches.

        Args:
            flows: Flows to pack, in original flow order

        Returns:
            Batches in priority-descending order, each flow in exactly one
        """
        ordered = sorted(flows, key=lambda flow: flow.priority, reverse=True)

        batches: list[Batch] = []
        current: list[Flow] = []
        current_tokens = 0

        for flow in ordered:
            if current and current_tokens + flow.token_estimate > self.max_tokens_per_batch:
                batches.append(self._close(batches, current, current_tokens))
                current = []
                current_tokens = 0

            current.append(flow)
            current_tokens += flow.token_estimate

        if current:
            batches.append(self._close(batches, current, current_tokens))

        self.log.info(
            "Batches prepared",
            flow_count=len(ordered),
            batch_count=len(batches),
            max_tokens_per_batch=self.max_tokens_per_batch,
        )
        return batches

    def _close(self, batches: list[Batch], flows: list[Flow], tokens: int) -> Batch:
        if tokens > self.max_tokens_per_batch:
            self.log.warning(
                "Flow exceeds batch budget on its own",
                flow_id=flows[0].flow_id,
                token_estimate=tokens,
            )
        return Batch(
            batch_id=len(batches) + 1,
            flows=tuple(flows),
            token_estimate=tokens,
            analysis_type=determine_batch_analysis_type(flows),
        )


def pack_batches(
    flows: Sequence[Flow],
    max_tokens_per_batch: int = DEFAULT_MAX_TOKENS_PER_BATCH,
) -> list[Batch]:
    """Convenience function to pack flows with a one-off packer."""
    return BatchPacker(max_tokens_per_batch).pack(flows)
