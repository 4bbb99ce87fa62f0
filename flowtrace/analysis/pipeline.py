"""Flow analysis pipeline - manifest -> flows -> batches.

Downstream analysis must degrade to "no grouped flows" rather than crash a
session, so any failure here is logged and an empty result returned.
"""

from typing import TYPE_CHECKING, Optional, Union

import structlog

from ..config import get_settings
from ..recording.models import StepRecord
from ..utils.logging import log_operation
from .batch_packer import BatchPacker
from .flow_segmenter import FlowSegmenter
from .models import FlowAnalysis

if TYPE_CHECKING:
    from ..replay.models import SessionManifest

logger = structlog.get_logger()


def _manifest_fields(manifest) -> tuple[list[StepRecord], Optional[str], Optional[str], Optional[str]]:
    if isinstance(manifest, dict):
        steps = [
            step if isinstance(step, StepRecord) else StepRecord.from_dict(step)
            for step in manifest.get("steps") or []
        ]
        return steps, manifest.get("session_id"), manifest.get("url"), manifest.get("timestamp")

    return manifest.step_records(), manifest.session_id, manifest.url, manifest.timestamp


def analyze_flows(
    manifest: Union[dict, "SessionManifest", None],
    max_tokens_per_batch: Optional[int] = None,
) -> FlowAnalysis:
    """Segment a session manifest into flows and pack them into batches.

    Args:
        manifest: SessionManifest or its dict form (``steps`` plus session metadata)
        max_tokens_per_batch: Batch budget; defaults to the configured value

    Returns:
        FlowAnalysis. Empty (with ``error`` set) when anything goes wrong.
    """
    log = logger.bind(component="flow_analysis")

    if manifest is None:
        return FlowAnalysis()

    try:
        steps, session_id, url, timestamp = _manifest_fields(manifest)
        if not steps:
            return FlowAnalysis()

        settings = get_settings()
        budget = settings.max_tokens_per_batch if max_tokens_per_batch is None else max_tokens_per_batch

        with log_operation(
            "analyze_flows",
            logger=log,
            step_count=len(steps),
            session_id=session_id,
        ) as op:
            segmenter = FlowSegmenter(default_step_tokens=settings.default_step_token_estimate)
            flows = segmenter.segment(
                steps,
                session_id=session_id,
                session_url=url,
                timestamp=timestamp,
            )
            batches = BatchPacker(budget).pack(flows)
            op["flow_count"] = len(flows)
            op["batch_count"] = len(batches)

        return FlowAnalysis(flows=flows, batches=batches)

    except Exception as e:
        log.error("Flow analysis failed", error=str(e), exc_info=True)
        return FlowAnalysis(error=str(e))
