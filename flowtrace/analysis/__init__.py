"""Analysis module - flow segmentation and token-bounded batching."""

from .batch_packer import BatchPacker, determine_batch_analysis_type, pack_batches
from .flow_segmenter import (
    FlowSegmenter,
    build_step_children,
    calculate_flow_priority,
    determine_flow_type,
    identify_flow_boundaries,
    segment_flows,
)
from .models import AnalysisType, Batch, Flow, FlowAnalysis, FlowType
from .pipeline import analyze_flows

__all__ = [
    # Models
    "AnalysisType",
    "Batch",
    "Flow",
    "FlowAnalysis",
    "FlowType",
    # Segmentation
    "FlowSegmenter",
    "build_step_children",
    "calculate_flow_priority",
    "determine_flow_type",
    "identify_flow_boundaries",
    "segment_flows",
    # Batching
    "BatchPacker",
    "determine_batch_analysis_type",
    "pack_batches",
    # Pipeline
    "analyze_flows",
]
