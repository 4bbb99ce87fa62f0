"""flowtrace - structure recorded browser sessions for accessibility analysis.

Recorded actions -> ContextTracker -> step manifest -> FlowSegmenter ->
flows -> BatchPacker -> batches. During replay, FocusTrapTester probes each
step's visible modal for keyboard focus trapping.
"""

__version__ = "0.1.0"
