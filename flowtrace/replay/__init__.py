"""Replay module - sequential replay, snapshots and focus-trap probing."""

from .focus_trap import FocusTrapTester, probe_focus_trap
from .models import (
    FocusTrapResult,
    ManifestStep,
    ModalInfo,
    ReplayResult,
    SessionManifest,
    Snapshot,
    SnapshotFiles,
    TraversalResult,
)
from .replayer import (
    ActionExecutionError,
    Replayer,
    generate_replay_session_id,
    replay_with_browser,
)

__all__ = [
    # Models
    "FocusTrapResult",
    "ManifestStep",
    "ModalInfo",
    "ReplayResult",
    "SessionManifest",
    "Snapshot",
    "SnapshotFiles",
    "TraversalResult",
    # Focus trap
    "FocusTrapTester",
    "probe_focus_trap",
    # Replay
    "ActionExecutionError",
    "Replayer",
    "generate_replay_session_id",
    "replay_with_browser",
]
