"""Scanning: frame gating, identification and pending confirmations."""

from .gate import ActionKind, GateAction, GateConfig, GatePhase, GateState, ScanGate
from .pipeline import identify, identify_async, is_auto_confirmed, make_lookup, select_best_frame
from .session import ScanSession
from .tray import PendingScan, ScanTray

__all__ = [
    "ActionKind",
    "GateAction",
    "GateConfig",
    "GatePhase",
    "GateState",
    "ScanGate",
    "ScanSession",
    "identify",
    "identify_async",
    "is_auto_confirmed",
    "make_lookup",
    "select_best_frame",
    "PendingScan",
    "ScanTray",
]
