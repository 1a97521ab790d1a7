"""IPCRAE core library - snapshot, policy and context."""

from typing import TYPE_CHECKING

from ipcrae.core.types import (
    CdeMode,
    StatusSnapshot,
    WritePolicyResult,
    WriteStability,
)

if TYPE_CHECKING:
    from ipcrae.core.config import IPCRAEConfig
    from ipcrae.core.policy import evaluate_write_policy
    from ipcrae.core.snapshot import SnapshotReader

__all__ = [
    # Types
    "CdeMode",
    "StatusSnapshot",
    "WritePolicyResult",
    "WriteStability",
    # Config
    "IPCRAEConfig",
    # Policy
    "evaluate_write_policy",
    # Snapshot
    "SnapshotReader",
]


def __getattr__(name: str):
    if name == "IPCRAEConfig":
        from ipcrae.core.config import IPCRAEConfig

        return IPCRAEConfig
    if name == "evaluate_write_policy":
        from ipcrae.core.policy import evaluate_write_policy

        return evaluate_write_policy
    if name == "SnapshotReader":
        from ipcrae.core.snapshot import SnapshotReader

        return SnapshotReader
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
