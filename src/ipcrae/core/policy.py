"""Write policy: which classes of vault writes the CDE mode allows.

Volatile notes exist to capture information even when the vault is
inconsistent, so they are never blocked. Stable writes require normal mode.
"""

from ipcrae.core.types import CdeMode, StatusSnapshot, WritePolicyResult, WriteStability

VOLATILE_COMMAND = "/capture-local"


def format_denial(missing_paths: tuple[str, ...] | list[str]) -> str:
    """Build the denial reason for a degraded snapshot."""
    missing = ", ".join(missing_paths) if missing_paths else "unknown prerequisites"
    return (
        f"IPCRAE write policy blocked: CDE mode is degraded. "
        f"Missing required files: {missing}. "
        f"Use {VOLATILE_COMMAND} for volatile notes, then restore required CDE "
        f"files before stable writes."
    )


def evaluate_write_policy(
    snapshot: StatusSnapshot,
    stability: WriteStability | str,
) -> WritePolicyResult:
    """
    Decide whether a write of the given stability may proceed.

    Args:
        snapshot: Current vault status
        stability: "volatile" or "stable"

    Returns:
        WritePolicyResult; reason is set only when denied
    """
    if WriteStability(stability) == WriteStability.VOLATILE:
        return WritePolicyResult(allowed=True)
    if snapshot.mode == CdeMode.NORMAL:
        return WritePolicyResult(allowed=True)
    return WritePolicyResult(
        allowed=False,
        reason=format_denial(snapshot.missing_required_paths),
    )
