"""Shared types and data structures for the IPCRAE vault bridge."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class CdeMode(StrEnum):
    """Operating mode derived from the presence of required vault files."""

    NORMAL = "normal"
    DEGRADED = "degraded"


class WriteStability(StrEnum):
    """Class of a vault write, as seen by the write policy."""

    VOLATILE = "volatile"  # inbox captures, local notes
    STABLE = "stable"  # knowledge notes, project artifacts


@dataclass(frozen=True)
class IdentitySource:
    """Domain and project slug as supplied by one source."""

    domain: str | None = None
    project_slug: str | None = None


@dataclass(frozen=True)
class StatusSnapshot:
    """Result of one snapshot resolution pass.

    Built fresh on every resolve; only the underlying file reads are cached.
    """

    context_path: str
    instructions_path: str
    phase_index_path: str
    domain: str | None = None
    project_slug: str | None = None
    project_tracking_path: str | None = None
    instructions_summary: str | None = None
    phase_summary: str | None = None
    project_tracking_summary: str | None = None
    mode: CdeMode = CdeMode.NORMAL
    missing_required_paths: tuple[str, ...] = ()

    def __post_init__(self):
        expected = CdeMode.DEGRADED if self.missing_required_paths else CdeMode.NORMAL
        if self.mode != expected:
            raise ValueError(
                f"mode {self.mode} inconsistent with missing paths "
                f"{list(self.missing_required_paths)}"
            )

    @property
    def degraded(self) -> bool:
        return self.mode == CdeMode.DEGRADED


@dataclass(frozen=True)
class WritePolicyResult:
    """Outcome of the write policy gate."""

    allowed: bool
    reason: str | None = None


@dataclass
class JournalEntry:
    """Session summary appended to the daily journal."""

    session_id: str
    message_count: int
    duration_ms: int | None = None
    agent_id: str | None = None


@dataclass
class CaptureEntry:
    """Inbox capture request."""

    text: str
    channel: str | None = None
    sender_id: str | None = None
    project_slug: str | None = None


@dataclass
class LocalNoteEntry:
    """Local working note request."""

    text: str
    channel: str | None = None
    sender_id: str | None = None
    project_slug: str | None = None


@dataclass
class KnowledgeEntry:
    """Stable knowledge note request."""

    text: str
    title: str | None = None
    project_slug: str | None = None
    domain: str | None = None
    tags: list[str] | None = None
    sources: list[str] | None = None
    strict: bool = True


@dataclass
class PromoteLocalNoteEntry:
    """Promotion of a local note into stable knowledge."""

    local_note_path: str
    title: str | None = None
    project_slug: str | None = None
    domain: str | None = None
    tags: list[str] | None = None


@dataclass
class ProjectSyncEntry:
    """Project artifact synchronization request."""

    project_slug: str
    domain: str | None = None
    action_text: str | None = None


@dataclass(frozen=True)
class PromotionResult:
    knowledge_path: str
    source_path: str


@dataclass(frozen=True)
class SyncResult:
    index_path: str
    tracking_path: str
    memory_path: str


@dataclass(frozen=True)
class CommandResult:
    """Text returned to the host for a command invocation."""

    text: str


@dataclass
class CommandContext:
    """Arguments the host passes to a command handler."""

    args: str | None = None
    channel: str | None = None
    sender_id: str | None = None
