"""Chat command handlers exposed to the host runtime."""

import logging
from pathlib import Path

from ipcrae.core.config import IPCRAEConfig
from ipcrae.core.errors import IPCRAEError
from ipcrae.core.policy import evaluate_write_policy
from ipcrae.core.snapshot import SnapshotReader
from ipcrae.core.types import (
    CaptureEntry,
    CommandContext,
    CommandResult,
    LocalNoteEntry,
    ProjectSyncEntry,
    PromoteLocalNoteEntry,
    StatusSnapshot,
    WriteStability,
)
from ipcrae.vault.commit import promote_local_note
from ipcrae.vault.notes import capture_inbox, write_local_note
from ipcrae.vault.sync import sync_project_artifacts

logger = logging.getLogger(__name__)


def _error_text(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


def _loaded(summary: str | None, path: str | None) -> str:
    if summary:
        return "loaded"
    return f"missing ({path})" if path else "n/a"


def format_next_fixes(snapshot: StatusSnapshot) -> list[str]:
    """Actionable steps for a degraded vault or an untracked project."""
    labels = {
        snapshot.context_path: "Create required context file",
        snapshot.instructions_path: "Create required instructions file",
        snapshot.phase_index_path: "Create required phase index file",
    }
    fixes = [f"- {labels[path]}: {path}" for path in snapshot.missing_required_paths]
    if snapshot.project_tracking_path and not snapshot.project_tracking_summary:
        fixes.append(
            f"- Run /ipcrae-sync to initialize tracking: {snapshot.project_tracking_path}"
        )
    if not fixes:
        return []
    fixes.append("- Re-run /ipcrae-status after applying the fixes above.")
    return ["Next fixes:", *fixes]


def format_status(config: IPCRAEConfig, snapshot: StatusSnapshot) -> str:
    lines = [
        "IPCRAE status:",
        f"- root: {config.ipcrae_root}",
        f"- contextMode: {config.context_mode}",
        f"- cdeMode: {snapshot.mode}",
        f"- domain: {snapshot.domain or '(unknown)'}",
        f"- project: {snapshot.project_slug or '(unknown)'}",
        f"- instructions: {_loaded(snapshot.instructions_summary, snapshot.instructions_path)}",
        f"- phases: {_loaded(snapshot.phase_summary, snapshot.phase_index_path)}",
        f"- tracking: {_loaded(snapshot.project_tracking_summary, snapshot.project_tracking_path)}",
    ]
    if snapshot.missing_required_paths:
        lines.append(f"- missing: {', '.join(snapshot.missing_required_paths)}")

    fixes = format_next_fixes(snapshot)
    if fixes:
        lines.extend(["", *fixes])
    if snapshot.phase_summary:
        lines.extend(["", "Phase summary:", snapshot.phase_summary])
    if snapshot.project_tracking_summary:
        lines.extend(["", "Project tracking:", snapshot.project_tracking_summary])
    return "\n".join(lines)


class CommandHandlers:
    """Command implementations bound to one config and snapshot reader.

    Every write goes through the write policy first. Validation and I/O
    failures come back as text, never as exceptions.
    """

    def __init__(self, config: IPCRAEConfig, reader: SnapshotReader):
        self.config = config
        self.reader = reader

    @property
    def root(self) -> Path:
        return self.config.ipcrae_root

    async def _gate(self, stability: WriteStability) -> tuple[StatusSnapshot, str | None]:
        snapshot = await self.reader.resolve(self.config)
        policy = evaluate_write_policy(snapshot, stability)
        if not policy.allowed:
            logger.info(f"Write blocked ({stability}): {policy.reason}")
        return snapshot, None if policy.allowed else policy.reason

    async def capture(self, ctx: CommandContext) -> CommandResult:
        """/capture <text>: new inbox file."""
        text = (ctx.args or "").strip()
        if not self.config.auto_capture:
            return CommandResult(
                "IPCRAE capture is disabled by plugin config (autoCapture=false)."
            )
        if not text:
            return CommandResult("Usage: /capture <texte>")
        try:
            snapshot, denied = await self._gate(WriteStability.VOLATILE)
            if denied:
                return CommandResult(denied)
            path = await capture_inbox(
                self.root,
                CaptureEntry(
                    text=text,
                    channel=ctx.channel,
                    sender_id=ctx.sender_id,
                    project_slug=snapshot.project_slug,
                ),
            )
        except (IPCRAEError, OSError) as e:
            return CommandResult(f"Capture failed: {_error_text(e)}")
        return CommandResult(f"Captured to {path}")

    async def capture_local(self, ctx: CommandContext) -> CommandResult:
        """/capture-local <text>: volatile local note, allowed even when degraded."""
        text = (ctx.args or "").strip()
        if not text:
            return CommandResult("Usage: /capture-local <texte>")
        try:
            snapshot, denied = await self._gate(WriteStability.VOLATILE)
            if denied:
                return CommandResult(denied)
            path = await write_local_note(
                self.root,
                LocalNoteEntry(
                    text=text,
                    channel=ctx.channel,
                    sender_id=ctx.sender_id,
                    project_slug=snapshot.project_slug,
                ),
            )
        except (IPCRAEError, OSError) as e:
            return CommandResult(f"Local note failed: {_error_text(e)}")
        return CommandResult(f"Local note saved to {path}")

    async def promote_note(self, ctx: CommandContext) -> CommandResult:
        """/promote-note <path>: stable knowledge from a local note."""
        local_path = (ctx.args or "").strip()
        if not local_path:
            return CommandResult("Usage: /promote-note <local-note-path>")
        try:
            snapshot, denied = await self._gate(WriteStability.STABLE)
            if denied:
                return CommandResult(denied)
            result = await promote_local_note(
                self.root,
                PromoteLocalNoteEntry(
                    local_note_path=local_path,
                    project_slug=snapshot.project_slug,
                    domain=snapshot.domain,
                ),
            )
        except (IPCRAEError, OSError) as e:
            return CommandResult(f"Promotion failed: {_error_text(e)}")
        return CommandResult(
            "\n".join(
                [
                    "Local note promoted to stable knowledge:",
                    f"- knowledge: {result.knowledge_path}",
                    f"- source: {result.source_path}",
                ]
            )
        )

    async def sync(self, ctx: CommandContext) -> CommandResult:
        """/ipcrae-sync [action]: regenerate project index, merge tracking/memory."""
        try:
            snapshot, denied = await self._gate(WriteStability.STABLE)
            if denied:
                return CommandResult(denied)
            if not snapshot.project_slug:
                return CommandResult(
                    "IPCRAE sync failed: no active project "
                    "(set projectSlug or 'Projet actif:' in context.md)."
                )
            result = await sync_project_artifacts(
                self.root,
                ProjectSyncEntry(
                    project_slug=snapshot.project_slug,
                    domain=snapshot.domain,
                    action_text=ctx.args,
                ),
            )
        except (IPCRAEError, OSError) as e:
            return CommandResult(f"IPCRAE sync failed: {_error_text(e)}")
        return CommandResult(
            "\n".join(
                [
                    f"IPCRAE project synced for {snapshot.project_slug}:",
                    f"- index: {result.index_path}",
                    f"- tracking: {result.tracking_path}",
                    f"- memory: {result.memory_path}",
                ]
            )
        )

    async def status(self, ctx: CommandContext) -> CommandResult:
        """/ipcrae-status: vault status with next fixes."""
        try:
            snapshot = await self.reader.resolve(self.config)
        except Exception as e:
            logger.warning(f"Status resolution failed: {e}")
            return CommandResult(f"IPCRAE status error: {_error_text(e)}")
        return CommandResult(format_status(self.config, snapshot))
