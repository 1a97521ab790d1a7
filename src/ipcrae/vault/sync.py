"""Project artifact synchronization.

``index.md`` is regenerated on every sync. ``tracking.md`` and ``memory.md``
are user-editable; sync only rewrites their managed block.
"""

import logging
from datetime import datetime
from pathlib import Path

from ipcrae.core.errors import PartialCommitError, VaultValidationError
from ipcrae.core.types import ProjectSyncEntry, SyncResult
from ipcrae.vault.blocks import ensure_heading, replace_managed_block
from ipcrae.vault.files import read_text_or_empty, write_text
from ipcrae.vault.layout import get_project_path
from ipcrae.vault.notes import iso_timestamp, utc_now

logger = logging.getLogger(__name__)

TRACKING_BLOCK_ID = "ipcrae-tracking-sync"
MEMORY_BLOCK_ID = "ipcrae-memory-sync"


class ArtifactCommit:
    """Stages several file writes and commits them in order.

    Writes are sequential and individually atomic; there is no rollback.
    A failure after the first write raises PartialCommitError naming what
    was already written.
    """

    def __init__(self):
        self._staged: list[tuple[Path, str]] = []

    def stage(self, path: Path, content: str) -> None:
        self._staged.append((path, content))

    @property
    def staged_paths(self) -> list[str]:
        return [str(path) for path, _ in self._staged]

    async def commit(self) -> list[str]:
        """
        Write every staged file.

        Returns:
            Paths written, in order

        Raises:
            OSError: If the first write fails (nothing was written)
            PartialCommitError: If a later write fails
        """
        written: list[str] = []
        for path, content in self._staged:
            try:
                await write_text(path, content)
            except OSError as e:
                if not written:
                    raise
                raise PartialCommitError(
                    f"Sync interrupted at {path}: {e}", written=written, failed=str(path)
                ) from e
            written.append(str(path))
        self._staged.clear()
        return written


def _section(title: str, body: str) -> str:
    return f"## {title}\n{body.strip()}\n"


def render_index(project_slug: str, domain: str | None, updated: str) -> str:
    pilot = "\n".join(
        [
            f"- project: {project_slug}",
            f"- domain: {domain or 'unknown'}",
            f"- updated: {updated}",
        ]
    )
    return "\n".join(
        [
            f"# Projet {project_slug}",
            "",
            _section("Pilotage", pilot),
            _section("Liens", "- tracking.md\n- memory.md"),
        ]
    )


def _sync_block(field: str, action_text: str | None, updated: str) -> str:
    action = (action_text or "").strip() or "(none)"
    return "\n".join(
        ["## OpenClaw Sync", f"- updated: {updated}", f"- {field}: {action}"]
    )


async def sync_project_artifacts(
    root: Path,
    entry: ProjectSyncEntry,
    now: datetime | None = None,
) -> SyncResult:
    """
    Regenerate a project's index and merge its tracking/memory blocks.

    Args:
        root: Vault root
        entry: Sync request
        now: Timestamp override

    Returns:
        SyncResult with the three artifact paths
    """
    slug = entry.project_slug.strip()
    if not slug:
        raise VaultValidationError("Missing project slug")

    updated = iso_timestamp(now or utc_now())
    base = get_project_path(root, slug)
    index_path = base / "index.md"
    tracking_path = base / "tracking.md"
    memory_path = base / "memory.md"

    current_tracking = await read_text_or_empty(tracking_path)
    current_memory = await read_text_or_empty(memory_path)

    commit = ArtifactCommit()
    commit.stage(index_path, render_index(slug, entry.domain, updated))
    commit.stage(
        tracking_path,
        replace_managed_block(
            ensure_heading(current_tracking, "# Tracking"),
            TRACKING_BLOCK_ID,
            _sync_block("next_action", entry.action_text, updated),
        ),
    )
    commit.stage(
        memory_path,
        replace_managed_block(
            ensure_heading(current_memory, "# Memory"),
            MEMORY_BLOCK_ID,
            _sync_block("latest_signal", entry.action_text, updated),
        ),
    )
    await commit.commit()
    logger.info(f"Project artifacts synced: {base}")

    return SyncResult(
        index_path=str(index_path),
        tracking_path=str(tracking_path),
        memory_path=str(memory_path),
    )
