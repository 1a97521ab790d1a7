"""Commit pipeline for hot-to-cold memory transfer.

Promotion copies a volatile local note into a stable knowledge note. The
local file stays where it is and is recorded as the knowledge source.
"""

import logging
from pathlib import Path
from typing import Protocol

from ipcrae.core.errors import EmptyNoteError, MissingNotePathError
from ipcrae.core.types import KnowledgeEntry, PromoteLocalNoteEntry, PromotionResult
from ipcrae.vault.files import read_text
from ipcrae.vault.frontmatter import parse_frontmatter
from ipcrae.vault.notes import write_knowledge_note

logger = logging.getLogger(__name__)


class NoteStripper(Protocol):
    """Turns a raw local-notes file into knowledge body text."""

    def __call__(self, raw: str) -> str:
        pass


class LocalNoteStripper:
    """Drops the heading and metadata lines written by ``write_local_note``.

    Pattern based: any line starting with ``## Note `` or ``- `` goes,
    including ordinary bullet lists in the note body.
    """

    prefixes = ("## Note ", "- ")

    def __call__(self, raw: str) -> str:
        _, body = parse_frontmatter(raw)
        kept = [
            line
            for line in body.split("\n")
            if not line.strip().startswith(self.prefixes)
        ]
        return "\n".join(kept).strip()


async def promote_local_note(
    root: Path,
    entry: PromoteLocalNoteEntry,
    stripper: NoteStripper | None = None,
) -> PromotionResult:
    """
    Promote a local note into the Knowledge folder.

    Args:
        root: Vault root
        entry: Promotion request
        stripper: Body extraction strategy (LocalNoteStripper by default)

    Returns:
        PromotionResult with the new knowledge path and the source path

    Raises:
        MissingNotePathError: If no path was given
        EmptyNoteError: If nothing is left after stripping
        OSError: If the local note cannot be read
    """
    source_path = entry.local_note_path.strip()
    if not source_path:
        raise MissingNotePathError("Missing local note path")

    raw = await read_text(Path(source_path))
    text = (stripper or LocalNoteStripper())(raw)
    if not text:
        raise EmptyNoteError(f"Local note is empty: {source_path}")

    title = (entry.title or "").strip() or Path(source_path).stem
    knowledge_path = await write_knowledge_note(
        root,
        KnowledgeEntry(
            text=text,
            title=title,
            project_slug=entry.project_slug,
            domain=entry.domain,
            tags=entry.tags,
            sources=[source_path],
        ),
    )
    logger.info(f"Promoted {source_path} -> {knowledge_path}")
    return PromotionResult(knowledge_path=knowledge_path, source_path=source_path)
