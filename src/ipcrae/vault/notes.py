"""Note writers for the vault: inbox captures, local notes, knowledge notes.

Inbox captures and local notes are volatile; knowledge notes are stable and
validated before anything touches the filesystem.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path

from ipcrae.core.errors import (
    EmptyNoteError,
    InvalidDomainError,
    InvalidSourcesError,
    InvalidTagsError,
)
from ipcrae.core.types import CaptureEntry, KnowledgeEntry, LocalNoteEntry
from ipcrae.vault.files import append_text, write_text
from ipcrae.vault.frontmatter import render_frontmatter
from ipcrae.vault.layout import get_inbox_path, get_knowledge_path, get_local_note_path

logger = logging.getLogger(__name__)

SLUG_MAX_CHARS = 60
TITLE_SEED_WORDS = 8

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_TAG_INVALID = re.compile(r"[^a-z0-9_-]+")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """UTC timestamp with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_time(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%H:%M:%S")


def utc_date(moment: datetime) -> date:
    return moment.astimezone(timezone.utc).date()


def slugify(text: str, default: str = "capture") -> str:
    """
    Make a filename-safe slug.

    Lowercases, collapses runs of non [a-z0-9] characters into a single
    hyphen, trims hyphens and caps the result at 60 characters.
    """
    slug = _SLUG_INVALID.sub("-", text.lower()).strip("-")
    return slug[:SLUG_MAX_CHARS] or default


def title_seed(text: str, words: int = TITLE_SEED_WORDS) -> str:
    """First few words of text, used to derive titles and slugs."""
    return " ".join(text.split()[:words])


def normalize_tag(tag: str) -> str:
    """Lowercase a tag and reduce it to [a-z0-9_-] with single hyphens."""
    normalized = _TAG_INVALID.sub("-", tag.strip().lower()).strip("-")
    return re.sub(r"-{2,}", "-", normalized)


def validate_domain(domain: str | None) -> str:
    normalized = normalize_tag(domain or "")
    if not normalized:
        raise InvalidDomainError(
            "Invalid knowledge domain: expected a non-empty domain "
            "(letters/numbers/_/-)."
        )
    return normalized


def validate_tags(tags: list[str] | None) -> list[str]:
    normalized: list[str] = []
    for tag in tags or []:
        value = normalize_tag(tag)
        if value and value not in normalized:
            normalized.append(value)
    if not normalized:
        raise InvalidTagsError(
            "Invalid knowledge tags: provide at least one tag "
            "(letters/numbers/_/- after normalization)."
        )
    return normalized


def validate_sources(sources: list[str] | None, strict: bool) -> list[str]:
    normalized = [source.strip() for source in sources or [] if source.strip()]
    if strict and not normalized:
        raise InvalidSourcesError(
            "Invalid knowledge sources: at least one source path is required "
            "in strict mode."
        )
    return normalized


@dataclass(frozen=True)
class KnowledgeNote:
    """A validated stable knowledge note.

    Construct through ``from_entry`` so domain, tags and sources always pass
    normalization.
    """

    title: str
    text: str
    domain: str
    tags: tuple[str, ...]
    sources: tuple[str, ...]
    created: date
    project_slug: str | None = None

    @classmethod
    def from_entry(cls, entry: KnowledgeEntry, today: date) -> "KnowledgeNote":
        """
        Validate a knowledge request.

        Raises:
            InvalidDomainError: Domain is empty after normalization
            InvalidTagsError: No tag survives normalization
            InvalidSourcesError: Strict mode and no source path
        """
        domain = validate_domain(entry.domain)
        tags = validate_tags(entry.tags if entry.tags is not None else [domain])
        sources = validate_sources(entry.sources, entry.strict)
        title = (entry.title or "").strip() or title_seed(entry.text) or "knowledge"
        return cls(
            title=title,
            text=entry.text.strip(),
            domain=domain,
            tags=tuple(tags),
            sources=tuple(sources),
            created=today,
            project_slug=entry.project_slug,
        )

    @property
    def filename(self) -> str:
        return f"{self.created.isoformat()}-{slugify(self.title)}.md"

    def render(self) -> str:
        frontmatter = render_frontmatter(
            {
                "type": "knowledge",
                "tags": list(self.tags),
                "project": self.project_slug or None,
                "domain": self.domain,
                "status": "stable",
                "sources": [{"path": source} for source in self.sources],
                "created": self.created,
                "updated": self.created,
            }
        )
        return f"{frontmatter}\n# {self.title}\n\n{self.text}\n"


async def write_knowledge_note(
    root: Path,
    entry: KnowledgeEntry,
    now: datetime | None = None,
) -> str:
    """
    Write a new stable knowledge note.

    Args:
        root: Vault root
        entry: Knowledge request
        now: Timestamp override

    Returns:
        Path of the written note
    """
    note = KnowledgeNote.from_entry(entry, utc_date(now or utc_now()))
    path = get_knowledge_path(root) / note.filename
    await write_text(path, note.render())
    logger.info(f"Knowledge note written: {path}")
    return str(path)


async def capture_inbox(
    root: Path,
    entry: CaptureEntry,
    now: datetime | None = None,
) -> str:
    """
    Create a new inbox capture file.

    Args:
        root: Vault root
        entry: Capture request
        now: Timestamp override

    Returns:
        Path of the capture file

    Raises:
        EmptyNoteError: If the text is blank
    """
    text = entry.text.strip()
    if not text:
        raise EmptyNoteError("Capture text is empty")

    now = now or utc_now()
    prefix = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    path = get_inbox_path(root) / f"{prefix}-{slugify(title_seed(text))}.md"

    frontmatter = render_frontmatter(
        {
            "type": "inbox",
            "created": iso_timestamp(now),
            "channel": entry.channel or None,
            "sender": entry.sender_id or None,
            "project": entry.project_slug or None,
        }
    )
    content = f"{frontmatter}\n# Capture {utc_date(now).isoformat()}\n\n{text}\n"
    await write_text(path, content)
    logger.info(f"Inbox capture written: {path}")
    return str(path)


async def write_local_note(
    root: Path,
    entry: LocalNoteEntry,
    now: datetime | None = None,
) -> str:
    """
    Append a note block to today's local-notes file.

    Args:
        root: Vault root
        entry: Local note request
        now: Timestamp override

    Returns:
        Path of the day's local-notes file

    Raises:
        EmptyNoteError: If the text is blank
    """
    text = entry.text.strip()
    if not text:
        raise EmptyNoteError("Local note text is empty")

    now = now or utc_now()
    lines = [f"## Note {format_time(now)}"]
    if entry.channel:
        lines.append(f"- channel: {entry.channel}")
    if entry.sender_id:
        lines.append(f"- sender: {entry.sender_id}")
    if entry.project_slug:
        lines.append(f"- project: {entry.project_slug}")
    lines.extend(["", text, "", ""])

    path = get_local_note_path(root, utc_date(now))
    await append_text(path, "\n".join(lines))
    logger.info(f"Local note appended: {path}")
    return str(path)
