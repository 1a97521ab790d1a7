"""Daily journal for agent sessions."""

import logging
from datetime import datetime
from pathlib import Path

from ipcrae.core.types import JournalEntry
from ipcrae.vault.files import append_text
from ipcrae.vault.layout import get_journal_path
from ipcrae.vault.notes import format_time, utc_date

logger = logging.getLogger(__name__)


def format_journal_block(when: datetime, entry: JournalEntry) -> str:
    duration = f"{entry.duration_ms} ms" if entry.duration_ms is not None else "n/a"
    lines = [
        f"## OpenClaw session {format_time(when)}",
        f"- sessionId: {entry.session_id}",
        f"- agentId: {entry.agent_id or 'unknown'}",
        f"- messageCount: {entry.message_count}",
        f"- durationMs: {duration}",
        "",
        "",
    ]
    return "\n".join(lines)


async def write_journal_entry(root: Path, when: datetime, entry: JournalEntry) -> str:
    """
    Append a session summary to the day's journal.

    Args:
        root: Vault root
        when: Session end time; selects the daily file
        entry: Session summary

    Returns:
        Path of the journal file
    """
    path = get_journal_path(root, utc_date(when))
    await append_text(path, format_journal_block(when, entry))
    logger.info(f"Session journal appended: {path}")
    return str(path)
