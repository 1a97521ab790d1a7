"""Vault layout and path helpers.

Every vault path is derived from the root by a fixed relative layout.
Helpers only compute paths; directories are created by the writers.
"""

from datetime import date
from pathlib import Path

CONTROL_DIR = ".ipcrae"
LOCAL_NOTES_DIR = Path(".ipcrae-project") / "local-notes"
SESSION_FILENAME = "openclaw.md"


def get_context_path(root: Path) -> Path:
    """Global context document (required)."""
    return root / CONTROL_DIR / "context.md"


def get_instructions_path(root: Path) -> Path:
    """Instructions document (required)."""
    return root / CONTROL_DIR / "instructions.md"


def get_state_path(root: Path) -> Path:
    """Structured state document (optional JSON)."""
    return root / CONTROL_DIR / "state.json"


def get_rule_zero_path(root: Path) -> Path:
    """Pre-treatment gate prompt, used for context assembly only."""
    return root / CONTROL_DIR / "prompts" / "core_ai_pretreatment_gate.md"


def get_phase_index_path(root: Path) -> Path:
    """Phase index (required)."""
    return root / "Phases" / "index.md"


def get_project_path(root: Path, project_slug: str) -> Path:
    """
    Get a project folder path.

    Args:
        root: Vault root
        project_slug: Project slug

    Returns:
        Path to Projets/<slug>
    """
    return root / "Projets" / project_slug


def get_project_tracking_path(root: Path, project_slug: str) -> Path:
    return get_project_path(root, project_slug) / "tracking.md"


def get_domain_memory_path(root: Path, domain: str) -> Path:
    """Read-only domain memory."""
    return root / "memory" / f"{domain}.md"


def get_journal_path(root: Path, target_date: date) -> Path:
    """
    Get the daily journal file for a date.

    Args:
        root: Vault root
        target_date: Day of the journal

    Returns:
        Path like Journal/Daily/2024-01-28/openclaw.md
    """
    return root / "Journal" / "Daily" / target_date.isoformat() / SESSION_FILENAME


def get_inbox_path(root: Path) -> Path:
    """Inbox captures folder."""
    return root / "Inbox" / "idees"


def get_local_note_path(root: Path, target_date: date) -> Path:
    """One local-notes file per calendar day."""
    return root / LOCAL_NOTES_DIR / target_date.isoformat() / SESSION_FILENAME


def get_knowledge_path(root: Path) -> Path:
    """Stable knowledge folder."""
    return root / "Knowledge"
