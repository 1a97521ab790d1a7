"""Status snapshot of the vault: identity, required files, CDE mode."""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any

from ipcrae.core.cache import TextCache
from ipcrae.core.config import IPCRAEConfig
from ipcrae.core.types import CdeMode, IdentitySource, StatusSnapshot
from ipcrae.vault.layout import (
    get_context_path,
    get_instructions_path,
    get_phase_index_path,
    get_project_tracking_path,
    get_state_path,
)

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 900
TRUNCATION_MARKER = "[truncated]"

_DOMAIN_PATTERN = re.compile(r"Domaine actif:\s*([a-z0-9_-]+)", re.IGNORECASE)
_PROJECT_PATTERN = re.compile(r"Projet actif:\s*([a-z0-9_-]+)", re.IGNORECASE)
_SLUG_INVALID = re.compile(r"[^a-zA-Z0-9_-]+")


def truncate_text(text: str, max_chars: int) -> str:
    """
    Cut text to a character budget with a visible marker.

    Args:
        text: Input text
        max_chars: Budget; text at or under it is returned unchanged

    Returns:
        Original text, or its head followed by a blank line and [truncated]
    """
    if len(text) <= max_chars:
        return text
    head = text[: max(0, max_chars - 20)].rstrip()
    return f"{head}\n\n{TRUNCATION_MARKER}"


def as_slug(value: Any) -> str | None:
    """Normalize a state-file value; all-invalid input becomes None."""
    if not isinstance(value, str):
        return None
    normalized = _SLUG_INVALID.sub("-", value.strip())
    return normalized.strip("-") or None


def _match(pattern: re.Pattern, text: str | None) -> str | None:
    if not text:
        return None
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def identity_from_context(context_md: str | None) -> IdentitySource:
    """Pull "Domaine actif:" / "Projet actif:" out of the context document."""
    return IdentitySource(
        domain=_match(_DOMAIN_PATTERN, context_md),
        project_slug=_match(_PROJECT_PATTERN, context_md),
    )


def identity_from_state(raw: str | None) -> IdentitySource:
    """Parse state.json; invalid JSON counts as no state at all."""
    if not raw:
        return IdentitySource()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring invalid state.json: {e}")
        return IdentitySource()
    if not isinstance(parsed, dict):
        logger.warning(f"Ignoring state.json: expected object, got {type(parsed).__name__}")
        return IdentitySource()
    return IdentitySource(
        domain=as_slug(parsed.get("domain")),
        project_slug=as_slug(parsed.get("projectSlug")),
    )


def resolve_identity(*sources: IdentitySource) -> IdentitySource:
    """First non-empty value wins, per field, in source order."""
    domain = next((s.domain for s in sources if s.domain), None)
    project_slug = next((s.project_slug for s in sources if s.project_slug), None)
    return IdentitySource(domain=domain, project_slug=project_slug)


def _summarize(text: str | None) -> str | None:
    if not text:
        return None
    return truncate_text(text.strip(), SUMMARY_MAX_CHARS)


class SnapshotReader:
    """Resolves a StatusSnapshot from the vault through a TextCache."""

    def __init__(self, cache: TextCache | None = None):
        """
        Initialize the reader.

        Args:
            cache: Text cache to read through (a private one by default)
        """
        self.cache = cache or TextCache()

    async def read_text(self, path: Path | None, config: IPCRAEConfig) -> str | None:
        """Read a vault file through the cache with the configured TTL."""
        if path is None:
            return None
        return await self.cache.get_or_load(path, config.context_cache_ttl)

    async def resolve(self, config: IPCRAEConfig) -> StatusSnapshot:
        """
        Resolve identity, read required files and compute the CDE mode.

        Args:
            config: Resolved plugin configuration

        Returns:
            A fresh StatusSnapshot
        """
        root = config.ipcrae_root
        context_path = get_context_path(root)
        instructions_path = get_instructions_path(root)
        phase_index_path = get_phase_index_path(root)

        context_md = await self.read_text(context_path, config)
        state_raw = await self.read_text(get_state_path(root), config)

        identity = resolve_identity(
            IdentitySource(domain=config.domain, project_slug=config.project_slug),
            identity_from_state(state_raw),
            identity_from_context(context_md),
        )
        tracking_path = (
            get_project_tracking_path(root, identity.project_slug)
            if identity.project_slug
            else None
        )

        instructions, phase_index, tracking = await asyncio.gather(
            self.read_text(instructions_path, config),
            self.read_text(phase_index_path, config),
            self.read_text(tracking_path, config),
        )

        # empty files count as missing
        missing = tuple(
            str(path)
            for path, text in (
                (context_path, context_md),
                (instructions_path, instructions),
                (phase_index_path, phase_index),
            )
            if not text
        )
        if missing:
            logger.debug(f"Snapshot degraded, missing: {', '.join(missing)}")

        return StatusSnapshot(
            domain=identity.domain,
            project_slug=identity.project_slug,
            context_path=str(context_path),
            instructions_path=str(instructions_path),
            phase_index_path=str(phase_index_path),
            project_tracking_path=str(tracking_path) if tracking_path else None,
            instructions_summary=_summarize(instructions),
            phase_summary=_summarize(phase_index),
            project_tracking_summary=_summarize(tracking),
            mode=CdeMode.DEGRADED if missing else CdeMode.NORMAL,
            missing_required_paths=missing,
        )
