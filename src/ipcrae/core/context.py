"""Prompt context assembled from the vault for the host agent."""

import asyncio

from ipcrae.core.config import ContextMode, IPCRAEConfig
from ipcrae.core.snapshot import SnapshotReader, truncate_text
from ipcrae.vault.layout import (
    get_context_path,
    get_domain_memory_path,
    get_instructions_path,
    get_rule_zero_path,
)

RULE_ZERO_MAX_CHARS = 1200
INSTRUCTIONS_MAX_CHARS = 1200
CONTEXT_MAX_CHARS = 2200
DOMAIN_MEMORY_MAX_CHARS = 1400


def _block(title: str, body: str | None) -> str | None:
    if not body or not body.strip():
        return None
    return f"## {title}\n{body.strip()}"


async def build_context(config: IPCRAEConfig, reader: SnapshotReader | None = None) -> str:
    """
    Render the vault context block prepended to agent prompts.

    Args:
        config: Resolved plugin configuration
        reader: Snapshot reader to share its cache (a fresh one by default)

    Returns:
        Markdown context, or "" when the global context document is absent
    """
    reader = reader or SnapshotReader()
    root = config.ipcrae_root

    context_md = await reader.read_text(get_context_path(root), config)
    if not context_md:
        return ""

    if config.context_mode == ContextMode.MINIMAL:
        blocks = [
            "# IPCRAE Context (minimal)",
            _block("Global Context", truncate_text(context_md.strip(), CONTEXT_MAX_CHARS)),
        ]
        return "\n\n".join(b for b in blocks if b)

    status = await reader.resolve(config)
    memory_path = get_domain_memory_path(root, status.domain) if status.domain else None
    rule_zero, instructions, domain_memory = await asyncio.gather(
        reader.read_text(get_rule_zero_path(root), config),
        reader.read_text(get_instructions_path(root), config),
        reader.read_text(memory_path, config),
    )

    def budget(text: str | None, max_chars: int) -> str | None:
        if config.context_mode == ContextMode.COMPACT:
            return truncate_text((text or "").strip(), max_chars)
        return text

    blocks = [
        "# IPCRAE Context",
        _block("Rule 0", budget(rule_zero, RULE_ZERO_MAX_CHARS)),
        _block("Instructions", budget(instructions, INSTRUCTIONS_MAX_CHARS)),
        _block("Global Context", budget(context_md, CONTEXT_MAX_CHARS)),
        _block(
            f"Domain Memory ({status.domain})" if status.domain else "Domain Memory",
            budget(domain_memory, DOMAIN_MEMORY_MAX_CHARS),
        ),
        _block("Active Phase", status.phase_summary),
        _block(
            f"Project Tracking ({status.project_slug})"
            if status.project_slug
            else "Project Tracking",
            status.project_tracking_summary,
        ),
    ]
    return "\n\n".join(b for b in blocks if b)
