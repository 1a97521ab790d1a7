"""Managed blocks: machine-owned regions inside user-editable markdown.

A block is delimited by a start/end HTML comment pair keyed by a block id::

    <!-- openclaw:<id>:start -->
    ...
    <!-- openclaw:<id>:end -->

Content outside the markers belongs to the user and is preserved.
"""

import re
from dataclasses import dataclass

MARKER_PREFIX = "<!-- openclaw:"
ESCAPED_MARKER_PREFIX = "&lt;!-- openclaw:"

_LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\n)+")


@dataclass(frozen=True)
class ManagedBlockParts:
    """A file split around one managed block."""

    before: str
    body: str
    after: str


def block_markers(block_id: str) -> tuple[str, str]:
    return (
        f"{MARKER_PREFIX}{block_id}:start -->",
        f"{MARKER_PREFIX}{block_id}:end -->",
    )


def neutralize_markers(body: str) -> str:
    """Escape marker-like comments so block text can never open or close a block."""
    return body.replace(MARKER_PREFIX, ESCAPED_MARKER_PREFIX)


def render_managed_block(block_id: str, body: str) -> str:
    start, end = block_markers(block_id)
    return f"{start}\n{neutralize_markers(body.strip())}\n{end}"


def parse_managed_block(content: str, block_id: str) -> ManagedBlockParts | None:
    """
    Locate the first well-formed block for block_id.

    Args:
        content: File content
        block_id: Managed block id

    Returns:
        The parts around the block, or None if there is no start marker
        followed by an end marker
    """
    start, end = block_markers(block_id)
    start_index = content.find(start)
    if start_index < 0:
        return None
    body_index = start_index + len(start)
    end_index = content.find(end, body_index)
    if end_index < 0:
        return None
    return ManagedBlockParts(
        before=content[:start_index],
        body=content[body_index:end_index].strip("\n"),
        after=content[end_index + len(end) :],
    )


def _trim_blank_lines(text: str) -> str:
    return _LEADING_BLANK_LINES.sub("", text).rstrip()


def _drop_blocks(content: str, block_id: str) -> str:
    parts = parse_managed_block(content, block_id)
    while parts is not None:
        content = _join(parts.before.rstrip(), _trim_blank_lines(parts.after))
        parts = parse_managed_block(content, block_id)
    return content


def _join(*sections: str) -> str:
    return "\n\n".join(section for section in sections if section) + "\n"


def replace_managed_block(content: str, block_id: str, body: str) -> str:
    """
    Put body into the block for block_id, replacing it in place or appending.

    Surrounding content is kept with exactly one blank line on each side of
    the block. Leftover duplicate blocks after the first are removed, so a
    file holds at most one block per id.

    Args:
        content: Current file content (may be empty)
        block_id: Managed block id
        body: New block body

    Returns:
        New file content ending with a single newline
    """
    managed = render_managed_block(block_id, body)
    parts = parse_managed_block(content, block_id)
    if parts is None:
        return _join(content.rstrip(), managed)
    after = _drop_blocks(parts.after, block_id)
    return _join(parts.before.rstrip(), managed, _trim_blank_lines(after))


def ensure_heading(content: str, heading: str) -> str:
    """Seed an empty file with a top-level heading."""
    return content if content.strip() else f"{heading}\n\n"
