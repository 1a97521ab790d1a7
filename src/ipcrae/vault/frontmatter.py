"""YAML frontmatter parsing and writing for vault notes."""

import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DELIMITER = "---"


class _FlowList(list):
    """A list of scalars written on one line (``tags: [a, b]``)."""


class _FrontmatterDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _represent_flow_list(dumper: yaml.SafeDumper, value: _FlowList) -> yaml.Node:
    return dumper.represent_sequence("tag:yaml.org,2002:seq", value, flow_style=True)


_FrontmatterDumper.add_representer(_FlowList, _represent_flow_list)


def _prepare(value: Any) -> Any:
    if isinstance(value, list) and not any(isinstance(v, dict) for v in value):
        return _FlowList(value)
    return value


def render_frontmatter(fields: dict[str, Any]) -> str:
    """
    Write frontmatter fields as a YAML block.

    Lists of scalars render in flow style (``tags: [a, b]``), lists of
    mappings as indented block items. None values are skipped. Key order is
    preserved and scalars are quoted wherever YAML needs it.

    Args:
        fields: Ordered frontmatter fields

    Returns:
        Frontmatter string with --- delimiters and a trailing newline
    """
    data = {key: _prepare(value) for key, value in fields.items() if value is not None}
    if not data:
        return f"{DELIMITER}\n{DELIMITER}\n"
    body = yaml.dump(
        data,
        Dumper=_FrontmatterDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
    return f"{DELIMITER}\n{body}{DELIMITER}\n"


def parse_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """
    Parse YAML frontmatter from note content.

    Args:
        content: Full note content including frontmatter

    Returns:
        (frontmatter, body). Frontmatter is None when the note has no
        well-formed leading block; body is then the full content.
    """
    lines = content.split("\n")
    if not lines or lines[0].strip() != DELIMITER:
        return None, content

    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            break
    else:
        return None, content

    try:
        data = yaml.safe_load("\n".join(lines[1:index]))
    except yaml.YAMLError as e:
        logger.debug(f"Unparseable frontmatter: {e}")
        return None, content

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return None, content
    return data, "\n".join(lines[index + 1 :])
