"""Splitting of YAML frontmatter from markdown bodies."""

from __future__ import annotations

import re
from typing import Any, Dict, Tuple

import yaml

_FRONTMATTER_RE = re.compile(
    r"\A(?:\ufeff)?---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


class FrontmatterError(ValueError):
    """The frontmatter block is missing or is not a YAML mapping."""


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return the parsed frontmatter mapping and the remaining body."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        raise FrontmatterError("missing '---' frontmatter block")

    raw_block = match.group(1)
    try:
        data = yaml.safe_load(raw_block) if raw_block.strip() else {}
    except (yaml.YAMLError, ValueError) as exc:
        raise FrontmatterError(f"invalid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"frontmatter must be a mapping, got {type(data).__name__}"
        )

    body = text[match.end():]
    return data, body
