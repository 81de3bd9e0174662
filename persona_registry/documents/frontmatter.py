"""
Metadata header parsing.

A document starts with a header block between two ``---`` lines:

    ---
    name: laravel-reviewer
    description: Reviews Laravel code for convention violations
    tools: Read, Grep, Glob
    model: sonnet
    color: green
    ---
    You are a senior Laravel reviewer...

The block is read as YAML. Agent descriptions often embed transcripts
(``user: "..."``) that YAML rejects, so a flat ``key: value`` reading is
tried before giving up.
"""

import re
import logging
from pathlib import Path
from typing import Optional, Dict, List, Tuple, Any, Iterable

import yaml

from .errors import MalformedHeaderError

logger = logging.getLogger("persona_registry.frontmatter")

DELIMITER = "---"

# Keys that map onto Document fields
CAPABILITY_KEYS = ("tools", "allowed-tools", "allowed_tools")
FIELD_KEYS = frozenset({"name", "description", "model", "color", *CAPABILITY_KEYS})

# Other keys plugin headers commonly carry
EXTRA_HEADER_KEYS = frozenset({"argument-hint", "disable-model-invocation", "license", "version"})

_FLAT_KEY = re.compile(r"^([A-Za-z_][A-Za-z0-9_-]*):(?:\s+(.*))?$")


def split_header(text: str, path: Optional[Path] = None) -> Tuple[str, str]:
    """
    Split a document into (header_block, body).

    The body is everything after the closing delimiter line, untouched.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        raise MalformedHeaderError(path, "missing metadata header (file must start with '---')")

    for idx in range(1, len(lines)):
        if lines[idx].rstrip("\r\n") == DELIMITER:
            header = "".join(lines[1:idx])
            body = "".join(lines[idx + 1:])
            return header, body

    raise MalformedHeaderError(path, "metadata header is not closed with '---'")


def parse_flat_header(
    block: str,
    header_keys: Iterable[str] = FIELD_KEYS | EXTRA_HEADER_KEYS,
) -> Optional[Dict[str, str]]:
    """
    Read a header as plain ``key: value`` lines.

    Before ``description`` any column-0 ``key:`` line opens a field. Once
    the description has started, only ``header_keys`` not seen yet open one;
    transcript lines such as ``user: ...`` or a repeated key continue the
    current value. Returns None when text precedes the first key.
    """
    header_keys = frozenset(header_keys)
    fields: Dict[str, List[str]] = {}
    current = None

    for line in block.splitlines():
        match = _FLAT_KEY.match(line)
        key = match.group(1) if match else None
        opens = (
            key is not None
            and key not in fields
            and (key in header_keys or "description" not in fields)
        )

        if opens:
            fields[key] = [(match.group(2) or "").strip()]
            current = key
        elif not line.strip():
            if current is not None:
                fields[current].append("")
        elif current is None:
            return None
        else:
            fields[current].append(line.strip())

    return {k: "\n".join(v).strip() for k, v in fields.items()}


def parse_header(block: str, path: Optional[Path] = None) -> Dict[str, Any]:
    """Parse a header block into a mapping of fields."""
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        data = parse_flat_header(block)
        if data is None:
            raise MalformedHeaderError(path, f"invalid metadata header: {e}") from e
        logger.debug(f"Header in {path} read as flat key/value fields")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedHeaderError(
            path, f"metadata header must be key/value pairs, got {type(data).__name__}"
        )
    return data


def read_frontmatter(text: str, path: Optional[Path] = None) -> Tuple[Dict[str, Any], str]:
    """Return (header_fields, body) for a document's text."""
    block, body = split_header(text, path)
    return parse_header(block, path), body
