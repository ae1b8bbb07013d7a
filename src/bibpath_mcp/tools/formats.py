"""
File name and file field helpers for bibpath-mcp.

Keeps extension parsing, the directory scan used by auto-linking and the
parser for the ``file`` field of an entry in one place.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

FILE_FIELD = "file"


class LinkedFile(NamedTuple):
    """One record of a ``file`` field: ``description:link:type``."""
    description: str
    link: str
    file_type: str


def get_file_extension(name: Union[str, Path]) -> Optional[str]:
    """Return the extension of *name*, trimmed and lower-cased.

    Returns ``None`` when there is no extension, i.e. no ``.`` in the name,
    a leading dot only (hidden files) or a trailing dot.

    >>> get_file_extension("smith2020.PDF")
    'pdf'
    """
    name = str(name)
    pos = name.rfind('.')
    if 0 < pos < len(name) - 1:
        return name[pos + 1:].strip().lower()
    return None


def is_string_list(value: Any) -> bool:
    """True for a list whose items are all strings (an empty list included)."""
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    return {ext.strip().lstrip('.').lower() for ext in extensions if ext and ext.strip('. ')}


def find_files(extensions: Iterable[str], directories: Iterable[Union[str, Path]]) -> list[Path]:
    """Recursively collect files under *directories* with one of *extensions*.

    Directories that do not exist are skipped. The result holds each file
    once and is sorted by path.
    """
    wanted = _normalize_extensions(extensions)
    found: set[Path] = set()
    for directory in directories:
        if directory is None:
            continue
        root = Path(directory)
        if not root.is_dir():
            logger.debug(f"Skipping missing directory {root}")
            continue
        for candidate in root.rglob("*"):
            if candidate.is_file() and get_file_extension(candidate.name) in wanted:
                found.add(candidate)
    return sorted(found)


def _to_linked_file(parts: list[str]) -> Optional[LinkedFile]:
    parts = parts + [""] * (3 - len(parts))
    description, link, file_type = parts[0], parts[1], parts[2]
    # The link is the only mandatory part; a lone value is always the link.
    if not description and not link and file_type:
        description, link, file_type = "", file_type, ""
    elif description and not link and not file_type:
        description, link, file_type = "", description, ""
    if not link:
        return None
    return LinkedFile(description, link, file_type)


def parse_file_field(value: Optional[str]) -> list[LinkedFile]:
    """
    Parse a ``file`` field into its linked files.

    The field holds ``description:link:type`` records separated by ``;``.
    A backslash escapes the next character, and a single letter followed by
    ``:`` in the link part is kept as a Windows drive letter.

    >>> parse_file_field(":papers/smith2020.pdf:PDF")
    [LinkedFile(description='', link='papers/smith2020.pdf', file_type='PDF')]
    """
    if not value:
        return []

    files: list[LinkedFile] = []
    parts: list[str] = []
    current: list[str] = []
    escaped = False

    for index, char in enumerate(value):
        if escaped:
            current.append(char)
            escaped = False
        elif char == '\\':
            escaped = True
        elif char == ':':
            next_char = value[index + 1:index + 2]
            if len(parts) == 1 and len(current) == 1 and next_char in ('\\', '/'):
                current.append(char)
            else:
                parts.append(''.join(current))
                current = []
        elif char == ';':
            parts.append(''.join(current))
            current = []
            linked = _to_linked_file(parts)
            if linked:
                files.append(linked)
            parts = []
        else:
            current.append(char)

    if current or parts:
        parts.append(''.join(current))
        linked = _to_linked_file(parts)
        if linked:
            files.append(linked)

    return files
