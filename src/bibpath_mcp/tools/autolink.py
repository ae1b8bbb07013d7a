"""
Auto-linking of loose files to entries by citation key.

Implements:
- associate: assign each discovered file to at most one entry
- find_associated_files: scan directories, then associate
- autolink_files: tool wrapper driven by configuration
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from bibpath_mcp.config import config_manager
from bibpath_mcp.conventions import PathConvention, native_convention
from bibpath_mcp.tools.entries import BibEntry, entries_from_dicts
from bibpath_mcp.tools.formats import find_files, is_string_list

logger = logging.getLogger(__name__)

FileFinder = Callable[[Iterable[str], Iterable[Union[str, Path]]], Iterable[Union[str, Path]]]


def _match_file(
    name: str,
    entries: Sequence[BibEntry],
    exact_only: bool,
) -> Optional[BibEntry]:
    """Entry a file name belongs to, or None.

    Exact matches of the name without extension win over prefix matches;
    among entries the first one supplied wins.
    """
    dot = name.rfind('.')
    if dot > 0:
        stem = name[:dot]
        for entry in entries:
            if entry.has_citation_key and stem == entry.citation_key:
                return entry

    if exact_only:
        return None

    for entry in entries:
        if entry.has_citation_key and name.startswith(entry.citation_key):
            return entry

    return None


def associate(
    entries: Iterable[BibEntry],
    files: Iterable[Union[str, Path]],
    exact_only: bool,
    convention: Optional[PathConvention] = None,
) -> dict[BibEntry, list[str]]:
    """
    Assign discovered files to entries by comparing names with citation keys.

    Every entry gets a slot, in the order supplied, even if nothing matches.
    A file lands in at most one slot; files matching no entry are dropped.

    Args:
        entries: Entries to link; citation keys should be unique
        files: Discovered file paths
        exact_only: Only accept files named exactly ``<citation key>.<ext>``
        convention: Path convention used to take the file's base name

    Returns:
        Mapping from entry to the matched file paths.
    """
    convention = convention or native_convention()
    ordered = list(entries)
    result: dict[BibEntry, list[str]] = {entry: [] for entry in ordered}

    for file in files:
        path = os.fspath(file)
        entry = _match_file(convention.basename(path), ordered, exact_only)
        if entry is None:
            logger.debug(f"No entry matches {path}")
            continue
        if path not in result[entry]:
            result[entry].append(path)

    return result


def find_associated_files(
    entries: Iterable[BibEntry],
    extensions: Iterable[str],
    directories: Iterable[Union[str, Path]],
    exact_only: bool,
    convention: Optional[PathConvention] = None,
    finder: FileFinder = find_files,
) -> dict[BibEntry, list[str]]:
    """Scan *directories* for files with *extensions* and associate them."""
    files = finder(extensions, directories)
    return associate(entries, files, exact_only, convention)


def _invalid(message: str) -> dict[str, Any]:
    return {
        'success': False,
        'error': {
            'code': 'INVALID_ARGUMENT',
            'message': message,
        }
    }


async def autolink_files(
    entries: Optional[list[dict[str, Any]]],
    extensions: Optional[list[str]] = None,
    directories: Optional[list[str]] = None,
    exact_only: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Find files in the file directories that belong to the given entries.

    Args:
        entries: Entries as {citation_key, fields} objects
        extensions: File extensions to consider (default: configured list)
        directories: Directories to scan recursively (default: configured
            file directories)
        exact_only: Override autolink.exact_citation_key_match_only

    Returns:
        Dictionary with success flag and, per entry with a citation key,
        the matched files.
    """
    try:
        bib_entries = entries_from_dicts(entries)
    except ValueError as e:
        return _invalid(str(e))
    if extensions is not None and not is_string_list(extensions):
        return _invalid("'extensions' must be a list of strings")
    if directories is not None and not is_string_list(directories):
        return _invalid("'directories' must be a list of strings")
    if exact_only is not None and not isinstance(exact_only, bool):
        return _invalid("'exact_only' must be a boolean")

    config = config_manager.load()
    if extensions is None:
        extensions = config.autolink.extensions
    if directories is None:
        directories = config.directories.file_directories
    if exact_only is None:
        exact_only = config.autolink.exact_citation_key_match_only

    files = find_files(extensions, directories)
    associations = find_associated_files(
        bib_entries,
        extensions,
        directories,
        exact_only,
        config.path_convention(),
        finder=lambda *_: files,
    )

    matched = [
        {'citation_key': entry.citation_key, 'files': linked}
        for entry, linked in associations.items()
        if entry.has_citation_key
    ]

    return {
        'success': True,
        'exact_only': exact_only,
        'scanned_count': len(files),
        'matched_count': sum(len(item['files']) for item in matched),
        'matched': matched,
    }
