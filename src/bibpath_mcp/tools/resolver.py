"""
Conversion between relative and absolute file links.

Implements:
- expand_filename: resolve a link against an ordered list of directories
- shorten_filename: make an absolute path relative to the first matching directory
- candidate_directories: ordered, de-duplicated directory list from configuration
- get_list_of_linked_files: absolute paths of all resolvable links of entries
- expand_file, shorten_file, list_linked_files: tool wrappers
"""

import logging
import os
from typing import Any, Callable, Iterable, Optional, Sequence

from bibpath_mcp.config import FileDirectoryConfig, config_manager
from bibpath_mcp.conventions import PathConvention, native_convention
from bibpath_mcp.tools.entries import BibEntry, entries_from_dicts
from bibpath_mcp.tools.formats import get_file_extension, is_string_list

logger = logging.getLogger(__name__)

ExistsCheck = Callable[[str], bool]


def _join(directory: str, name: str, convention: PathConvention) -> str:
    if directory.endswith(convention.separator):
        joined = directory + name
    else:
        joined = directory + convention.separator + name
    return convention.normalize(joined)


def expand_filename(
    name: Optional[str],
    directories: Iterable[Optional[str]],
    convention: Optional[PathConvention] = None,
    exists: ExistsCheck = os.path.exists,
) -> Optional[str]:
    """
    Convert a relative file link to an existing path.

    A name that already exists as given is returned unchanged. Otherwise the
    name is joined to each directory in turn and the first join that exists
    wins. ``None`` directories are skipped.

    Args:
        name: File link, absolute or relative
        directories: Candidate directories, in priority order
        convention: Path convention (defaults to the running platform's)
        exists: Existence check for a path string

    Returns:
        The existing path, or None if the link cannot be resolved.
    """
    if not name:
        return None

    if exists(name):
        return name

    convention = convention or native_convention()
    for directory in directories:
        if directory is None:
            continue
        candidate = _join(directory, name, convention)
        if exists(candidate):
            return candidate

    logger.debug(f"Could not resolve {name!r} in any candidate directory")
    return None


def candidate_directories(
    directories: FileDirectoryConfig,
    extension: Optional[str] = None,
) -> list[str]:
    """
    Ordered directory list for resolving a link with the given extension.

    Directories configured for the extension come first, then the general
    file directories, then the directory of the bibliography database.
    Repeated directories keep their first position.
    """
    ordered: list[str] = []
    if extension:
        ordered.extend(directories.extension_directories.get(extension.lower(), []))
    ordered.extend(directories.file_directories)
    if directories.database_directory:
        ordered.append(directories.database_directory)

    # dict keeps insertion order
    return list(dict.fromkeys(d for d in ordered if d))


def expand_with_metadata(
    name: Optional[str],
    directories: FileDirectoryConfig,
    convention: Optional[PathConvention] = None,
    exists: ExistsCheck = os.path.exists,
) -> Optional[str]:
    """Expand *name* against the directories configured for its extension."""
    if not name:
        return None
    extension = get_file_extension(name)
    return expand_filename(name, candidate_directories(directories, extension), convention, exists)


def sort_longest_first(directories: Iterable[Optional[str]]) -> list[str]:
    """Order directories so nested ones are tried before their parents."""
    return sorted((d for d in directories if d), key=len, reverse=True)


def shorten_filename(
    path: Optional[str],
    directories: Optional[Sequence[Optional[str]]],
    convention: Optional[PathConvention] = None,
) -> Optional[str]:
    """
    Convert an absolute path to one relative to the first matching directory.

    Only works as intended if *directories* are sorted longest first, e.g.
    /home/user/literature/important before /home/user/literature. The prefix
    comparison follows the convention's case rules, but the returned
    remainder keeps the original case of *path*.

    Returns *path* unchanged if it is empty, relative, or under none of the
    directories.
    """
    if not path or directories is None:
        return path

    convention = convention or native_convention()
    if not convention.is_absolute(path):
        return path

    folded_path = convention.fold(path)
    for directory in directories:
        if directory is None:
            continue
        prefix = directory if directory.endswith(convention.separator) else directory + convention.separator
        if folded_path.startswith(convention.fold(prefix)):
            return path[len(prefix):]

    return path


def get_list_of_linked_files(
    entries: Iterable[BibEntry],
    directories: Sequence[Optional[str]],
    convention: Optional[PathConvention] = None,
    exists: ExistsCheck = os.path.exists,
) -> list[str]:
    """
    Absolute paths of the files linked from *entries*.

    Links that do not resolve against *directories* are left out.
    """
    result: list[str] = []
    for entry in entries:
        for linked in entry.linked_files():
            resolved = expand_filename(linked.link, directories, convention, exists)
            if resolved is not None:
                result.append(resolved)
    return result


def _invalid(message: str) -> dict[str, Any]:
    return {
        'success': False,
        'error': {
            'code': 'INVALID_ARGUMENT',
            'message': message,
        }
    }


async def expand_file(name: Optional[str], directories: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Resolve a file link to an existing path.

    Args:
        name: File link, absolute or relative
        directories: Directories to search; the configured ones for the
            link's extension are used when omitted

    Returns:
        Dictionary with success flag, found flag and the resolved path (or None).
    """
    if not name or not isinstance(name, str):
        return _invalid("'name' must be a non-empty string")
    if directories is not None and not is_string_list(directories):
        return _invalid("'directories' must be a list of strings")

    config = config_manager.load()
    convention = config.path_convention()

    if directories is None:
        path = expand_with_metadata(name, config.directories, convention)
    else:
        path = expand_filename(name, directories, convention)

    return {
        'success': True,
        'name': name,
        'found': path is not None,
        'path': path,
    }


async def shorten_file(path: Optional[str], directories: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Make an absolute path relative to one of the file directories.

    Args:
        path: Absolute file path
        directories: Base directories, longest first; the configured ones
            (sorted longest first) are used when omitted

    Returns:
        Dictionary with success flag, the shortened path and whether it changed.
    """
    if not path or not isinstance(path, str):
        return _invalid("'path' must be a non-empty string")
    if directories is not None and not is_string_list(directories):
        return _invalid("'directories' must be a list of strings")

    config = config_manager.load()
    if directories is None:
        directories = sort_longest_first(candidate_directories(config.directories))

    shortened = shorten_filename(path, directories, config.path_convention())
    return {
        'success': True,
        'path': path,
        'shortened': shortened,
        'changed': shortened != path,
    }


async def list_linked_files(
    entries: Optional[list[dict[str, Any]]],
    directories: Optional[list[str]] = None,
) -> dict[str, Any]:
    """
    List the existing files linked from entries.

    Args:
        entries: Entries as {citation_key, fields: {file: ...}} objects
        directories: Directories to resolve relative links against; the
            configured file directories are used when omitted

    Returns:
        Dictionary with success flag and the resolved absolute paths.
    """
    try:
        bib_entries = entries_from_dicts(entries)
    except ValueError as e:
        return _invalid(str(e))
    if directories is not None and not is_string_list(directories):
        return _invalid("'directories' must be a list of strings")

    config = config_manager.load()
    if directories is None:
        directories = candidate_directories(config.directories)

    files = get_list_of_linked_files(bib_entries, directories, config.path_convention())
    return {
        'success': True,
        'files': files,
        'count': len(files),
    }
