"""
Short display names for linked files.

Implements:
- unique_path_suffixes: minimal unique trailing segments for a list of paths
- display_names: tool wrapper returning path/name pairs
"""

from collections import Counter
from typing import Any, Optional, Sequence

from bibpath_mcp.config import config_manager
from bibpath_mcp.conventions import PathConvention, native_convention
from bibpath_mcp.tools.formats import is_string_list


def _segments(path: str, separator: str) -> list[str]:
    parts = path.split(separator)
    while len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return parts


def unique_path_suffixes(
    paths: Sequence[str],
    convention: Optional[PathConvention] = None,
) -> list[str]:
    """
    Compute the shortest path suffix of each path that no other path shares.

    All paths grow by one leading segment per round. A path whose suffix is
    unique after a round is frozen; the others keep growing until they differ
    or run out of segments, in which case the full path is kept. Identical
    input paths therefore come back identical.

    Args:
        paths: Full paths, split on the convention's separator
        convention: Path convention (defaults to the running platform's)

    Returns:
        Suffixes in the same order as *paths*, joined with the separator.

    >>> from bibpath_mcp.conventions import POSIX
    >>> unique_path_suffixes(["/a/x/f.pdf", "/b/x/f.pdf", "/a/g.pdf"], POSIX)
    ['a/x/f.pdf', 'b/x/f.pdf', 'g.pdf']
    """
    convention = convention or native_convention()
    separator = convention.separator

    segments = [_segments(path, separator) for path in paths]
    # cursors[i] is the number of segments of path i not yet in its suffix
    cursors = [len(parts) for parts in segments]
    frozen = [False] * len(paths)
    suffixes = [""] * len(paths)

    while not all(frozen[i] or cursors[i] == 0 for i in range(len(paths))):
        for i, parts in enumerate(segments):
            if frozen[i] or cursors[i] == 0:
                continue
            cursors[i] -= 1
            segment = parts[cursors[i]]
            suffixes[i] = segment if not suffixes[i] else segment + separator + suffixes[i]

        counts = Counter(suffixes)
        for i, suffix in enumerate(suffixes):
            if counts[suffix] == 1:
                frozen[i] = True

    return suffixes


async def display_names(
    paths: Optional[list[str]],
    convention: Optional[PathConvention] = None,
) -> dict[str, Any]:
    """
    Shortest distinguishable names for a set of linked files.

    Args:
        paths: Full file paths
        convention: Path convention; the configured one is used when omitted

    Returns:
        Dictionary with success flag and a list of {path, name} pairs in
        input order.
    """
    if not is_string_list(paths):
        return {
            'success': False,
            'error': {
                'code': 'INVALID_ARGUMENT',
                'message': "'paths' must be a list of strings",
            }
        }

    if convention is None:
        convention = config_manager.load().path_convention()

    names = unique_path_suffixes(paths, convention)
    return {
        'success': True,
        'names': [{'path': path, 'name': name} for path, name in zip(paths, names)],
    }
