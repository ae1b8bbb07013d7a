"""
File copy and rename for linked files.

Implements:
- copy_file / rename_file: thin wrappers raising IOFailure on OS errors
- copy_linked_file / rename_linked_file: tool wrappers
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileLinkError(Exception):
    """Base exception for file link operations."""
    pass


class IOFailure(FileLinkError):
    """A file could not be read, written or moved."""

    def __init__(self, message: str, source: PathLike, dest: PathLike):
        super().__init__(message)
        self.source = str(source)
        self.dest = str(dest)


def copy_file(source: PathLike, dest: PathLike, overwrite: bool = False) -> bool:
    """
    Copy the bytes of *source* to *dest*.

    Returns False without touching anything if *dest* exists and
    *overwrite* is not set, True once the copy is written.

    Raises:
        IOFailure: the copy could not be made
    """
    if os.path.exists(dest) and not overwrite:
        return False

    try:
        shutil.copyfile(source, dest)
    except OSError as e:
        logger.warning(f"Failed to copy {source} to {dest}: {e}")
        raise IOFailure(f"Could not copy {source} to {dest}: {e}", source, dest) from e
    return True


def rename_file(source: PathLike, dest: PathLike) -> None:
    """
    Rename (move) *source* to *dest*.

    Raises:
        IOFailure: the file could not be renamed
    """
    try:
        os.rename(source, dest)
    except OSError as e:
        logger.warning(f"Failed to rename {source} to {dest}: {e}")
        raise IOFailure(f"Could not rename {source} to {dest}: {e}", source, dest) from e


def _io_failure(error: IOFailure) -> dict[str, Any]:
    return {
        'success': False,
        'error': {
            'code': 'IO_FAILURE',
            'message': str(error),
            'source': error.source,
            'dest': error.dest,
        }
    }


async def copy_linked_file(source: str, dest: str, overwrite: bool = False) -> dict[str, Any]:
    """
    Copy a linked file.

    Returns:
        Dictionary with success flag and whether the file was copied
        (False when the destination already existed).
    """
    if not source or not dest:
        return {
            'success': False,
            'error': {
                'code': 'INVALID_ARGUMENT',
                'message': "'source' and 'dest' are required",
            }
        }

    if not os.path.exists(source):
        return {
            'success': False,
            'error': {
                'code': 'NOT_FOUND',
                'message': f"Source file not found: {source}",
            }
        }

    try:
        copied = copy_file(source, dest, overwrite)
    except IOFailure as e:
        return _io_failure(e)

    result: dict[str, Any] = {
        'success': True,
        'source': source,
        'dest': dest,
        'copied': copied,
    }
    if not copied:
        result['message'] = f"{dest} already exists; pass overwrite=true to replace it"
    return result


async def rename_linked_file(source: str, dest: str) -> dict[str, Any]:
    """Rename a linked file."""
    if not source or not dest:
        return {
            'success': False,
            'error': {
                'code': 'INVALID_ARGUMENT',
                'message': "'source' and 'dest' are required",
            }
        }

    if not os.path.exists(source):
        return {
            'success': False,
            'error': {
                'code': 'NOT_FOUND',
                'message': f"Source file not found: {source}",
            }
        }

    try:
        rename_file(source, dest)
    except IOFailure as e:
        return _io_failure(e)

    return {
        'success': True,
        'source': source,
        'dest': dest,
    }
