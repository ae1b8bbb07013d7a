"""
Path conventions for bibpath-mcp.

The separator and the case rules used when comparing paths depend on the
platform. They are bundled into a ``PathConvention`` that every path
operation accepts, so callers (and tests) can pick a convention instead of
inheriting the one of the running interpreter.
"""

import ntpath
import os
import posixpath

from pydantic import BaseModel, ConfigDict


class PathConvention(BaseModel):
    """Separator and case rules for one platform family."""
    model_config = ConfigDict(frozen=True)

    separator: str = "/"
    case_insensitive: bool = False

    @property
    def flavour(self):
        """The ``os.path`` implementation matching this convention."""
        return ntpath if self.separator == "\\" else posixpath

    @property
    def foreign_separator(self) -> str:
        return "/" if self.separator == "\\" else "\\"

    def is_absolute(self, path: str) -> bool:
        """
        Whether *path* is absolute under this convention.

        Under the Windows convention only a drive letter followed by a colon
        and a separator (C:\\lit) or a UNC prefix (\\\\server) counts; a rooted
        path without a drive (\\lit) or a drive-relative one (C:lit) does not.
        """
        if self.separator != "\\":
            return posixpath.isabs(path)
        path = self.normalize(path)
        if path.startswith("\\\\"):
            return True
        return len(path) >= 3 and path[0].isalpha() and path[1] == ":" and path[2] == "\\"

    def normalize(self, path: str) -> str:
        """Rewrite every separator in *path* to ``separator``."""
        return path.replace(self.foreign_separator, self.separator)

    def fold(self, text: str) -> str:
        """Case-fold *text* for comparisons under this convention."""
        return text.lower() if self.case_insensitive else text

    def basename(self, path: str) -> str:
        return self.flavour.basename(path)


POSIX = PathConvention(separator="/", case_insensitive=False)
WINDOWS = PathConvention(separator="\\", case_insensitive=True)


def native_convention() -> PathConvention:
    """Convention of the running platform."""
    return WINDOWS if os.name == "nt" else POSIX


def convention_by_name(name: str) -> PathConvention:
    """
    Look up a convention by its configuration name.

    Accepts ``native``, ``posix`` and ``windows``.
    """
    if name == "native":
        return native_convention()
    if name == "posix":
        return POSIX
    if name == "windows":
        return WINDOWS
    raise ValueError(f"Unknown path convention: {name!r}")
