"""
Bibliographic entries as seen by the file-link tools.

Only the citation key and the ``file`` field matter here, so an entry is a
small record rather than a full bibliography model.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from bibpath_mcp.tools.formats import FILE_FIELD, LinkedFile, parse_file_field


@dataclass(eq=False)
class BibEntry:
    """An entry with an optional citation key. Hashed by identity."""
    citation_key: Optional[str] = None
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def has_citation_key(self) -> bool:
        return bool(self.citation_key)

    def linked_files(self) -> list[LinkedFile]:
        return parse_file_field(self.fields.get(FILE_FIELD))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BibEntry":
        """
        Build an entry from tool arguments.

        Accepts ``citation_key`` (or ``key``) and an optional ``fields``
        mapping; a top-level ``file`` value is folded into ``fields``.
        """
        if not isinstance(data, dict):
            raise ValueError("entry must be an object")
        citation_key = data.get('citation_key', data.get('key'))
        if citation_key is not None and not isinstance(citation_key, str):
            raise ValueError("citation_key must be a string")
        fields = {str(k): str(v) for k, v in (data.get('fields') or {}).items()}
        if FILE_FIELD in data and FILE_FIELD not in fields:
            fields[FILE_FIELD] = str(data[FILE_FIELD])
        return cls(citation_key=citation_key, fields=fields)


def entries_from_dicts(items: list[dict[str, Any]]) -> list[BibEntry]:
    """Convert a list of tool arguments to entries, keeping order."""
    if not isinstance(items, list):
        raise ValueError("entries must be a list")
    return [BibEntry.from_dict(item) for item in items]
