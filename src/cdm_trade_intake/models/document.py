"""Generic parsed document tree for the CDM Trade Intake System."""

from collections.abc import Mapping
from typing import Any, List, Optional, Tuple


class DocumentTree:
    """
    Read-only view over a parsed JSON document.

    Wraps the decoded root value (normally a dict) and offers field
    access by name. Any JSON value is a legal root: arrays and scalars
    simply have no fields. The wrapped value is never modified.
    """

    __slots__ = ("_root", "_source")

    def __init__(self, root: Any, source: Optional[str] = None):
        if isinstance(root, DocumentTree):
            root = root.root
        self._root = root
        self._source = source

    @property
    def root(self) -> Any:
        """The wrapped root value."""
        return self._root

    @property
    def source(self) -> Optional[str]:
        """Where the document came from (file path or label), if known."""
        return self._source

    @property
    def is_object(self) -> bool:
        """Check if the root is a JSON object."""
        return isinstance(self._root, Mapping)

    def has_field(self, name: str) -> bool:
        """Check if the root object carries a field with this name."""
        return self.is_object and name in self._root

    def field(self, name: str, default: Any = None) -> Any:
        """Return the raw value of a top-level field."""
        if not self.is_object:
            return default
        return self._root.get(name, default)

    def child(self, name: str) -> Optional["DocumentTree"]:
        """Return a nested object field as a tree, or None."""
        value = self.field(name)
        if isinstance(value, Mapping):
            return DocumentTree(value, source=self._source)
        return None

    def field_names(self) -> List[str]:
        """Top-level field names in document order."""
        if not self.is_object:
            return []
        return list(self._root.keys())

    def size(self) -> int:
        """Number of top-level fields (or elements for an array root)."""
        if isinstance(self._root, (Mapping, list)):
            return len(self._root)
        return 0

    def __repr__(self) -> str:
        return f"DocumentTree(fields={self.field_names()!r}, source={self._source!r})"


def format_path(path: Tuple[str, ...]) -> str:
    """Render a field path as 'a.b[0].c'; the empty path is '$'."""
    if not path:
        return "$"
    rendered = ""
    for part in path:
        if part.startswith("[") or not rendered:
            rendered += part
        else:
            rendered += f".{part}"
    return rendered
