"""Loading of JSON input documents into document trees."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from ..models.document import DocumentTree
from .exceptions import StructuralError

logger = logging.getLogger(__name__)


class DocumentLoader:
    """
    Decodes input documents into DocumentTree instances.

    Accepts JSON text, UTF-8 bytes, a file path, or an already decoded
    value. Anything that cannot be decoded raises StructuralError.
    """

    SUPPORTED_SUFFIXES = (".json",)

    def load(self, source: Union[str, Path]) -> DocumentTree:
        """
        Load a document from a file path.

        Args:
            source: Path to the JSON document.

        Returns:
            DocumentTree for the decoded document.

        Raises:
            StructuralError: If the file is missing, unreadable, or not JSON.
        """
        path = Path(source)
        if not path.exists():
            raise StructuralError(
                message=f"File not found: {path}",
                source=str(path),
            )
        if path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            logger.warning(f"Loading {path} although its suffix is not .json")

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise StructuralError(
                message=f"Failed to read document: {e}",
                source=str(path),
            ) from e

        tree = self.loads(raw, source=str(path))
        logger.debug(f"Loaded {path}: {len(raw)} bytes, {tree.size()} root fields")
        return tree

    def loads(self, data: Union[str, bytes, bytearray], source: Optional[str] = None) -> DocumentTree:
        """
        Decode JSON text or bytes.

        Args:
            data: JSON document as text or UTF-8 bytes.
            source: Optional label used in error messages.

        Returns:
            DocumentTree for the decoded document.

        Raises:
            StructuralError: If the data is not well-formed JSON.
        """
        if isinstance(data, (bytes, bytearray)):
            try:
                data = bytes(data).decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise StructuralError(
                    message=f"Document is not valid UTF-8: {e.reason}",
                    source=source,
                    location=f"byte {e.start}",
                ) from e

        try:
            root = json.loads(data)
        except json.JSONDecodeError as e:
            raise StructuralError(
                message=f"Invalid JSON: {e.msg}",
                source=source,
                location=f"line {e.lineno}, column {e.colno}",
            ) from e

        return DocumentTree(root, source=source)

    def wrap(self, value: Any, source: Optional[str] = None) -> DocumentTree:
        """Wrap an already decoded value (dict, list, tree) as a DocumentTree."""
        if isinstance(value, DocumentTree):
            return value
        return DocumentTree(value, source=source)


def load_document(source: Union[str, Path]) -> DocumentTree:
    """Convenience function to load a document from a file path."""
    return DocumentLoader().load(source)


def loads_document(data: Union[str, bytes], source: Optional[str] = None) -> DocumentTree:
    """Convenience function to decode a JSON document from text or bytes."""
    return DocumentLoader().loads(data, source=source)
