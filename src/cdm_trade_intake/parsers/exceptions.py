"""Custom exceptions for document intake."""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from ..models.document import format_path


@dataclass
class IntakeError(Exception):
    """
    Base exception for document intake errors.

    Provides detailed error information including the document source,
    the location inside the document, and additional context for
    debugging and user feedback.

    Attributes:
        message: Human-readable error description.
        source: File path or label of the document that caused the error.
        location: Field path or byte offset inside the document.
        details: Additional error details.
    """
    message: str
    source: Optional[str] = None
    location: Optional[str] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.append(f"Source: {self.source}")
        if self.location:
            parts.append(f"Location: {self.location}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source": self.source,
            "location": self.location,
            "details": self.details,
        }


@dataclass
class StructuralError(IntakeError):
    """
    Raised when a document cannot be decoded at all.

    Fatal for that document only; the caller decides whether to carry
    on with other documents.
    """

    def get_recovery_suggestions(self) -> list[str]:
        """Return suggestions for recovering from this error."""
        suggestions = [
            "Check that the file is valid UTF-8 encoded JSON",
            "Re-export the document from the producing system",
        ]
        if self.source and not self.source.endswith(".json"):
            suggestions.append("Confirm the file is a JSON document and not another format")
        return suggestions


@dataclass
class DecodeError(IntakeError):
    """
    Raised when a document does not match the shape a decoder expects.

    Carries the field path where decoding stopped. Decode errors never
    escape the extraction chain; they become strategy rejections.
    """
    path: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.path and not self.location:
            self.location = format_path(self.path)
        super().__post_init__()


@dataclass
class ExtractionError(IntakeError):
    """
    Raised on request when no extraction strategy produced a trade record.

    The aggregated strategy reasons are kept in details["reasons"].
    """

    @property
    def reasons(self) -> list[str]:
        return list(self.details.get("reasons", []))
