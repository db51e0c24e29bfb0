"""Document loading and record serialization for the CDM Trade Intake System."""

from .loader import DocumentLoader, load_document, loads_document
from .serialization import RecordSerializer, serialize_record, deserialize_record
from .exceptions import (
    IntakeError,
    StructuralError,
    DecodeError,
    ExtractionError,
)

__all__ = [
    "DocumentLoader",
    "load_document",
    "loads_document",
    "RecordSerializer",
    "serialize_record",
    "deserialize_record",
    "IntakeError",
    "StructuralError",
    "DecodeError",
    "ExtractionError",
]
