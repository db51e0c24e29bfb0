"""Secondary field derivation for canonical trade records."""

from .field_derivation import FieldDeriver, derive_fields

__all__ = [
    "FieldDeriver",
    "derive_fields",
]
