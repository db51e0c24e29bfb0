"""Data models for configuration management."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


def _default_thresholds() -> Dict[str, Decimal]:
    return {
        "USD": Decimal("100000000"),
        "EUR": Decimal("80000000"),
        "GBP": Decimal("70000000"),
        "JPY": Decimal("12000000000"),
        "CHF": Decimal("90000000"),
    }


@dataclass
class DerivationDefaults:
    """
    Fallback literals used by field derivation.

    Every policy default the derivation chains may substitute is declared
    here once, so it can be configured and tested independently.
    """
    default_currency: str = "USD"
    placeholder_lei: str = "UNKNOWN-LEI-PLACEHOLDER"
    large_size_thresholds: Dict[str, Decimal] = field(default_factory=_default_thresholds)
    default_large_size_threshold: Decimal = Decimal("100000000")
    default_execution_venue: str = "OFF_FACILITY"

    def threshold_for(self, currency: Optional[str]) -> Decimal:
        """Large-size threshold for a currency, or the default threshold."""
        if currency is None:
            return self.default_large_size_threshold
        return self.large_size_thresholds.get(currency.upper(), self.default_large_size_threshold)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_currency": self.default_currency,
            "placeholder_lei": self.placeholder_lei,
            "large_size_thresholds": {
                ccy: str(amount) for ccy, amount in self.large_size_thresholds.items()
            },
            "default_large_size_threshold": str(self.default_large_size_threshold),
            "default_execution_venue": self.default_execution_venue,
        }


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.message = message
        self.validation_result = validation_result
