"""Configuration Manager implementation for the CDM Trade Intake System.

This module loads, validates, and saves the derivation defaults that the
field derivation fallback chains substitute when a document lacks a value.
"""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..models.enums import ExecutionVenueType
from .models import ConfigurationError, DerivationDefaults, ValidationResult

logger = logging.getLogger(__name__)

DERIVATION_FILE = "derivation.json"

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


class ConfigurationManager:
    """
    Manager for system configuration.

    Handles loading, validation, and access to the derivation defaults.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional directory path for configuration files.
        """
        self._config_dir = Path(config_dir) if config_dir else None
        self._defaults = DerivationDefaults()
        self._is_loaded = False

    @property
    def defaults(self) -> DerivationDefaults:
        """Get the current derivation defaults."""
        return self._defaults

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._is_loaded

    # =========================================================================
    # Derivation Defaults
    # =========================================================================

    def load_derivation_defaults(
        self,
        source: Union[str, Path, Dict[str, Any]]
    ) -> ValidationResult:
        """
        Load and validate derivation defaults.

        Fields absent from the source keep their built-in values.

        Args:
            source: JSON file path or dictionary.

        Returns:
            ValidationResult indicating success with any warnings.

        Raises:
            ConfigurationError: If validation fails.
        """
        raw_data = self._parse_source(source)
        if not isinstance(raw_data, dict):
            raise ConfigurationError("Derivation defaults must be a JSON object")

        data = raw_data.get("derivation", raw_data)
        if not isinstance(data, dict):
            raise ConfigurationError("Derivation defaults must be a JSON object")
        result, defaults = self._validate_derivation_defaults(data)

        if not result.is_valid:
            raise ConfigurationError(
                "Derivation defaults validation failed",
                validation_result=result
            )

        self._defaults = defaults
        self._is_loaded = True
        logger.info(f"Loaded derivation defaults ({len(data)} fields set)")
        return result

    def _validate_derivation_defaults(
        self,
        data: Dict[str, Any]
    ) -> Tuple[ValidationResult, Optional[DerivationDefaults]]:
        """Validate a derivation defaults dictionary."""
        result = ValidationResult(is_valid=True)
        base = DerivationDefaults()
        known = set(base.to_dict())

        for name in data:
            if name not in known:
                result.add_warning(f"Unknown derivation setting '{name}' ignored")

        currency = data.get("default_currency", base.default_currency)
        if not isinstance(currency, str) or not _CURRENCY_PATTERN.match(currency):
            result.add_error(
                f"default_currency must be a 3-letter upper-case code, got {currency!r}"
            )

        placeholder = data.get("placeholder_lei", base.placeholder_lei)
        if not isinstance(placeholder, str) or not placeholder.strip():
            result.add_error("placeholder_lei must be a non-empty string")

        venue = data.get("default_execution_venue", base.default_execution_venue)
        valid_venues = [v.value for v in ExecutionVenueType]
        if venue not in valid_venues:
            result.add_error(
                f"default_execution_venue must be one of {valid_venues}, got {venue!r}"
            )

        default_threshold = self._parse_amount(
            data.get("default_large_size_threshold", base.default_large_size_threshold),
            "default_large_size_threshold",
            result,
        )

        thresholds = dict(base.large_size_thresholds)
        raw_thresholds = data.get("large_size_thresholds")
        if raw_thresholds is not None:
            if not isinstance(raw_thresholds, dict):
                result.add_error("large_size_thresholds must be an object")
            else:
                thresholds = {}
                for ccy, amount in raw_thresholds.items():
                    if not _CURRENCY_PATTERN.match(str(ccy)):
                        result.add_error(f"large_size_thresholds: invalid currency code {ccy!r}")
                        continue
                    parsed = self._parse_amount(amount, f"large_size_thresholds.{ccy}", result)
                    if parsed is not None:
                        thresholds[ccy] = parsed

        if not result.is_valid:
            return result, None

        return result, DerivationDefaults(
            default_currency=currency,
            placeholder_lei=placeholder,
            large_size_thresholds=thresholds,
            default_large_size_threshold=default_threshold,
            default_execution_venue=venue,
        )

    def _parse_amount(
        self,
        value: Any,
        name: str,
        result: ValidationResult
    ) -> Optional[Decimal]:
        """Parse a positive amount, recording an error if invalid."""
        if isinstance(value, bool):
            result.add_error(f"{name} must be a positive number")
            return None
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            result.add_error(f"{name} must be a positive number, got {value!r}")
            return None
        if not amount.is_finite() or amount <= 0:
            result.add_error(f"{name} must be a positive number, got {value!r}")
            return None
        return amount

    # =========================================================================
    # File Operations
    # =========================================================================

    def _parse_source(
        self,
        source: Union[str, Path, Dict[str, Any]]
    ) -> Any:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e.msg}")

        return source

    def load_from_directory(self, config_dir: Union[str, Path]) -> ValidationResult:
        """
        Load configuration files from a directory.

        Expects a file named derivation.json; a missing file leaves the
        built-in defaults in place.

        Args:
            config_dir: Directory containing configuration files.

        Returns:
            Combined ValidationResult for all loaded configurations.
        """
        config_dir = Path(config_dir)
        result = ValidationResult(is_valid=True)

        derivation_file = config_dir / DERIVATION_FILE
        if derivation_file.exists():
            try:
                result = result.merge(self.load_derivation_defaults(derivation_file))
            except ConfigurationError as e:
                result.add_error(f"Derivation defaults loading failed: {e.message}")
                if e.validation_result:
                    result = result.merge(e.validation_result)
        else:
            result.add_warning(f"{DERIVATION_FILE} not found in {config_dir}, using built-in defaults")

        self._config_dir = config_dir
        return result

    def save_to_directory(
        self,
        config_dir: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Save current configuration to a directory.

        Args:
            config_dir: Directory to save to. Uses current config_dir if None.
        """
        config_dir = Path(config_dir) if config_dir else self._config_dir
        if not config_dir:
            raise ConfigurationError("No configuration directory specified")

        config_dir.mkdir(parents=True, exist_ok=True)

        with open(config_dir / DERIVATION_FILE, "w", encoding="utf-8") as f:
            json.dump(self._defaults.to_dict(), f, indent=2, ensure_ascii=False)

        self._config_dir = config_dir

    def reset(self) -> None:
        """Reset configuration to the built-in defaults."""
        self._defaults = DerivationDefaults()
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration to dictionary."""
        return {"derivation": self._defaults.to_dict()}
