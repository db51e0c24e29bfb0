"""Configuration management for the CDM Trade Intake System."""

from .config_manager import ConfigurationManager
from .models import ConfigurationError, DerivationDefaults, ValidationResult

__all__ = [
    "ConfigurationManager",
    "ConfigurationError",
    "DerivationDefaults",
    "ValidationResult",
]
