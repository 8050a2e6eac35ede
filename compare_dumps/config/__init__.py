"""Configuration for compare-dumps."""

from .settings import (
    ConfigurationError,
    NormalizerConfig,
    Settings,
    TraversalConfig,
    LEDGER_CONTRACT_ID,
)

__all__ = [
    "ConfigurationError",
    "NormalizerConfig",
    "Settings",
    "TraversalConfig",
    "LEDGER_CONTRACT_ID",
]
