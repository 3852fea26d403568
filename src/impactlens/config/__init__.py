"""Config module exports."""

from impactlens.config.loader import load_config
from impactlens.config.models import (
    BaselineConfig,
    ImpactLensConfig,
    LoggingConfig,
    ScanConfig,
)

__all__ = [
    "load_config",
    "BaselineConfig",
    "ImpactLensConfig",
    "LoggingConfig",
    "ScanConfig",
]
