"""Core module exports."""

from impactlens.core.errors import (
    AnalysisError,
    ConfigError,
    ErrorCode,
    ImpactLensError,
    InternalError,
)
from impactlens.core.logging import (
    clear_analysis_id,
    configure_logging,
    get_analysis_id,
    get_logger,
    set_analysis_id,
)

__all__ = [
    # Errors
    "AnalysisError",
    "ConfigError",
    "ErrorCode",
    "ImpactLensError",
    "InternalError",
    # Logging
    "clear_analysis_id",
    "configure_logging",
    "get_analysis_id",
    "get_logger",
    "set_analysis_id",
]
