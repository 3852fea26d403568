"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (IMPACTLENS__SECTION__KEY)
3. Repo YAML (.impactlens/config.yaml)
4. Global YAML (~/.config/impactlens/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    IMPACTLENS__<SECTION>__<KEY>=<VALUE>

Examples:
    IMPACTLENS__LOGGING__LEVEL=DEBUG
    IMPACTLENS__BASELINE__MODE=pr
    IMPACTLENS__BASELINE__PR_TARGET_BRANCH=develop
    IMPACTLENS__SCAN__TIMEOUT_SEC=5
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
BaselineMode = Literal["local", "pr"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        IMPACTLENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG traces every baseline fallback step.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class BaselineConfig(BaseModel):
    """Baseline ("before" version) resolution.

    Env vars:
        IMPACTLENS__BASELINE__MODE: local (compare to HEAD) or pr (merge-base)
        IMPACTLENS__BASELINE__PR_TARGET_BRANCH: Target ref for pr mode
        IMPACTLENS__BASELINE__GIT_INTEGRATION_ENABLED: Use git as a baseline source
        IMPACTLENS__BASELINE__CACHE_ENABLED: Keep a session snapshot cache
    """

    mode: BaselineMode = Field(
        default="local",
        description="local compares against HEAD; pr compares against the merge-base "
        "of HEAD and pr_target_branch.",
    )
    pr_target_branch: str = Field(
        default="main",
        description="Branch or ref the merge-base is computed against in pr mode.",
    )
    git_integration_enabled: bool = Field(
        default=True,
        description="When false, baselines come only from the snapshot cache and disk.",
    )
    cache_enabled: bool = Field(
        default=True,
        description="When false, the session snapshot cache is neither read nor written.",
    )

    @field_validator("pr_target_branch")
    @classmethod
    def validate_target(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("pr_target_branch must not be empty")
        return v


class ScanConfig(BaseModel):
    """Dependency and test discovery scans.

    Env vars:
        IMPACTLENS__SCAN__TIMEOUT_SEC: Wall-clock budget per directory walk
        IMPACTLENS__SCAN__MAX_FILE_SIZE_MB: Skip analysis of larger files
    """

    source_patterns: list[str] = Field(
        default_factory=lambda: [
            "*.js",
            "*.jsx",
            "*.ts",
            "*.tsx",
            "*.py",
            "*.java",
            "*.cs",
            "*.go",
            "*.rs",
        ],
        description="File name globs considered as candidate downstream files.",
    )
    test_patterns: list[str] = Field(
        default_factory=lambda: ["*.test.*", "*.spec.*", "test_*.*", "*_test.*"],
        description="Extra file name globs treated as tests.",
    )
    timeout_sec: float = Field(
        default=10.0,
        description="Stop walking after this many seconds; partial results are kept.",
    )
    max_file_size_mb: float = Field(
        default=5.0,
        description="Files larger than this are not analyzed.",
    )
    extra_excluded_dirs: list[str] = Field(
        default_factory=list,
        description="Directory names skipped in addition to the built-in list.",
    )

    @field_validator("timeout_sec", "max_file_size_mb")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


class ImpactLensConfig(BaseModel):
    """Root configuration for impactlens.

    All settings can be configured via:
    1. Environment variables: IMPACTLENS__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
