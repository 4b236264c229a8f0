"""
Configuration management for ecstrace.

Implements multi-level configuration loading with precedence:
1. Command-line flags (applied by the CLI on top of the loaded config)
2. Environment variables (ECSTRACE_*)
3. Project config (./.ecstrace/config.yaml)
4. User config (~/.ecstrace/config.yaml)
5. System config (/etc/ecstrace/config.yaml)
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


SortOrder = Literal["ascending", "descending"]


def env_files() -> List[Path]:
    """.env files in order of precedence (lowest to highest)."""
    return [
        Path.home() / ".ecstrace" / ".env",  # User-specific
        Path.cwd() / ".env",  # Project-specific
    ]


def config_files() -> List[Path]:
    """YAML config files in order of precedence (lowest to highest)."""
    return [
        Path("/etc/ecstrace/config.yaml"),  # System-wide
        Path.home() / ".ecstrace" / "config.yaml",  # User-specific
        Path.cwd() / ".ecstrace" / "config.yaml",  # Project-specific
    ]


class Config(BaseSettings):
    """Complete configuration schema for ecstrace with flat structure."""

    model_config = SettingsConfigDict(
        env_prefix="ECSTRACE_",
        case_sensitive=False,
        # Ignore unrelated variables that happen to live in the same .env
        extra="ignore",
        env_file_encoding="utf-8",
    )

    # =================================================================
    # AWS
    # =================================================================

    aws_profile: Optional[str] = Field(default=None, description="AWS shared config profile to use")
    aws_region: Optional[str] = Field(default=None, description="AWS region (defaults to the profile's region)")

    # =================================================================
    # CloudWatch Logs retrieval
    # =================================================================

    logs_page_size: int = Field(
        default=50, ge=1, le=10000, description="Log records requested per GetLogEvents page"
    )
    logs_max_iterations: int = Field(
        default=10, ge=1, description="Maximum GetLogEvents requests per log stream"
    )
    logs_start_from_head: bool = Field(
        default=True, description="Read log streams from the oldest record"
    )

    # =================================================================
    # Fetch behaviour
    # =================================================================

    fetch_concurrency: int = Field(
        default=1, ge=1, le=16, description="Number of log streams fetched in parallel"
    )
    fetch_retries: int = Field(
        default=2, ge=0, description="Retries for transient AWS connection errors"
    )
    fetch_retry_delays: List[float] = Field(
        default_factory=lambda: [0.5, 1.0],
        description="Delay in seconds before each retry"
    )

    # =================================================================
    # Presentation
    # =================================================================

    pager_reserved_lines: int = Field(
        default=5, ge=0, description="Terminal lines reserved for pager header and footer"
    )
    pager_order: SortOrder = Field(
        default="descending", description="Sort order of the interactive pager"
    )
    flat_order: SortOrder = Field(
        default="ascending", description="Sort order of the flat (--flat) output"
    )

    ui_timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="strftime format for event timestamps"
    )
    ui_utc: bool = Field(default=False, description="Show timestamps in UTC instead of local time")
    ui_source_width: int = Field(default=25, ge=4, description="Width of the source column")
    ui_message_width: int = Field(default=100, ge=10, description="Width of the message column")

    ui_timestamp_color: str = Field(default="#f5f5f5", description="Timestamp column colour")
    ui_source_color: str = Field(default="#00bfff", description="Source column colour")
    ui_message_color: str = Field(default="#f5f5f5", description="Message column colour")
    ui_header_color: str = Field(default="#00bfff", description="Header row colour")
    ui_footer_color: str = Field(default="#808080", description="Pager footer colour")

    # =================================================================
    # Logging
    # =================================================================

    log_file: Optional[str] = Field(
        default=None, description="Trace log path used with -vv (default ~/.ecstrace/ecstrace_trace.log)"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML support.

        File locations are resolved here, when settings load, so they follow
        the current home and working directory.
        """
        dotenv_settings = DotEnvSettingsSource(settings_cls, env_file=env_files())
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=config_files())
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    # =================================================================
    # Helper Methods
    # =================================================================

    def get_aws_config(self) -> Dict[str, Any]:
        """Get keyword arguments for boto3.Session."""
        return {
            "profile_name": self.aws_profile,
            "region_name": self.aws_region,
        }

    def get_logs_config(self) -> Dict[str, Any]:
        """Get CloudWatch Logs paging configuration."""
        return {
            "page_size": self.logs_page_size,
            "max_iterations": self.logs_max_iterations,
            "start_from_head": self.logs_start_from_head,
        }

    def get_retry_config(self) -> Dict[str, Any]:
        """Get retry configuration for AWS calls."""
        return {
            "retries": self.fetch_retries,
            "delays": tuple(self.fetch_retry_delays) or None,
        }

    def get_style_config(self) -> Dict[str, Any]:
        """Get timeline styling configuration."""
        return {
            "timestamp_format": self.ui_timestamp_format,
            "utc": self.ui_utc,
            "source_width": self.ui_source_width,
            "message_width": self.ui_message_width,
            "timestamp_color": self.ui_timestamp_color,
            "source_color": self.ui_source_color,
            "message_color": self.ui_message_color,
            "header_color": self.ui_header_color,
            "footer_color": self.ui_footer_color,
        }

    def get_trace_log_path(self) -> Path:
        """Get the trace log file used in very-verbose mode."""
        if self.log_file:
            return Path(self.log_file).expanduser()
        return Path.home() / ".ecstrace" / "ecstrace_trace.log"


def load_config(**overrides: Any) -> Config:
    """
    Load configuration from all sources with proper precedence.

    Keyword overrides that are None are ignored, so CLI options that were
    not given fall through to the loaded values.

    Returns:
        Config: The loaded and validated configuration

    Examples:
        Basic usage:
        >>> config = load_config()
        >>> print(config.logs_max_iterations)
        10

        Environment variable override:
        # export ECSTRACE_LOGS_PAGE_SIZE=100
        >>> config = load_config()
        >>> print(config.logs_page_size)
        100

        CLI override:
        >>> config = load_config(aws_profile="staging")
        >>> print(config.aws_profile)
        'staging'
    """
    return Config(**{key: value for key, value in overrides.items() if value is not None})
