"""
settings.py - Environment-aware settings for the plotting service client.

Values come from ``FIA_*`` environment variables, with optional overrides
from a YAML file loaded through :func:`load_settings`.
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fiaplot import logger
from fiaplot.exceptions import ConfigError


class PlottingSettings(BaseSettings):
    """
    Settings for reaching the plotting service and running discovery.

    Every field can be set through an environment variable named
    ``FIA_<FIELD>``, e.g. ``FIA_PLOTTING_API_URL`` or ``FIA_BATCH_SIZE``.
    """

    model_config = SettingsConfigDict(env_prefix="FIA_", case_sensitive=False, extra="ignore")

    plotting_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the plotting service",
    )
    timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds; data transfers can be large",
    )
    batch_size: int = Field(
        default=15,
        description="Number of metadata requests issued concurrently during discovery",
    )
    api_style: Literal["plotting", "h5grove"] = Field(
        default="plotting",
        description="Route layout of the service: plotting service or bare h5grove",
    )
    dev_mode: bool = Field(
        default=False,
        description="Send requests without an Authorization header",
    )
    validate_paths: bool = Field(
        default=True,
        description="Skip enumerated paths that do not start with '/'",
    )
    error_markers: List[str] = Field(
        default_factory=lambda: ["error", "err"],
        description="Substrings marking a dataset path as an error series",
    )
    auth_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the plotting service",
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Batch size must be at least 1")
        return v

    @field_validator("plotting_api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("plotting_api_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("error_markers")
    @classmethod
    def validate_error_markers(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("error_markers cannot be empty")
        if any(not marker.strip() for marker in v):
            raise ValueError("error_markers cannot contain blank markers")
        return v


def _format_validation_errors(error: ValidationError) -> List[str]:
    details = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"])
        details.append(f"Field '{field_path}': {item['msg']}")
    return details


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> PlottingSettings:
    """
    Build :class:`PlottingSettings` from the environment and an optional YAML file.

    Values from the YAML file take precedence over environment variables, and
    keyword ``overrides`` take precedence over both.

    Raises:
        ConfigError: CONFIG_001 if the file is missing, CONFIG_002 if it is not
            valid YAML mapping, CONFIG_003 if validation fails
    """
    values: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(
                f"Settings file not found: {path}",
                error_code="CONFIG_001",
                context={"config_path": path},
            )
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Error parsing YAML settings: {e}",
                error_code="CONFIG_002",
                context={"config_path": path},
            ) from e
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Settings file must contain a mapping, got {type(raw).__name__}",
                error_code="CONFIG_002",
                context={"config_path": path},
            )
        values.update(raw)
        logger.debug(f"Loaded {len(raw)} settings overrides from {path}")

    values.update(overrides)

    try:
        settings = PlottingSettings(**values)
    except ValidationError as e:
        details = _format_validation_errors(e)
        message = "Settings validation failed:\n" + "\n".join(details)
        logger.error(message)
        raise ConfigError(
            message,
            error_code="CONFIG_003",
            context={"config_path": config_path, "validation_errors": details},
        ) from e

    logger.debug(f"Using plotting service at {settings.plotting_api_url} ({settings.api_style} routes)")
    return settings


__all__ = ["PlottingSettings", "load_settings"]
