"""Configuration loading and validation for the event broker."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
import logging
from pathlib import Path
from typing import Any

from platformdirs import user_config_path
from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = user_config_path("event-broker")
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _normalize_level(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Logging level must be a string.")
    normalized = value.strip().upper()
    if normalized not in VALID_LOG_LEVELS:
        raise ValueError(f"Unsupported log level {normalized!r}.")
    return normalized


class BrokerConfig(BaseModel):
    """Dispatch diagnostics for a ``Broker`` instance."""

    trace_emissions: bool = False
    listener_error_log_level: str = "DEBUG"

    @field_validator("listener_error_log_level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        return _normalize_level(value)


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/event-broker/broker.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        return _normalize_level(value)

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    broker: BrokerConfig = BrokerConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def coerce_broker_config(value: BrokerConfig | Mapping[str, Any] | None) -> BrokerConfig:
    """Return ``value`` as a validated ``BrokerConfig``."""
    if value is None:
        return BrokerConfig()
    if isinstance(value, BrokerConfig):
        return value
    if not isinstance(value, Mapping):
        raise ConfigValidationError(
            f"Broker configuration must be a mapping, got {type(value).__name__}."
        )
    try:
        return BrokerConfig.model_validate(dict(value))
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid broker configuration: {exc}") from exc


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _safe_default_config() -> dict[str, dict[str, Any]]:
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning(
            "config.invalid",
            extra={"reason": str(exc)},
        )
        return _safe_default_config()


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling;
    otherwise the per-user ``CONFIG_PATH`` is read when it exists.
    """
    target_path = config_path or CONFIG_PATH

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning(
                "config.parse_failed",
                extra={"path": str(target_path), "reason": str(exc)},
            )
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
