"""
Runtime configuration for smserve.

Design goals:
- Strong typing
- Strict validation
- Schema versioning
- Defaults usable without any file on disk

Resolution order for the config file:
    explicit path > $SMSERVE_CONFIG > ./.smserve/config.yaml > defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SMSERVE_CONFIG"

DEFAULT_BACKEND = "tensorflow"
DEFAULT_TAGS: Tuple[str, ...] = ("serve",)
DEFAULT_SIGNATURE = "serving_default"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ================================
# Domain Model
# ================================


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Immutable, validated runtime configuration.
    """

    backend: str = DEFAULT_BACKEND
    tags: Tuple[str, ...] = field(default=DEFAULT_TAGS)
    signature: str = DEFAULT_SIGNATURE
    log_level: str = "WARNING"

    def __post_init__(self):
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "log_level", str(self.log_level).upper())
        self._validate()

    def _validate(self) -> None:
        if not self.backend or not self.backend.strip():
            raise ConfigError("Backend name must be non-empty.")

        if not self.tags:
            raise ConfigError("At least one MetaGraph tag is required.")

        if any(not isinstance(t, str) or not t.strip() for t in self.tags):
            raise ConfigError(f"Tags must be non-empty strings: {list(self.tags)}")

        if not self.signature or not self.signature.strip():
            raise ConfigError("Signature name must be non-empty.")

        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. "
                f"Expected one of {', '.join(_LOG_LEVELS)}."
            )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


# ================================
# Serialization Layer
# ================================


class RuntimeConfigSchema:
    """
    Responsible ONLY for (de)serialization.
    """

    VERSION = 1

    @classmethod
    def load(cls, raw: Optional[dict]) -> RuntimeConfig:
        if not raw:
            return RuntimeConfig()

        if not isinstance(raw, dict):
            raise ConfigError("Configuration root must be a mapping.")

        version = raw.get("version")
        if version != cls.VERSION:
            raise ConfigError(
                f"Unsupported config version: {version}. "
                f"Expected version {cls.VERSION}."
            )

        tags = raw.get("tags", list(DEFAULT_TAGS))
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]

        return RuntimeConfig(
            backend=raw.get("backend", DEFAULT_BACKEND),
            tags=tuple(tags),
            signature=raw.get("signature", DEFAULT_SIGNATURE),
            log_level=raw.get("log_level", "WARNING"),
        )

    @classmethod
    def dump(cls, config: RuntimeConfig) -> dict:
        return {
            "version": cls.VERSION,
            "backend": config.backend,
            "tags": list(config.tags),
            "signature": config.signature,
            "log_level": config.log_level,
        }


# ================================
# Loading
# ================================


def default_config_path() -> Path:
    return Path.cwd() / ".smserve" / "config.yaml"


def resolve_config_path(path: Optional[str | Path] = None) -> Optional[Path]:
    """Return the config file to read, or None when defaults apply."""
    if path is not None:
        return Path(path).expanduser()

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    candidate = default_config_path()
    return candidate if candidate.exists() else None


def load_config(path: Optional[str | Path] = None) -> RuntimeConfig:
    """
    Load runtime configuration.

    Raises:
        ConfigError: If an explicitly requested file is missing, the YAML is
            malformed, or the values fail validation.
    """
    config_path = resolve_config_path(path)

    if config_path is None:
        logger.debug("No config file found; using defaults")
        return RuntimeConfig()

    if not config_path.exists():
        raise ConfigError(
            f"Config file does not exist: {config_path}",
            config_path=str(config_path),
        )

    try:
        raw = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(
            "Malformed YAML configuration.", config_path=str(config_path)
        ) from e
    except OSError as e:
        raise ConfigError(
            "Failed to read configuration file.", config_path=str(config_path)
        ) from e

    config = RuntimeConfigSchema.load(raw)
    logger.debug("Loaded config from %s: %s", config_path, config)
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_BACKEND",
    "DEFAULT_SIGNATURE",
    "DEFAULT_TAGS",
    "RuntimeConfig",
    "RuntimeConfigSchema",
    "default_config_path",
    "load_config",
    "resolve_config_path",
]
