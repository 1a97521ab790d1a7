"""Configuration management for the IPCRAE vault bridge.

The host runtime hands the plugin a loosely-typed mapping; ``resolve_config``
turns it into a frozen ``IPCRAEConfig``. The same model can be loaded from a
YAML file or from environment variables for the CLI.
"""

import logging
import os
from enum import StrEnum
from pathlib import Path
from typing import Any, Callable

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from ipcrae.core.errors import ConfigError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "~/IPCRAE"
DEFAULT_PROJECT_SLUG = "openclawIPCRAE"
DEFAULT_CACHE_TTL_MS = 5 * 60 * 1000


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{key}={value!r} is not an integer, using {default}")
        return default


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO")


class ContextMode(StrEnum):
    """How much of the vault is injected into the prompt context."""

    MINIMAL = "minimal"
    COMPACT = "compact"
    FULL = "full"


class IPCRAEConfig(BaseModel):
    """Resolved plugin configuration.

    Frozen so a single instance can be shared between the snapshot reader,
    the command handlers and the event hooks.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ipcrae_root: Path
    context_mode: ContextMode = ContextMode.COMPACT
    auto_journal: bool = True
    auto_capture: bool = True
    domain: str | None = None
    project_slug: str | None = None
    context_cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, gt=0)

    @property
    def context_cache_ttl(self) -> float:
        """Cache TTL in seconds."""
        return self.context_cache_ttl_ms / 1000


def _as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _expand_tilde(value: str) -> str:
    if value == "~" or value.startswith("~/"):
        return str(Path(value).expanduser())
    return value


def _as_mode(value: Any) -> ContextMode:
    try:
        return ContextMode(value)
    except ValueError:
        return ContextMode.COMPACT


def _as_bool(value: Any, fallback: bool) -> bool:
    return value if isinstance(value, bool) else fallback


def _as_optional_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _as_positive_int(value: Any, fallback: int) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if value != value or value in (float("inf"), float("-inf")) or value <= 0:
        return fallback
    return max(1, int(value))


def resolve_config(
    value: Any,
    resolve_path: Callable[[str], str] | None = None,
) -> IPCRAEConfig:
    """
    Build a config from a raw host mapping, falling back field by field.

    Args:
        value: Raw plugin configuration (camelCase keys)
        resolve_path: Optional host path resolver for non-tilde roots

    Returns:
        Resolved IPCRAEConfig
    """
    raw = _as_mapping(value)
    root_raw = _as_optional_str(raw.get("ipcraeRoot")) or DEFAULT_ROOT
    if resolve_path is not None and not root_raw.startswith("~"):
        root = resolve_path(root_raw)
    else:
        root = _expand_tilde(root_raw)

    return IPCRAEConfig(
        ipcrae_root=Path(root),
        context_mode=_as_mode(raw.get("contextMode")),
        auto_journal=_as_bool(raw.get("autoJournal"), True),
        auto_capture=_as_bool(raw.get("autoCapture"), True),
        domain=_as_optional_str(raw.get("domain")),
        project_slug=_as_optional_str(raw.get("projectSlug")) or DEFAULT_PROJECT_SLUG,
        context_cache_ttl_ms=_as_positive_int(
            raw.get("contextCacheTtlMs"), DEFAULT_CACHE_TTL_MS
        ),
    )


def read_config_mapping(path: Path | str) -> dict[str, Any]:
    """
    Read the raw plugin configuration mapping from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Raw mapping with host (camelCase) keys. Empty if the file is missing.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config_file = Path(path).expanduser()
    if not config_file.exists():
        logger.debug(f"No config file at {config_file}")
        return {}

    try:
        with open(config_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {config_file}: {e}")
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if raw is None:
        return {}

    if not isinstance(raw, dict):
        raise ConfigError(
            f"{config_file.name} must be a mapping, got {type(raw).__name__}"
        )

    logger.debug(f"Loaded config from {config_file}")
    return raw


def load_config_file(
    path: Path | str,
    resolve_path: Callable[[str], str] | None = None,
) -> IPCRAEConfig:
    """Load and resolve plugin configuration from a YAML file."""
    return resolve_config(read_config_mapping(path), resolve_path)


def env_config_mapping() -> dict[str, Any]:
    """Raw plugin configuration from IPCRAE_* environment variables."""
    return {
        "ipcraeRoot": get_env("IPCRAE_ROOT"),
        "contextMode": get_env("IPCRAE_CONTEXT_MODE"),
        "autoJournal": get_env_bool("IPCRAE_AUTO_JOURNAL", True),
        "autoCapture": get_env_bool("IPCRAE_AUTO_CAPTURE", True),
        "domain": get_env("IPCRAE_DOMAIN"),
        "projectSlug": get_env("IPCRAE_PROJECT_SLUG"),
        "contextCacheTtlMs": get_env_int("IPCRAE_CACHE_TTL_MS", DEFAULT_CACHE_TTL_MS),
    }


def resolve_local_path(value: str) -> str:
    """Path resolver for local (non-host) use: absolute, relative to cwd."""
    return str(Path(value).expanduser().resolve())


def load_config_from_env() -> IPCRAEConfig:
    """Build configuration from IPCRAE_* environment variables."""
    return resolve_config(env_config_mapping(), resolve_local_path)


def setup_logging() -> logging.Logger:
    """Configure and return logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, (LOG_LEVEL or "INFO").upper(), logging.INFO),
    )
    return logging.getLogger("ipcrae")
