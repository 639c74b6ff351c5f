"""Configuration for the HAC report client.

Values are merged from defaults, an optional YAML file and ``HAC_*``
environment variables, then validated with a voluptuous schema.
"""
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import voluptuous as vol
import yaml

from .const import (
    CONF_BASE_URL,
    CONF_FETCH_TIMEOUT,
    CONF_HOST,
    CONF_PORT,
    CONF_SESSION_CHECK_PATH,
    CONF_SESSION_COOKIE,
    CONF_SESSION_HEADER,
    CONF_USER_AGENT,
    CONF_VALIDATE_SESSION,
    CONF_VALIDATE_TIMEOUT,
    DEFAULT_BASE_URL,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SESSION_CHECK_PATH,
    DEFAULT_SESSION_HEADER,
    DEFAULT_USER_AGENT,
    DEFAULT_VALIDATE_TIMEOUT,
    ENV_PREFIX,
)
from .exceptions import ConfigError

_LOGGER = logging.getLogger(__name__)

_TIMEOUT = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))
_PATH = vol.All(str, vol.Match(r"^/"))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_BASE_URL, default=DEFAULT_BASE_URL): vol.All(str, vol.Url()),
        vol.Optional(CONF_VALIDATE_TIMEOUT, default=DEFAULT_VALIDATE_TIMEOUT): _TIMEOUT,
        vol.Optional(CONF_FETCH_TIMEOUT, default=DEFAULT_FETCH_TIMEOUT): _TIMEOUT,
        vol.Optional(CONF_SESSION_CHECK_PATH, default=DEFAULT_SESSION_CHECK_PATH): _PATH,
        vol.Optional(CONF_SESSION_COOKIE, default=None): vol.Any(None, vol.All(str, vol.Length(min=1))),
        vol.Optional(CONF_SESSION_HEADER, default=DEFAULT_SESSION_HEADER): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_USER_AGENT, default=DEFAULT_USER_AGENT): str,
        vol.Optional(CONF_VALIDATE_SESSION, default=True): vol.Boolean(),
        vol.Optional(CONF_HOST, default=DEFAULT_HOST): str,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(vol.Coerce(int), vol.Range(min=1, max=65535)),
    }
)


@dataclass(frozen=True)
class HACConfig:
    """Validated client settings."""

    base_url: str = DEFAULT_BASE_URL
    validate_timeout: float = DEFAULT_VALIDATE_TIMEOUT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    session_check_path: str = DEFAULT_SESSION_CHECK_PATH
    session_cookie: str | None = None
    session_header: str = DEFAULT_SESSION_HEADER
    user_agent: str = DEFAULT_USER_AGENT
    validate_session: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HACConfig":
        """Validate raw settings and build a config."""
        try:
            validated = CONFIG_SCHEMA(dict(data))
        except vol.Invalid as err:
            raise ConfigError(f"Invalid configuration: {err}") from err

        validated[CONF_BASE_URL] = validated[CONF_BASE_URL].rstrip("/")
        return cls(**validated)

    def url(self, path: str) -> str:
        """Return the absolute portal URL for a path."""
        return f"{self.base_url}{path}"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as err:
        raise ConfigError(f"Failed to load config file {path}: {err}") from err

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _from_environ(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect HAC_* variables that match a config key."""
    keys = {key.schema for key in CONFIG_SCHEMA.schema}
    found = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        if key in keys:
            found[key] = value
    return found


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> HACConfig:
    """Load settings from a YAML file and the environment."""
    data: dict[str, Any] = {}

    if path is not None:
        _LOGGER.debug("Loading config from %s", path)
        data.update(_read_yaml(path))

    data.update(_from_environ(os.environ if environ is None else environ))

    return HACConfig.from_dict(data)
