"""Configuration for the entrance logger, read from .env, the environment and overrides."""
from __future__ import annotations

import dataclasses
import logging
import os

import voluptuous as vol
from dotenv import load_dotenv

from .const import PROBE_INTERVAL, REQUEST_TIMEOUT
from .errors import ConfigError

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "ENTRANCE_LOGGER_"
DEFAULT_STORAGE_PATH = "~/.entrance_logger.json"

positive_int = vol.All(vol.Coerce(int), vol.Range(min=1))
# Endpoint must be an http(s) URL when set
endpoint_validator = vol.Any(None, "", vol.All(str, vol.Match(r"^https?://\S+$")))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional("endpoint", default=None): endpoint_validator,
        vol.Optional("team_password", default=""): vol.Any(None, str),
        vol.Optional("storage_path", default=DEFAULT_STORAGE_PATH): vol.All(str, vol.Length(min=1)),
        vol.Optional("request_timeout", default=REQUEST_TIMEOUT): positive_int,
        vol.Optional("probe_interval", default=PROBE_INTERVAL): positive_int,
    }
)


@dataclasses.dataclass(frozen=True)
class Config:
    endpoint: str | None
    team_password: str
    storage_path: str
    request_timeout: int
    probe_interval: int

    def require_endpoint(self) -> str:
        if not self.endpoint:
            raise ConfigError(f"{ENV_PREFIX}ENDPOINT is not configured")
        return self.endpoint


def load_config(env_file: str | None = None, **overrides) -> Config:
    """
    Build the configuration.

    Later sources win: defaults, .env file, process environment, overrides
    (overrides equal to None are ignored).
    """
    load_dotenv(env_file)

    raw: dict = {}
    for key in CONFIG_SCHEMA.schema:
        name = str(key)
        value = os.getenv(ENV_PREFIX + name.upper())
        if value is not None:
            raw[name] = value
    raw.update({k: v for k, v in overrides.items() if v is not None})

    try:
        data = CONFIG_SCHEMA(raw)
    except vol.Invalid as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    data["endpoint"] = data["endpoint"] or None
    data["team_password"] = data["team_password"] or ""
    _LOGGER.debug("Using endpoint %s, storage %s", data["endpoint"], data["storage_path"])
    return Config(**data)
