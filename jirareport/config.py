"""Centralized configuration loading.

Loads environment variables once and provides a typed Settings object
for the rest of the codebase. Values are layered: built-in defaults, then
``~/.jira-daily-report.json``, then environment variables (and ``.env``).
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError


# Load .env once at import time
load_dotenv()

CONFIG_PATH = Path.home() / ".jira-daily-report.json"

# JSON config file keys -> Settings attribute names
_FILE_KEYS = {
    "jiraServer": "jira_server",
    "username": "username",
    "apiToken": "api_token",
    "tempoApiToken": "tempo_api_token",
    "whoAmI": "account_id",
}

# Environment variable -> Settings attribute name. Later entries win.
_ENV_KEYS = [
    ("JIRA_SERVER", "jira_server"),
    ("JIRA_EMAIL", "username"),
    ("JIRA_USERNAME", "username"),
    ("JIRA_API_TOKEN", "api_token"),
    ("TEMPO_API_TOKEN", "tempo_api_token"),
    ("JIRA_ACCOUNT_ID", "account_id"),
    ("JIRA_WHOAMI", "account_id"),
    ("JDR_LOG_LEVEL", "log_level"),
    ("JDR_LOG_FILE", "log_file"),
    ("JDR_POLL_MAX_ATTEMPTS", "poll_max_attempts"),
    ("JDR_POLL_INITIAL_DELAY", "poll_initial_delay"),
    ("JDR_POLL_MAX_DELAY", "poll_max_delay"),
    ("JDR_POLL_BACKOFF", "poll_backoff_factor"),
    ("JDR_DELAYED_REFRESH_SECONDS", "delayed_refresh_seconds"),
    ("JDR_HTTP_TIMEOUT", "http_timeout"),
]


@dataclass
class Settings:
    # Jira
    jira_server: str = ""
    username: str = ""
    api_token: str = ""
    account_id: str = ""

    # Tempo
    tempo_api_token: str = ""

    # Verification polling
    poll_max_attempts: int = 5
    poll_initial_delay: float = 0.5
    poll_max_delay: float = 5.0
    poll_backoff_factor: float = 2.0
    delayed_refresh_seconds: float = 1.5

    # HTTP
    http_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        self.jira_server = self.jira_server.rstrip("/")

    def validate(self) -> None:
        """Raise ConfigError when a required credential is missing."""
        if not self.jira_server:
            raise ConfigError("JIRA_SERVER is required (set via config file or environment variable)")
        if not self.username:
            raise ConfigError("JIRA_EMAIL/JIRA_USERNAME is required (set via config file or environment variable)")
        if not self.api_token:
            raise ConfigError("JIRA_API_TOKEN is required (set via config file or environment variable)")
        if not self.tempo_api_token:
            raise ConfigError("TEMPO_API_TOKEN is required (set via config file or environment variable)")


def _coerce(name: str, raw):
    """Convert a raw file/env value to the type of the Settings field."""
    default = Settings.__dataclass_fields__[name].default
    try:
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc
    return raw


def load_settings(config_path: Optional[Path] = None, environ: Optional[dict] = None) -> Settings:
    """Build Settings from the JSON config file and environment.

    Args:
        config_path: Alternative config file location (defaults to ~/.jira-daily-report.json)
        environ: Mapping used instead of os.environ (tests)
    """
    path = Path(config_path) if config_path else CONFIG_PATH
    env = os.environ if environ is None else environ
    values = {}

    if path.exists():
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
        for key, attr in _FILE_KEYS.items():
            if data.get(key) not in (None, ""):
                values[attr] = _coerce(attr, data[key])

    for var, attr in _ENV_KEYS:
        raw = env.get(var)
        if raw:
            values[attr] = _coerce(attr, raw)

    known = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in values.items() if k in known})

