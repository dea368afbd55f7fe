"""Configuration file management for codestats.

Reads and writes ~/.codestats/config.json for the API token, an alternate
base URL and the default username. CODESTATS_API_TOKEN and
CODESTATS_BASE_URL override the file.
"""
from __future__ import annotations

import json
import os
from pathlib import Path

from codestats.client import DEFAULT_BASE_URL, Client

DEFAULT_CONFIG_PATH: Path = Path.home() / ".codestats" / "config.json"

TOKEN_ENV_VAR = "CODESTATS_API_TOKEN"
BASE_URL_ENV_VAR = "CODESTATS_BASE_URL"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    # The file holds a credential.
    path.chmod(0o600)


def _set_value(key: str, value: str, config_path: Path | None) -> None:
    config = load_config(config_path)
    config[key] = value
    save_config(config, config_path)


def get_api_token(config_path: Path | None = None) -> str:
    """Return the API token, or "" when none is configured."""
    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token:
        return env_token
    return load_config(config_path).get("api_token") or ""


def set_api_token(token: str, config_path: Path | None = None) -> None:
    _set_value("api_token", token, config_path)


def get_base_url(config_path: Path | None = None) -> str:
    env_url = os.environ.get(BASE_URL_ENV_VAR)
    if env_url:
        return env_url
    return load_config(config_path).get("base_url") or DEFAULT_BASE_URL


def set_base_url(base_url: str, config_path: Path | None = None) -> None:
    _set_value("base_url", base_url, config_path)


def get_username(config_path: Path | None = None) -> str | None:
    """Return the default username for profile lookups, or None if not set."""
    return load_config(config_path).get("username") or None


def set_username(username: str, config_path: Path | None = None) -> None:
    _set_value("username", username, config_path)


def client_from_config(config_path: Path | None = None) -> Client:
    """Build a Client from the resolved token and base URL (anonymous without a token)."""
    return Client.with_base_url(get_api_token(config_path), get_base_url(config_path))
