"""Tests for the config module."""
import json
from pathlib import Path

import pytest

from codestats.client import DEFAULT_BASE_URL
from codestats.config import (
    BASE_URL_ENV_VAR,
    TOKEN_ENV_VAR,
    client_from_config,
    get_api_token,
    get_base_url,
    get_username,
    load_config,
    save_config,
    set_api_token,
    set_base_url,
    set_username,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    monkeypatch.delenv(BASE_URL_ENV_VAR, raising=False)


class TestLoadConfig:
    def test_missing_file_returns_empty(self, tmp_path):
        assert load_config(tmp_path / "nonexistent.json") == {}

    def test_invalid_json_returns_empty(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")
        assert load_config(path) == {}

    def test_non_object_returns_empty(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config(path) == {}

    def test_loads_valid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"key": "value"}', encoding="utf-8")
        assert load_config(path) == {"key": "value"}


class TestSaveConfig:
    def test_creates_file(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"hello": "world"}, path)
        assert json.loads(path.read_text()) == {"hello": "world"}

    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "sub" / "dir" / "config.json"
        save_config({"nested": True}, path)
        assert path.exists()

    def test_owner_only_permissions(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"api_token": "x"}, path)
        assert path.stat().st_mode & 0o777 == 0o600


class TestApiToken:
    def test_not_set_returns_empty(self, tmp_path):
        assert get_api_token(tmp_path / "config.json") == ""

    def test_set_and_get_roundtrip(self, tmp_path):
        path = tmp_path / "config.json"
        set_api_token("abc123", path)
        assert get_api_token(path) == "abc123"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        set_api_token("from-file", path)
        monkeypatch.setenv(TOKEN_ENV_VAR, "from-env")
        assert get_api_token(path) == "from-env"


class TestBaseUrl:
    def test_default(self, tmp_path):
        assert get_base_url(tmp_path / "config.json") == DEFAULT_BASE_URL

    def test_set_and_get(self, tmp_path):
        path = tmp_path / "config.json"
        set_base_url("http://localhost:5000", path)
        assert get_base_url(path) == "http://localhost:5000"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv(BASE_URL_ENV_VAR, "https://stats.example.org")
        assert get_base_url(tmp_path / "config.json") == "https://stats.example.org"


class TestUsername:
    def test_not_set_returns_none(self, tmp_path):
        assert get_username(tmp_path / "config.json") is None

    def test_preserves_other_config_keys(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"other_key": "keep_me"}, path)
        set_username("alice", path)
        config = load_config(path)
        assert config["other_key"] == "keep_me"
        assert config["username"] == "alice"


class TestClientFromConfig:
    def test_anonymous_without_token(self, tmp_path):
        with client_from_config(tmp_path / "config.json") as client:
            assert client.is_anonymous is True
            assert client.base_url == DEFAULT_BASE_URL

    def test_uses_saved_settings(self, tmp_path):
        path = tmp_path / "config.json"
        set_api_token("abc", path)
        set_base_url("http://localhost:5000", path)
        with client_from_config(path) as client:
            assert client.is_anonymous is False
            assert client.base_url == "http://localhost:5000"
