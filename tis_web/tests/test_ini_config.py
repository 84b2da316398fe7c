from __future__ import annotations

from pathlib import Path

import pytest

from tis_web.config.ini_config import IniConfig


def write_ini(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "app.ini"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_when_ini_absent(tmp_path: Path):
    s = IniConfig(tmp_path / "nope.ini", required=False).load_settings(environ={})
    assert s.provider == "openrouter"
    assert s.model == "meta-llama/llama-3-70b-instruct"
    assert s.api_key_env == "OPENROUTER_API_KEY"
    assert s.api_key == ""
    assert s.temperature == 0.2
    assert s.cors_origins == ("http://localhost:5173", "https://tosllm.vercel.app")
    assert s.flask_port == 3002
    assert s.max_content_length == 50 * 1024 * 1024
    assert s.history_max_entries == 6
    assert s.cooldown_seconds == 60
    assert s.client_api_url == "http://127.0.0.1:3002"


def test_required_ini_missing_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        IniConfig(tmp_path / "nope.ini")


def test_gemini_provider_defaults_and_key(tmp_path: Path):
    ini = write_ini(tmp_path, "[llm]\nprovider = Gemini\nweb_search = yes\n")
    s = IniConfig(ini).load_settings(environ={"GEMINI_API_KEY": "  AIza-123  "})
    assert s.provider == "gemini"
    assert s.model == "gemini-2.0-flash"
    assert s.base_url == "https://generativelanguage.googleapis.com/v1beta"
    assert s.api_key == "AIza-123"
    assert s.web_search is True


def test_overrides(tmp_path: Path):
    ini = write_ini(
        tmp_path,
        "[llm]\napi_key_env = MY_KEY\nrequest_timeout_seconds = 15\nstructured_output = false\n"
        "[cors]\norigins = https://a.example, https://b.example ,\n"
        "[flask]\nport = 8080\nmax_content_length_mb = 5\n"
        "[history]\npath = " + str(tmp_path / "h.json") + "\nmax_entries = 3\n",
    )
    s = IniConfig(ini).load_settings(environ={"MY_KEY": "k"})
    assert s.api_key == "k"
    assert s.request_timeout_seconds == 15
    assert s.structured_output is False
    assert s.cors_origins == ("https://a.example", "https://b.example")
    assert s.flask_port == 8080
    assert s.max_content_length == 5 * 1024 * 1024
    assert s.history_path == (tmp_path / "h.json").resolve()
    assert s.history_max_entries == 3


@pytest.mark.parametrize(
    "text",
    [
        "[llm]\nprovider = claude-on-a-toaster\n",
        "[llm]\nrequest_timeout_seconds = 0\n",
        "[history]\nmax_entries = 0\n",
    ],
)
def test_invalid_values(tmp_path: Path, text: str):
    with pytest.raises(ValueError):
        IniConfig(write_ini(tmp_path, text)).load_settings(environ={})


def test_app_ini_env_var(tmp_path: Path, monkeypatch):
    ini = write_ini(tmp_path, "[flask]\nport = 9999\n")
    monkeypatch.setenv("APP_INI", str(ini))
    assert IniConfig.from_env_or_default().load_settings(environ={}).flask_port == 9999
