import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

INI_DEFAULT_NAME = "TermsInShort.ini"

PROVIDER_DEFAULTS = {
    "openrouter": {
        "model": "meta-llama/llama-3-70b-instruct",
        "base_url": "https://openrouter.ai/api/v1",
        "api_key_env": "OPENROUTER_API_KEY",
    },
    "gemini": {
        "model": "gemini-2.0-flash",
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "api_key_env": "GEMINI_API_KEY",
    },
}


@dataclass(frozen=True)
class AppSettings:
    provider: str
    model: str
    base_url: str
    api_key_env: str
    api_key: str                    # may be empty; checked per request
    temperature: float
    request_timeout_seconds: float
    structured_output: bool
    web_search: bool

    cors_origins: Tuple[str, ...]

    flask_host: str
    flask_port: int
    flask_debug: bool
    max_content_length: int

    log_level: str

    history_path: Path
    history_max_entries: int

    client_api_url: str
    cooldown_seconds: int


class IniConfig:
    """
    Adapter around ConfigParser and the environment.
    Keeps INI handling out of the app/service code.
    """

    def __init__(self, ini_path: Path, *, required: bool = True):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok and required:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        load_dotenv()
        ini_raw = (os.getenv("APP_INI") or "").strip()
        if ini_raw:
            return IniConfig(Path(ini_raw))
        # If APP_INI is not set, fall back to the repo-root ini (defaults apply when absent)
        return IniConfig(Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME, required=False)

    def _get_str(self, section: str, key: str, fallback: str) -> str:
        return (self._cfg.get(section, key, fallback=fallback) or "").strip() or fallback

    def _get_path(self, section: str, key: str, fallback: str) -> Path:
        raw = self._get_str(section, key, fallback)
        return Path(os.path.expandvars(os.path.expanduser(raw))).resolve()

    def load_settings(self, environ: Optional[dict] = None) -> AppSettings:
        env = os.environ if environ is None else environ

        # LLM provider
        provider = self._get_str("llm", "provider", "openrouter").lower()
        if provider not in PROVIDER_DEFAULTS:
            raise ValueError(f"Unsupported llm.provider: {provider!r} (expected one of {sorted(PROVIDER_DEFAULTS)})")
        defaults = PROVIDER_DEFAULTS[provider]

        model = self._get_str("llm", "model", defaults["model"])
        base_url = self._get_str("llm", "base_url", defaults["base_url"]).rstrip("/")
        api_key_env = self._get_str("llm", "api_key_env", defaults["api_key_env"])
        api_key = (env.get(api_key_env) or "").strip()

        temperature = self._cfg.getfloat("llm", "temperature", fallback=0.2)
        request_timeout_seconds = self._cfg.getfloat("llm", "request_timeout_seconds", fallback=60.0)
        structured_output = self._cfg.getboolean("llm", "structured_output", fallback=True)
        web_search = self._cfg.getboolean("llm", "web_search", fallback=False)

        # CORS
        cors_origins = tuple(
            o.strip()
            for o in self._get_str("cors", "origins", "http://localhost:5173,https://tosllm.vercel.app").split(",")
            if o.strip()
        )

        # Flask
        flask_host = self._get_str("flask", "host", "127.0.0.1")
        flask_port = self._cfg.getint("flask", "port", fallback=3002)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=False)
        max_content_length = self._cfg.getint("flask", "max_content_length_mb", fallback=50) * 1024 * 1024

        # Logging
        log_level = self._get_str("logging", "level", "INFO").upper()

        # History
        history_path = self._get_path("history", "path", "~/.terms_in_short/history.json")
        history_max_entries = self._cfg.getint("history", "max_entries", fallback=6)

        # Client
        client_api_url = self._get_str("client", "api_url", f"http://{flask_host}:{flask_port}").rstrip("/")
        cooldown_seconds = self._cfg.getint("client", "cooldown_seconds", fallback=60)

        # Validate
        if request_timeout_seconds <= 0:
            raise ValueError("llm.request_timeout_seconds must be positive")
        if history_max_entries <= 0:
            raise ValueError("history.max_entries must be positive")

        return AppSettings(
            provider=provider,
            model=model,
            base_url=base_url,
            api_key_env=api_key_env,
            api_key=api_key,
            temperature=temperature,
            request_timeout_seconds=request_timeout_seconds,
            structured_output=structured_output,
            web_search=web_search,
            cors_origins=cors_origins,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            max_content_length=max_content_length,
            log_level=log_level,
            history_path=history_path,
            history_max_entries=history_max_entries,
            client_api_url=client_api_url,
            cooldown_seconds=cooldown_seconds,
        )
