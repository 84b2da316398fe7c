from __future__ import annotations

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from tis_web.adapters.llm_gemini import GeminiClient
from tis_web.adapters.llm_openrouter import OpenRouterClient
from tis_web.config.ini_config import AppSettings, IniConfig
from tis_web.ports.llm import LlmClient
from tis_web.services.analysis_service import AnalysisService
from tis_web.services.input_normalization import InputNormalizer
from tis_web.services.url_normalization import GuessComUrlNormalizer
from tis_web.web.routes import create_blueprint

_CLIENTS = {
    "openrouter": OpenRouterClient,
    "gemini": GeminiClient,
}


def build_llm_client(settings: AppSettings) -> LlmClient:
    client_cls = _CLIENTS[settings.provider]
    return client_cls(
        settings.api_key,
        model=settings.model,
        base_url=settings.base_url,
        temperature=settings.temperature,
        timeout_seconds=settings.request_timeout_seconds,
        web_search=settings.web_search,
    )


def create_app(settings: Optional[AppSettings] = None, llm_client: Optional[LlmClient] = None) -> Flask:
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    analysis_service = AnalysisService(
        llm_client=llm_client or build_llm_client(settings),
        api_key=settings.api_key,
        api_key_env=settings.api_key_env,
        structured_output=settings.structured_output,
        normalizer=InputNormalizer(url_normalizer=GuessComUrlNormalizer()),
    )

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug
    app.logger.setLevel(settings.log_level)

    CORS(
        app,
        resources={r"/api/*": {"origins": list(settings.cors_origins)}},
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.register_blueprint(create_blueprint(analysis_service, settings.provider))

    if not settings.api_key:
        app.logger.warning("%s is not set; /api/analyze will answer 400 until it is", settings.api_key_env)

    return app
