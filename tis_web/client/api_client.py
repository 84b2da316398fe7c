from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from tis_web.domain.errors import AnalysisError, AuthError, QuotaError, TransportError
from tis_web.domain.models import DEFAULT_MIME_TYPE, AnalysisResult
from tis_web.services.response_validation import validate

QUOTA_MESSAGE = "You've reached your free tier speed limit. Please wait 60 seconds."
AUTH_MESSAGE = "Your API key is invalid or not activated. Check .env."


def url_payload(url: str) -> Dict[str, Any]:
    return {"type": "url", "value": url}


def text_payload(text: str) -> Dict[str, Any]:
    return {"type": "text", "value": text}


def file_payload(data: bytes, mime_type: Optional[str] = None) -> Dict[str, Any]:
    return {
        "type": "file",
        "value": {
            "data": base64.b64encode(data).decode("ascii"),
            "mimeType": mime_type or DEFAULT_MIME_TYPE,
        },
    }


def file_payload_from_path(path: Path) -> Dict[str, Any]:
    mime_type, _ = mimetypes.guess_type(str(path))
    return file_payload(path.read_bytes(), mime_type)


def error_from_response(message: str, raw: Optional[str] = None) -> AnalysisError:
    """Rebuild a typed error from the server's {"error": ...} string via its sentinel."""
    if QuotaError.sentinel in message:
        return QuotaError(QUOTA_MESSAGE, raw=raw)
    if AuthError.sentinel in message:
        return AuthError(AUTH_MESSAGE, raw=raw)
    return AnalysisError(message, raw=raw)


class ApiClient:
    """Thin HTTP client for POST /api/analyze."""

    def __init__(self, base_url: str, *, timeout_seconds: float = 90.0, session: Optional[requests.Session] = None):
        self.url = base_url.rstrip("/") + "/api/analyze"
        self.timeout_seconds = timeout_seconds
        self._http = session or requests

    def analyze(self, input_payload: Dict[str, Any]) -> AnalysisResult:
        try:
            resp = self._http.post(self.url, json={"input": input_payload}, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise TransportError(f"Could not reach the analysis server: {e}") from e

        if resp.status_code != 200:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("error") or f"API error: {resp.status_code}"
            raise error_from_response(str(message), body.get("raw"))

        outcome = validate(resp.text)
        if outcome.error is not None:
            raise outcome.error
        return outcome.result
