"""
Gemini generateContent adapter (REST, no SDK).

References:
- https://ai.google.dev/api/generate-content
- https://ai.google.dev/gemini-api/docs/structured-output

Gemini rejects a responseSchema together with the google_search tool, so
when search is enabled the JSON contract is carried by the system
instruction alone.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from tis_web.adapters.http_errors import extract_provider_error
from tis_web.domain.models import LlmCompletion, NormalizedRequest
from tis_web.ports.llm import LlmClient

log = logging.getLogger(__name__)

_UNSUPPORTED_SCHEMA_KEYS = {"additionalProperties"}


def _to_gemini_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {k: _to_gemini_schema(v) for k, v in schema.items() if k not in _UNSUPPORTED_SCHEMA_KEYS}
    if isinstance(schema, list):
        return [_to_gemini_schema(v) for v in schema]
    return schema


class GeminiClient(LlmClient):
    name = "gemini"

    _URL_TEMPLATE = "{base_url}/models/{model}:generateContent"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.2,
        timeout_seconds: float = 60.0,
        web_search: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = self._URL_TEMPLATE.format(base_url=base_url.rstrip("/"), model=model)
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.web_search = web_search
        self._http = session or requests

    def build_payload(
        self,
        request: NormalizedRequest,
        *,
        system_instruction: str,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [{"text": request.directive}]
        if request.attachment is not None:
            parts.append({
                "inline_data": {
                    "mime_type": request.attachment.mime_type,
                    "data": base64.b64encode(request.attachment.data).decode("ascii"),
                }
            })

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "generationConfig": {"temperature": self.temperature},
        }

        use_search = request.allow_retrieval and self.web_search
        if use_search:
            payload["tools"] = [{"google_search": {}}]
        elif response_schema is not None:
            payload["generationConfig"]["responseMimeType"] = "application/json"
            payload["generationConfig"]["responseSchema"] = _to_gemini_schema(response_schema)
        return payload

    def complete(
        self,
        request: NormalizedRequest,
        *,
        system_instruction: str,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> LlmCompletion:
        payload = self.build_payload(request, system_instruction=system_instruction, response_schema=response_schema)
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            resp = self._http.post(self.url, headers=headers, data=json.dumps(payload), timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            log.warning("Gemini request failed: %s", exc)
            return LlmCompletion(status_code=None, error_message=str(exc))

        if resp.status_code // 100 != 2:
            code, message = extract_provider_error(resp)
            log.warning("Gemini returned %s (%s): %s", resp.status_code, code, message)
            return LlmCompletion(status_code=resp.status_code, error_code=code, error_message=message, raw_body=resp.text)

        try:
            data = resp.json()
        except ValueError:
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)

        # Expected shape: candidates[0].content.parts[*].text
        try:
            parts = data["candidates"][0]["content"]["parts"]
            texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
        except (KeyError, IndexError, TypeError):
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)
        if not texts:
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)

        return LlmCompletion(status_code=resp.status_code, text="".join(texts).strip(), raw_body=resp.text)
