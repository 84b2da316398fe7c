"""
OpenRouter chat-completions adapter.

Docs: https://openrouter.ai/docs/api-reference/chat-completion

Attachments are sent as content parts (image_url for images, file for
everything else) rather than inlined into the prompt text.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Union

import requests

from tis_web.adapters.http_errors import extract_provider_error
from tis_web.domain.models import Attachment, LlmCompletion, NormalizedRequest
from tis_web.ports.llm import LlmClient

log = logging.getLogger(__name__)


def _data_url(attachment: Attachment) -> str:
    encoded = base64.b64encode(attachment.data).decode("ascii")
    return f"data:{attachment.mime_type};base64,{encoded}"


def _user_content(request: NormalizedRequest) -> Union[str, List[Dict[str, Any]]]:
    if request.attachment is None:
        return request.directive

    parts: List[Dict[str, Any]] = [{"type": "text", "text": request.directive}]
    if request.attachment.mime_type.lower().startswith("image/"):
        parts.append({"type": "image_url", "image_url": {"url": _data_url(request.attachment)}})
    else:
        parts.append({
            "type": "file",
            "file": {"filename": "document", "file_data": _data_url(request.attachment)},
        })
    return parts


class OpenRouterClient(LlmClient):
    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "meta-llama/llama-3-70b-instruct",
        base_url: str = "https://openrouter.ai/api/v1",
        temperature: float = 0.2,
        timeout_seconds: float = 60.0,
        web_search: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = base_url.rstrip("/") + "/chat/completions"
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
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": _user_content(request)},
            ],
            "temperature": self.temperature,
        }
        if response_schema is not None:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "analysis_result", "strict": True, "schema": response_schema},
            }
        if request.allow_retrieval and self.web_search:
            payload["plugins"] = [{"id": "web"}]
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
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = self._http.post(self.url, headers=headers, data=json.dumps(payload), timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            log.warning("OpenRouter request failed: %s", exc)
            return LlmCompletion(status_code=None, error_message=str(exc))

        if resp.status_code // 100 != 2:
            code, message = extract_provider_error(resp)
            log.warning("OpenRouter returned %s (%s): %s", resp.status_code, code, message)
            return LlmCompletion(status_code=resp.status_code, error_code=code, error_message=message, raw_body=resp.text)

        try:
            data = resp.json()
        except ValueError:
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)

        # OpenRouter can also report an error inside a 200 body
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            err = data["error"]
            status = err.get("code") if isinstance(err.get("code"), int) else 502
            return LlmCompletion(
                status_code=status,
                error_code=str(err.get("code") or ""),
                error_message=str(err.get("message") or ""),
                raw_body=resp.text,
            )

        # Expected shape: choices[0].message.content
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)
        if not isinstance(content, str):
            return LlmCompletion(status_code=resp.status_code, raw_body=resp.text)

        return LlmCompletion(status_code=resp.status_code, text=content.strip(), raw_body=resp.text)
