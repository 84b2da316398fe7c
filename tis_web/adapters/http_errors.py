from __future__ import annotations

from typing import Tuple

import requests


def extract_provider_error(resp: requests.Response) -> Tuple[str, str]:
    """
    Pull (code, message) out of a provider error body.
    Both OpenRouter and Gemini use {"error": {"code": ..., "message": ..., "status": ...}}.
    Falls back to the reason phrase / body text when the body is not JSON.
    """
    try:
        data = resp.json()
    except ValueError:
        return "", (resp.text or resp.reason or "").strip()[:500]

    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        # Gemini puts the symbolic code in "status" (e.g. RESOURCE_EXHAUSTED)
        code = err.get("status") or err.get("code") or ""
        message = err.get("message") or ""
        details = err.get("metadata") or err.get("details")
        if details and not message:
            message = str(details)
        return str(code), str(message)
    if isinstance(err, str):
        return "", err
    return "", (resp.text or "").strip()[:500]
