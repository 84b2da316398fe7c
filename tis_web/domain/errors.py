from __future__ import annotations

from typing import List, Optional


class AnalysisError(Exception):
    """
    Base class for every failure of one analysis round trip.
    The web layer turns these into {"error": ..., "raw": ...} responses.
    """
    http_status: int = 500
    sentinel: str = ""

    def __init__(self, message: str, *, raw: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw

    def public_message(self) -> str:
        if self.sentinel:
            return f"{self.sentinel}: {self.message}"
        return self.message

    def to_payload(self) -> dict:
        payload = {"error": self.public_message()}
        if self.raw is not None:
            payload["raw"] = self.raw
        return payload


class ValidationError(AnalysisError):
    http_status = 400


class ConfigError(AnalysisError):
    http_status = 400


class AuthError(AnalysisError):
    http_status = 401
    sentinel = "AUTH_ERROR"


class QuotaError(AnalysisError):
    http_status = 429
    sentinel = "QUOTA_LIMIT"


class MalformedResponse(AnalysisError):
    http_status = 502


class SchemaViolation(AnalysisError):
    http_status = 502

    def __init__(self, problems: List[str], *, raw: Optional[str] = None):
        super().__init__(
            "Model response does not match the expected structure: " + "; ".join(problems),
            raw=raw,
        )
        self.problems = list(problems)


class TransportError(AnalysisError):
    http_status = 502


class UpstreamError(AnalysisError):
    """Non-2xx from the provider that is neither auth nor quota related."""
    http_status = 502
