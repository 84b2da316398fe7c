from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from tis_web.domain.errors import (
    AnalysisError,
    AuthError,
    MalformedResponse,
    QuotaError,
    SchemaViolation,
    TransportError,
    UpstreamError,
)
from tis_web.domain.models import (
    AnalysisResult,
    CriticalPoint,
    LlmCompletion,
    Severity,
    Verdict,
)

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("companyName", "summary", "riskScore", "verdict", "criticalPoints", "expertOpinion")
EXPECTED_MAX_POINTS = 5

_OPEN_FENCE_RE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?", flags=re.IGNORECASE)
_CLOSE_FENCE_RE = re.compile(r"\r?\n?```\s*$")

_AUTH_MARKERS = ("api_key_invalid", "invalid api key", "api key not valid", "api key expired",
                 "missing authentication", "no auth credentials", "unauthenticated", "permission_denied")
_QUOTA_MARKERS = ("resource_exhausted", "quota", "rate limit", "rate-limit", "rate_limit", "too many requests")


@dataclass(frozen=True)
class ValidationOutcome:
    result: Optional[AnalysisResult] = None
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def strip_code_fences(raw_text: str) -> str:
    """Remove a leading ```json (or bare ```) and a trailing ```, each if present."""
    text = (raw_text or "").strip()
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    text = _CLOSE_FENCE_RE.sub("", text, count=1)
    return text.strip()


def classify_completion(completion: LlmCompletion) -> Optional[AnalysisError]:
    """
    Map an upstream outcome to an error, or None when there is text to validate.
    Provider error codes are preferred over bare HTTP statuses.
    """
    if completion.status_code is None:
        return TransportError(f"Failed to reach the AI provider: {completion.error_message or 'no response'}")

    haystack = f"{completion.error_code} {completion.error_message}".lower()

    if not completion.ok:
        detail = completion.error_message or f"HTTP {completion.status_code}"
        # 402 is OpenRouter's "out of credits"
        if completion.status_code in (402, 429) or any(m in haystack for m in _QUOTA_MARKERS):
            return QuotaError(f"Rate or quota limit reached at the AI provider ({detail}).")
        if completion.status_code in (401, 403) or any(m in haystack for m in _AUTH_MARKERS):
            return AuthError(f"The AI provider rejected the API key ({detail}).")
        return UpstreamError(f"AI provider error {completion.status_code}: {detail}", raw=completion.raw_body or None)

    if completion.text is None:
        return MalformedResponse("Invalid AI response", raw=completion.raw_body or None)

    return None


def _coerce_score(value: Any, problems: List[str]) -> Optional[int]:
    if isinstance(value, bool):
        problems.append("riskScore must be a number")
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            problems.append("riskScore must be a number")
            return None
    if not isinstance(value, (int, float)) or (isinstance(value, float) and not math.isfinite(value)):
        problems.append("riskScore must be a number")
        return None
    score = int(round(value))
    if not 0 <= score <= 100:
        problems.append(f"riskScore {value} is outside 0-100")
        return None
    return score


def _require_str(obj: dict, key: str, where: str, problems: List[str]) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        problems.append(f"{where}{key} must be a string")
        return ""
    return value


def _parse_points(value: Any, problems: List[str]) -> List[CriticalPoint]:
    if not isinstance(value, list):
        problems.append("criticalPoints must be a list")
        return []

    points: List[CriticalPoint] = []
    for i, item in enumerate(value):
        where = f"criticalPoints[{i}]."
        if not isinstance(item, dict):
            problems.append(f"criticalPoints[{i}] must be an object")
            continue
        missing = [k for k in ("title", "description", "severity") if k not in item]
        if missing:
            problems.extend(f"{where}{k} is missing" for k in missing)
            continue
        title = _require_str(item, "title", where, problems)
        description = _require_str(item, "description", where, problems)
        severity = Severity.parse(item.get("severity"))
        if severity is None:
            problems.append(f"{where}severity {item.get('severity')!r} is not one of High, Medium, Low")
            continue
        points.append(CriticalPoint(title=title, description=description, severity=severity))

    if len(value) > EXPECTED_MAX_POINTS:
        log.warning("Model returned %d critical points (expected at most %d)", len(value), EXPECTED_MAX_POINTS)
    return points


def validate(raw_text: str) -> ValidationOutcome:
    """
    Parse model output into an AnalysisResult.
    Never raises: every failure comes back as ValidationOutcome.error.
    """
    text = strip_code_fences(raw_text)

    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        log.debug("Unparseable model output: %r", text[:500])
        return ValidationOutcome(error=MalformedResponse("Model did not return valid JSON", raw=text))

    if not isinstance(payload, dict):
        return ValidationOutcome(error=SchemaViolation(["top-level value must be a JSON object"], raw=text))

    missing = [k for k in REQUIRED_FIELDS if k not in payload]
    if missing:
        return ValidationOutcome(error=SchemaViolation([f"{k} is missing" for k in missing], raw=text))

    problems: List[str] = []
    company_name = _require_str(payload, "companyName", "", problems)
    summary = _require_str(payload, "summary", "", problems)
    expert_opinion = _require_str(payload, "expertOpinion", "", problems)
    risk_score = _coerce_score(payload.get("riskScore"), problems)

    verdict = Verdict.parse(payload.get("verdict"))
    if verdict is None:
        problems.append(f"verdict {payload.get('verdict')!r} is not one of Safe, Caution, Risky, Extreme Risk")

    points = _parse_points(payload.get("criticalPoints"), problems)

    if problems:
        return ValidationOutcome(error=SchemaViolation(problems, raw=text))

    return ValidationOutcome(result=AnalysisResult(
        company_name=company_name,
        summary=summary,
        risk_score=risk_score,
        verdict=verdict,
        critical_points=tuple(points),
        expert_opinion=expert_opinion,
    ))
