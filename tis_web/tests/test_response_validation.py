from __future__ import annotations

import json

import pytest

from tis_web.domain.errors import (
    AuthError,
    MalformedResponse,
    QuotaError,
    SchemaViolation,
    TransportError,
    UpstreamError,
)
from tis_web.domain.models import LlmCompletion, Severity, Verdict
from tis_web.services.response_validation import classify_completion, strip_code_fences, validate


# -----------------------------
# strip_code_fences
# -----------------------------
@pytest.mark.parametrize(
    "raw",
    [
        '```json\n{"a": 1}\n```',
        '```JSON\n{"a": 1}\n```\n',
        '```\n{"a": 1}\n```',
        '  ```json {"a": 1}```  ',
        '{"a": 1}\n```',
        '```json\n{"a": 1}',
        '{"a": 1}',
    ],
)
def test_strip_code_fences(raw):
    assert strip_code_fences(raw) == '{"a": 1}'


def test_strip_is_idempotent():
    once = strip_code_fences('```json\n{"a": "```"}\n```')
    assert strip_code_fences(once) == once


# -----------------------------
# validate
# -----------------------------
def test_valid_payload(sample_result_dict):
    outcome = validate(json.dumps(sample_result_dict))
    assert outcome.ok
    result = outcome.result
    assert result.company_name == "Acme"
    assert result.risk_score == 82
    assert result.verdict is Verdict.RISKY
    assert result.critical_points[0].severity is Severity.HIGH
    assert len(result.critical_points) == 2


def test_fenced_and_plain_give_same_result(sample_result_dict):
    plain = json.dumps(sample_result_dict)
    fenced = f"```json\n{plain}\n```"
    assert validate(fenced).result == validate(plain).result


def test_trailing_fence_without_opening_fence(sample_result_dict):
    outcome = validate(json.dumps(sample_result_dict) + "\n```")
    assert outcome.ok
    assert outcome.result.company_name == "Acme"


def test_round_trip_through_to_dict(sample_result_dict):
    first = validate(json.dumps(sample_result_dict)).result
    second = validate(json.dumps(first.to_dict())).result
    assert second == first


def test_extreme_risk_wire_value_and_alias(sample_result_dict):
    sample_result_dict["verdict"] = "Extreme Risk"
    assert validate(json.dumps(sample_result_dict)).result.verdict is Verdict.EXTREME_RISK
    sample_result_dict["verdict"] = "ExtremeRisk"
    result = validate(json.dumps(sample_result_dict)).result
    assert result.verdict is Verdict.EXTREME_RISK
    assert result.to_dict()["verdict"] == "Extreme Risk"


@pytest.mark.parametrize("score, expected", [("82", 82), (" 40 ", 40), (63.6, 64), (0, 0), (100, 100)])
def test_risk_score_coercion(sample_result_dict, score, expected):
    sample_result_dict["riskScore"] = score
    assert validate(json.dumps(sample_result_dict)).result.risk_score == expected


def test_empty_critical_points_allowed(sample_result_dict):
    sample_result_dict["criticalPoints"] = []
    assert validate(json.dumps(sample_result_dict)).result.critical_points == ()


def test_not_json_is_malformed():
    outcome = validate("Sorry, I cannot help with that.")
    assert not outcome.ok
    assert isinstance(outcome.error, MalformedResponse)
    assert outcome.error.raw == "Sorry, I cannot help with that."


def test_missing_risk_score_is_schema_violation(sample_result_dict):
    del sample_result_dict["riskScore"]
    outcome = validate(json.dumps(sample_result_dict))
    assert isinstance(outcome.error, SchemaViolation)
    assert "riskScore is missing" in outcome.error.problems


def test_unknown_verdict_is_schema_violation(sample_result_dict):
    sample_result_dict["verdict"] = "Unknown"
    outcome = validate(json.dumps(sample_result_dict))
    assert isinstance(outcome.error, SchemaViolation)
    assert any("verdict" in p for p in outcome.error.problems)


def test_critical_severity_is_schema_violation(sample_result_dict):
    sample_result_dict["criticalPoints"][1]["severity"] = "Critical"
    outcome = validate(json.dumps(sample_result_dict))
    assert isinstance(outcome.error, SchemaViolation)
    assert any(p.startswith("criticalPoints[1].severity") for p in outcome.error.problems)
    assert outcome.error.raw is not None


@pytest.mark.parametrize(
    "field, value",
    [
        ("riskScore", "high"),
        ("riskScore", True),
        ("riskScore", 140),
        ("riskScore", -1),
        ("companyName", None),
        ("summary", 12),
        ("criticalPoints", "none"),
        ("criticalPoints", ["just a string"]),
        ("criticalPoints", [{"title": "x", "severity": "Low"}]),
    ],
)
def test_invalid_fields(sample_result_dict, field, value):
    sample_result_dict[field] = value
    outcome = validate(json.dumps(sample_result_dict))
    assert outcome.result is None
    assert isinstance(outcome.error, SchemaViolation)


@pytest.mark.parametrize("raw", ["[]", "42", "null", '"text"'])
def test_non_object_json_is_schema_violation(raw):
    assert isinstance(validate(raw).error, SchemaViolation)


# -----------------------------
# classify_completion
# -----------------------------
def test_transport_failure():
    err = classify_completion(LlmCompletion(status_code=None, error_message="Connection refused"))
    assert isinstance(err, TransportError)


@pytest.mark.parametrize(
    "completion",
    [
        LlmCompletion(status_code=429, error_message="Rate limit exceeded"),
        LlmCompletion(status_code=402, error_message="Insufficient credits"),
        LlmCompletion(status_code=400, error_code="RESOURCE_EXHAUSTED", error_message="Quota exceeded"),
    ],
)
def test_quota_failures(completion):
    err = classify_completion(completion)
    assert isinstance(err, QuotaError)
    assert err.public_message().startswith("QUOTA_LIMIT:")


@pytest.mark.parametrize(
    "completion",
    [
        LlmCompletion(status_code=401, error_message="No auth credentials found"),
        LlmCompletion(status_code=403, error_code="PERMISSION_DENIED", error_message="denied"),
        LlmCompletion(status_code=400, error_code="INVALID_ARGUMENT", error_message="API key not valid. Please pass a valid API key."),
    ],
)
def test_auth_failures(completion):
    err = classify_completion(completion)
    assert isinstance(err, AuthError)
    assert "AUTH_ERROR" in err.public_message()


def test_other_upstream_failure():
    err = classify_completion(LlmCompletion(status_code=500, error_message="Internal error", raw_body="{}"))
    assert isinstance(err, UpstreamError)
    assert "500" in err.message


def test_ok_without_text_is_malformed():
    err = classify_completion(LlmCompletion(status_code=200, text=None, raw_body='{"choices": []}'))
    assert isinstance(err, MalformedResponse)
    assert err.message == "Invalid AI response"


def test_ok_with_text_is_not_an_error():
    assert classify_completion(LlmCompletion(status_code=200, text="{}")) is None
