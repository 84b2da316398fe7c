from __future__ import annotations

from typing import Any, Dict

import pytest

from tis_web.domain.models import LlmCompletion
from tis_web.tests.doubles import FakeLlmClient


@pytest.fixture
def sample_result_dict() -> Dict[str, Any]:
    return {
        "companyName": "Acme",
        "summary": "Acme keeps broad rights to your data and limits your remedies.",
        "riskScore": 82,
        "verdict": "Risky",
        "criticalPoints": [
            {
                "title": "Forced arbitration",
                "description": "Disputes go to binding arbitration; class actions are waived.",
                "severity": "High",
            },
            {
                "title": "Auto-renewal",
                "description": "Subscriptions renew yearly unless cancelled 30 days ahead.",
                "severity": "Medium",
            },
        ],
        "expertOpinion": "Do not sign up unless you accept losing your day in court.",
    }


@pytest.fixture
def fake_llm_factory():
    def _make(**kwargs) -> FakeLlmClient:
        kwargs.setdefault("status_code", 200)
        return FakeLlmClient(LlmCompletion(**kwargs))
    return _make
