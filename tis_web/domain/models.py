from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

DEFAULT_MIME_TYPE = "application/pdf"


class Verdict(str, Enum):
    SAFE = "Safe"
    CAUTION = "Caution"
    RISKY = "Risky"
    EXTREME_RISK = "Extreme Risk"

    @classmethod
    def parse(cls, raw) -> Optional["Verdict"]:
        if not isinstance(raw, str):
            return None
        key = raw.strip()
        if key == "ExtremeRisk":
            return cls.EXTREME_RISK
        for v in cls:
            if v.value == key:
                return v
        return None


class Severity(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, raw) -> Optional["Severity"]:
        if not isinstance(raw, str):
            return None
        key = raw.strip()
        for s in cls:
            if s.value == key:
                return s
        return None


# -----------------------------
# Inputs (one dataclass per kind)
# -----------------------------
@dataclass(frozen=True)
class UrlInput:
    url: str
    kind: str = field(default="url", init=False)


@dataclass(frozen=True)
class FileInput:
    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE
    kind: str = field(default="file", init=False)


@dataclass(frozen=True)
class TextInput:
    text: str
    kind: str = field(default="text", init=False)


AnalysisInput = Union[UrlInput, FileInput, TextInput]


@dataclass(frozen=True)
class Attachment:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class NormalizedRequest:
    directive: str
    attachment: Optional[Attachment] = None
    allow_retrieval: bool = False


# -----------------------------
# Upstream outcome
# -----------------------------
@dataclass(frozen=True)
class LlmCompletion:
    status_code: Optional[int]      # None -> request never got a response
    text: Optional[str] = None      # None -> no choices / candidates
    error_code: str = ""
    error_message: str = ""
    raw_body: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300


# -----------------------------
# Result contract
# -----------------------------
@dataclass(frozen=True)
class CriticalPoint:
    title: str
    description: str
    severity: Severity

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class AnalysisResult:
    company_name: str
    summary: str
    risk_score: int                 # 0..100
    verdict: Verdict
    critical_points: Tuple[CriticalPoint, ...]
    expert_opinion: str

    def to_dict(self) -> dict:
        return {
            "companyName": self.company_name,
            "summary": self.summary,
            "riskScore": self.risk_score,
            "verdict": self.verdict.value,
            "criticalPoints": [p.to_dict() for p in self.critical_points],
            "expertOpinion": self.expert_opinion,
        }
