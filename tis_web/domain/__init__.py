from .errors import (
    AnalysisError,
    AuthError,
    ConfigError,
    MalformedResponse,
    QuotaError,
    SchemaViolation,
    TransportError,
    UpstreamError,
    ValidationError,
)
from .models import (
    AnalysisInput,
    AnalysisResult,
    Attachment,
    CriticalPoint,
    FileInput,
    LlmCompletion,
    NormalizedRequest,
    Severity,
    TextInput,
    UrlInput,
    Verdict,
)

__all__ = [
    "AnalysisError",
    "AuthError",
    "ConfigError",
    "MalformedResponse",
    "QuotaError",
    "SchemaViolation",
    "TransportError",
    "UpstreamError",
    "ValidationError",
    "AnalysisInput",
    "AnalysisResult",
    "Attachment",
    "CriticalPoint",
    "FileInput",
    "LlmCompletion",
    "NormalizedRequest",
    "Severity",
    "TextInput",
    "UrlInput",
    "Verdict",
]
