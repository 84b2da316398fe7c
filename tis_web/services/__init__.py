from .analysis_service import AnalysisService
from .input_normalization import InputNormalizer, parse_input
from .response_validation import ValidationOutcome, classify_completion, strip_code_fences, validate
from .url_normalization import UrlNormalizer, GuessComUrlNormalizer

__all__ = [
    "AnalysisService",
    "InputNormalizer",
    "parse_input",
    "ValidationOutcome",
    "classify_completion",
    "strip_code_fences",
    "validate",
    "UrlNormalizer",
    "GuessComUrlNormalizer",
]
