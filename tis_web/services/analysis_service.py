from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from tis_web.domain.errors import ConfigError
from tis_web.domain.models import AnalysisInput, AnalysisResult
from tis_web.ports.llm import LlmClient
from tis_web.services import prompt_builder
from tis_web.services.input_normalization import InputNormalizer
from tis_web.services.response_validation import classify_completion, validate

log = logging.getLogger(__name__)


@dataclass
class AnalysisService:
    """
    Service layer: one scan = normalize -> one model call -> validate.
    Raises AnalysisError subclasses; keeps routes thin.
    """
    llm_client: LlmClient
    api_key: str
    api_key_env: str = "OPENROUTER_API_KEY"
    structured_output: bool = True
    normalizer: InputNormalizer = field(default_factory=InputNormalizer)
    system_instruction: str = prompt_builder.SYSTEM_INSTRUCTION

    def run(self, analysis_input: AnalysisInput) -> AnalysisResult:
        if not (self.api_key or "").strip():
            raise ConfigError(f"Missing {self.api_key_env}")

        request = self.normalizer.normalize(analysis_input)

        started = time.monotonic()
        completion = self.llm_client.complete(
            request,
            system_instruction=self.system_instruction,
            response_schema=prompt_builder.RESPONSE_SCHEMA if self.structured_output else None,
        )
        log.info(
            "%s call for %s input finished with status=%s in %.2fs",
            self.llm_client.name, analysis_input.kind, completion.status_code, time.monotonic() - started,
        )

        error = classify_completion(completion)
        if error is not None:
            raise error

        outcome = validate(completion.text)
        if outcome.error is not None:
            raise outcome.error
        return outcome.result
