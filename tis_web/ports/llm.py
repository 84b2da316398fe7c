from __future__ import annotations

from typing import Any, Dict, Optional

from tis_web.domain.models import LlmCompletion, NormalizedRequest


class LlmClient:
    """
    Port for the upstream model. One call == one HTTP request, no retries.
    Implementations return LlmCompletion for non-2xx responses and transport
    failures instead of raising.
    """
    name: str = "llm"

    def complete(
        self,
        request: NormalizedRequest,
        *,
        system_instruction: str,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> LlmCompletion:
        raise NotImplementedError
