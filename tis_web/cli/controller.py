from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from tis_web.client.api_client import ApiClient
from tis_web.client.scan_session import ScanSession
from tis_web.domain.errors import AnalysisError
from tis_web.domain.models import AnalysisResult
from tis_web.repositories.history_repository import HistoryRepository

log = logging.getLogger(__name__)


@dataclass
class ScanController:
    """Runs one scan through the session gate and records successes in history."""
    api: ApiClient
    session: ScanSession
    history: HistoryRepository

    def scan(self, input_payload: Dict[str, Any]) -> AnalysisResult:
        ticket = self.session.begin()
        try:
            result = self.api.analyze(input_payload)
        except AnalysisError as e:
            self.session.fail(ticket, e)
            raise
        except Exception as e:
            self.session.fail(ticket, AnalysisError(str(e) or type(e).__name__))
            raise

        if self.session.complete(ticket, result):
            self.history.add(result)
        else:
            log.info("Discarding result for %r from an abandoned scan", result.company_name)
        return result

    def recent(self) -> List[AnalysisResult]:
        return self.history.list()


def render_result(result: AnalysisResult) -> str:
    lines = [
        f"{result.company_name}: {result.verdict.value} (risk {result.risk_score}/100)",
        "",
        result.summary,
        "",
    ]
    for i, p in enumerate(result.critical_points, 1):
        lines.append(f"{i}. [{p.severity.value}] {p.title}")
        lines.append(f"   {p.description}")
    lines += ["", "Expert opinion:", result.expert_opinion]
    return "\n".join(lines)
