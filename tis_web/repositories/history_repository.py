from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tis_web.domain.models import AnalysisResult
from tis_web.services.response_validation import validate

log = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 6


@dataclass
class HistoryRepository:
    """
    Repository pattern: the most recent distinct scan results, keyed by company name.
    Newest first, at most max_entries, persisted as JSON when a path is given.
    """
    path: Optional[Path] = None
    max_entries: int = DEFAULT_MAX_ENTRIES
    _entries: "OrderedDict[str, AnalysisResult]" = field(default_factory=OrderedDict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._load()

    def _load(self) -> None:
        if not self.path or not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable history file %s: %s", self.path, e)
            return
        if not isinstance(raw, list):
            log.warning("Ignoring history file %s: expected a list", self.path)
            return

        # stored newest first; entries that no longer validate are dropped
        for item in raw[: self.max_entries]:
            outcome = validate(json.dumps(item))
            if outcome.result is None:
                continue
            key = outcome.result.company_name
            if key not in self._entries:
                self._entries[key] = outcome.result

    def _save(self, entries: "OrderedDict[str, AnalysisResult]") -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([r.to_dict() for r in entries.values()], indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def add(self, result: AnalysisResult) -> List[AnalysisResult]:
        with self._lock:
            entries: "OrderedDict[str, AnalysisResult]" = OrderedDict([(result.company_name, result)])
            for key, value in self._entries.items():
                if len(entries) >= self.max_entries:
                    break
                if key != result.company_name:
                    entries[key] = value
            # memory only changes once the file write went through
            self._save(entries)
            self._entries = entries
            return list(entries.values())

    def list(self) -> List[AnalysisResult]:
        with self._lock:
            return list(self._entries.values())

    def get(self, company_name: str) -> Optional[AnalysisResult]:
        with self._lock:
            return self._entries.get(company_name)

    def clear(self) -> None:
        with self._lock:
            if self.path and self.path.exists():
                self.path.unlink()
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
