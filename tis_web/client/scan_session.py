from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tis_web.domain.errors import AnalysisError, QuotaError
from tis_web.domain.models import AnalysisResult

DEFAULT_COOLDOWN_SECONDS = 60


class ScanBusyError(RuntimeError):
    """A scan is already in flight for this session."""


class CooldownActiveError(RuntimeError):
    def __init__(self, remaining_seconds: float):
        super().__init__(f"Please wait {int(remaining_seconds + 0.999)}s before the next scan.")
        self.remaining_seconds = remaining_seconds


@dataclass(frozen=True)
class ScanTicket:
    generation: int


class ScanSession:
    """
    Caller-side gate around the analysis endpoint.

    - at most one scan in flight
    - after a quota failure, no new scan until the cooldown has elapsed
    - reset() abandons the in-flight scan; its late result is discarded
      because the ticket's generation no longer matches
    """

    def __init__(self, cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._in_flight: Optional[ScanTicket] = None
        self._cooldown_until = 0.0
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[AnalysisError] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    def cooldown_remaining(self) -> float:
        return max(0.0, self._cooldown_until - self._clock())

    @property
    def can_scan(self) -> bool:
        return not self.in_flight and self.cooldown_remaining() == 0.0

    def begin(self) -> ScanTicket:
        with self._lock:
            if self._in_flight is not None:
                raise ScanBusyError("A scan is already running.")
            remaining = self.cooldown_remaining()
            if remaining > 0:
                raise CooldownActiveError(remaining)
            self._generation += 1
            self._in_flight = ScanTicket(self._generation)
            self.result = None
            self.error = None
            return self._in_flight

    def _is_current(self, ticket: ScanTicket) -> bool:
        return self._in_flight is not None and ticket.generation == self._generation

    def complete(self, ticket: ScanTicket, result: AnalysisResult) -> bool:
        with self._lock:
            if not self._is_current(ticket):
                return False
            self._in_flight = None
            self.result = result
            return True

    def fail(self, ticket: ScanTicket, error: AnalysisError) -> bool:
        with self._lock:
            if not self._is_current(ticket):
                return False
            self._in_flight = None
            self.error = error
            if isinstance(error, QuotaError) or QuotaError.sentinel in str(error):
                self._cooldown_until = self._clock() + self.cooldown_seconds
            return True

    def reset(self) -> None:
        with self._lock:
            self._generation += 1
            self._in_flight = None
            self._cooldown_until = 0.0
            self.result = None
            self.error = None
