"""Search budget and cancellation shared by solver runs."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class SearchBudget:
    """Limits for a single search.

    Attributes:
        max_expansions: Maximum number of states expanded (None = no limit)
        time_limit: Maximum wall-clock seconds (None = no limit)
    """

    max_expansions: int | None = 200_000
    time_limit: float | None = 10.0

    @classmethod
    def unlimited(cls) -> SearchBudget:
        return cls(max_expansions=None, time_limit=None)


@dataclass
class SearchContext:
    """
    Per-run context holding the budget, a cancellation flag and an optional
    progress callback.

    ``cancel_flag`` may be set from another thread; the search checks it
    between expansions and stops with an ``UNKNOWN`` result.
    """

    budget: SearchBudget = field(default_factory=SearchBudget)
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    start_time: float = field(default_factory=time.perf_counter)
    progress_callback: Callable[[int, str], None] | None = None

    def cancel(self) -> None:
        self.cancel_flag.set()

    def is_cancelled(self, expanded: int = 0) -> bool:
        """True once the run should stop: cancelled, out of time or out of expansions."""
        if self.cancel_flag.is_set():
            return True
        budget = self.budget
        if budget.max_expansions is not None and expanded >= budget.max_expansions:
            return True
        if budget.time_limit is not None and self.elapsed_time() > budget.time_limit:
            return True
        return False

    def report_progress(self, expanded: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(expanded, message)

    def elapsed_time(self) -> float:
        return time.perf_counter() - self.start_time

    def remaining_time(self) -> float | None:
        """Seconds left before the time limit (may be negative), or None."""
        if self.budget.time_limit is None:
            return None
        return self.budget.time_limit - self.elapsed_time()
