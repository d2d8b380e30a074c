from tictacgo.engine.gamedeadlock.detector import (
    DeadlockDetector,
    DeadlockReason,
    DeadlockReport,
    Verdict,
)

__all__ = ["DeadlockDetector", "DeadlockReason", "DeadlockReport", "Verdict"]
