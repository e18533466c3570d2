"""
QuotaGuard: process-wide send quota and single-use code registry.

The state lives in memory for the lifetime of the process and is reset on
restart. Callers must not rely on it surviving a deploy, and every worker
process has its own copy.

Every read-then-write runs under a single lock, so two concurrent requests
can neither both take the last free slot nor both present the same unused
code. The lock is a threading.Lock: critical sections never await, and the
guard stays correct whether it is called from the event loop or a thread.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    QUOTA_EXHAUSTED = "quota_exhausted"
    CODE_ALREADY_USED = "code_already_used"


@dataclass(frozen=True)
class QuotaSnapshot:
    sent: int
    maximum: int

    @property
    def remaining(self) -> int:
        return max(0, self.maximum - self.sent)


@dataclass(frozen=True)
class Admission:
    """Outcome of QuotaGuard.admit()."""

    allowed: bool
    sent: int
    maximum: int
    reason: DenialReason | None = None


class QuotaGuard:
    """
    Gate in front of every submission.

    A successful admit() reserves one slot. The caller must then either
    commit() (the provider confirmed the postcard) or release() (anything
    else, cancellation included). Reserved slots count against the limit,
    which keeps the hard cap under concurrency without counting postcards
    that were never sent.

    Single-use codes are recorded at admission and are never given back,
    even when the submission fails afterwards. A shared or guessed code can
    be tried exactly once.
    """

    def __init__(self, max_sends: int = 300):
        if max_sends < 0:
            raise ValueError("max_sends must be >= 0")

        self._max_sends = max_sends
        self._sent = 0
        self._in_flight = 0
        self._used_codes: set[str] = set()
        self._lock = threading.Lock()

    @property
    def max_sends(self) -> int:
        return self._max_sends

    def admit(self, code: str | None = None) -> Admission:
        """
        Check the limit and the code, and reserve a slot if both pass.

        The limit is checked first and independently of the code; a request
        turned away by the limit does not consume its code.
        """
        with self._lock:
            if self._sent + self._in_flight >= self._max_sends:
                return Admission(
                    allowed=False,
                    sent=self._sent,
                    maximum=self._max_sends,
                    reason=DenialReason.QUOTA_EXHAUSTED,
                )

            if code is not None:
                if code in self._used_codes:
                    return Admission(
                        allowed=False,
                        sent=self._sent,
                        maximum=self._max_sends,
                        reason=DenialReason.CODE_ALREADY_USED,
                    )
                self._used_codes.add(code)

            self._in_flight += 1
            return Admission(allowed=True, sent=self._sent, maximum=self._max_sends)

    def commit(self) -> QuotaSnapshot:
        """Turn one reservation into a sent postcard."""
        with self._lock:
            if self._in_flight == 0:
                raise RuntimeError("commit() without a matching admit()")
            self._in_flight -= 1
            self._sent += 1
            return QuotaSnapshot(sent=self._sent, maximum=self._max_sends)

    def release(self) -> None:
        """Give a reservation back without counting it."""
        with self._lock:
            if self._in_flight == 0:
                logger.warning("Quota release() without a pending reservation")
                return
            self._in_flight -= 1

    def snapshot(self) -> QuotaSnapshot:
        with self._lock:
            return QuotaSnapshot(sent=self._sent, maximum=self._max_sends)

    def is_code_used(self, code: str) -> bool:
        with self._lock:
            return code in self._used_codes
