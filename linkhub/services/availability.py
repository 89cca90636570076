from __future__ import annotations

import itertools
import logging
import threading

from linkhub.services.common import (
    USERNAME_MIN_LENGTH,
    is_valid_username,
    normalize_username,
)

logger = logging.getLogger(__name__)

VERDICT_INVALID = "invalid"
VERDICT_CHECKING = "checking"
VERDICT_AVAILABLE = "available"
VERDICT_TAKEN = "taken"
VERDICT_UNKNOWN = "unknown"


def needs_remote_check(username: str) -> bool:
    candidate = normalize_username(username)
    return len(candidate) >= USERNAME_MIN_LENGTH and is_valid_username(candidate)


def check_username_availability(store, username: str) -> str:
    candidate = normalize_username(username)
    if not needs_remote_check(candidate):
        return VERDICT_INVALID

    result = store.select(username=candidate, columns=["username"])
    if result.error:
        logger.warning("Error checking username @%s: %s", candidate, result.error)
        return VERDICT_UNKNOWN
    return VERDICT_TAKEN if result.data else VERDICT_AVAILABLE


class AvailabilityTracker:
    """Latest-request-wins bookkeeping for as-you-type availability checks.

    Every keystroke may start a check; responses can arrive in any order, so
    only the verdict for the most recently issued ticket is ever shown.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self.latest_ticket = 0
        self.username = ""
        self.verdict = VERDICT_INVALID

    def begin(self, username: str) -> int | None:
        candidate = normalize_username(username)
        with self._lock:
            ticket = next(self._counter)
            self.latest_ticket = ticket
            self.username = candidate
            if not needs_remote_check(candidate):
                self.verdict = VERDICT_INVALID
                return None
            self.verdict = VERDICT_CHECKING
            return ticket

    def resolve(self, ticket: int | None, verdict: str) -> bool:
        with self._lock:
            if ticket is None or ticket != self.latest_ticket:
                return False
            self.verdict = verdict
            return True

    def check(self, store, username: str) -> str:
        ticket = self.begin(username)
        if ticket is not None:
            self.resolve(ticket, check_username_availability(store, username))
        return self.verdict
