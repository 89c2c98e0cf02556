import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional


@dataclass
class LoginAttempts:
    count: int = 0
    last_failure: float = 0.0
    lock_until: Optional[float] = None

    def is_stale(self, now: float, window: float) -> bool:
        if self.lock_until is not None:
            return not is_locked(self.lock_until, now)
        return now - self.last_failure >= window


def is_locked(lock_until: Optional[float], now: float) -> bool:
    """A lock expires on its own once ``now`` reaches ``lock_until``."""
    return lock_until is not None and now < lock_until


class LoginLockout:
    """In-memory failed-login tracker keyed by username.

    After ``max_attempts`` consecutive failures the username is locked for
    ``lock_seconds``. Expiry is evaluated lazily on the next attempt. A username
    whose last failure is ``lock_seconds`` old without reaching a lock is
    forgotten.
    """

    def __init__(self, max_attempts: int, lock_seconds: int, clock: Callable[[], float] = time.time):
        self.max_attempts = max_attempts
        self.lock_seconds = lock_seconds
        self._clock = clock
        self._attempts: Dict[str, LoginAttempts] = {}
        self._lock = Lock()

    def retry_after(self, username: str) -> float:
        """Return seconds left on an active lock, or 0.0 when attempts are allowed."""
        now = self._clock()
        with self._lock:
            state = self._attempts.get(username)
            if state is None or state.lock_until is None:
                return 0.0
            if is_locked(state.lock_until, now):
                return state.lock_until - now
            # expired lock starts over from zero
            del self._attempts[username]
            return 0.0

    def register_failure(self, username: str) -> bool:
        """Record a failed attempt and return True when it triggered a lock."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            state = self._attempts.setdefault(username, LoginAttempts())
            state.count += 1
            state.last_failure = now
            if state.count >= self.max_attempts:
                state.lock_until = now + self.lock_seconds
                return True
            return False

    def reset(self, username: str) -> None:
        with self._lock:
            self._attempts.pop(username, None)

    def failure_count(self, username: str) -> int:
        with self._lock:
            state = self._attempts.get(username)
            return state.count if state else 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)

    def _prune(self, now: float) -> None:
        stale = [name for name, state in self._attempts.items() if state.is_stale(now, self.lock_seconds)]
        for name in stale:
            del self._attempts[name]
