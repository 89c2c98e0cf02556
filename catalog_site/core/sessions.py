import secrets
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class SessionRecord:
    user_id: int
    expires_at: float


class SessionStore:
    """Server-side sessions: opaque token -> user id with an absolute expiry."""

    def __init__(self, max_age_seconds: int, clock: Callable[[], float] = time.time):
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._records: Dict[str, SessionRecord] = {}
        self._lock = Lock()

    def create(self, user_id: int) -> str:
        token = secrets.token_urlsafe(32)
        record = SessionRecord(user_id=user_id, expires_at=self._clock() + self.max_age_seconds)
        with self._lock:
            self._records[token] = record
        return token

    def resolve(self, token: Optional[str]) -> Optional[int]:
        if not token:
            return None
        now = self._clock()
        with self._lock:
            record = self._records.get(token)
            if record is None:
                return None
            if now >= record.expires_at:
                del self._records[token]
                return None
            return record.user_id

    def destroy(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return self._records.pop(token, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [token for token, record in self._records.items() if now >= record.expires_at]
            for token in expired:
                del self._records[token]
        return len(expired)
