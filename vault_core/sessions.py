"""In-memory unlock sessions.

Maps a caller identity to the derived vault key and an expiry instant.
Sessions expire a fixed time after unlock; reading a session does not
extend it. Nothing here is ever persisted: a lost session only means the
caller has to unlock again.
"""

import time
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from vault_core.config import SESSION_TTL_SECONDS


class SessionRegistry:
    """Thread-safe identity -> (key, expiry) map with lazy eviction.

    Args:
        ttl_seconds: Session lifetime measured from put()
        clock: Returns the current time in seconds; monotonic by default
    """

    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Tuple[bytes, float]] = {}
        self._lock = Lock()

    def put(self, identity: str, key: bytes) -> None:
        """Store a key for identity, replacing any existing session."""
        with self._lock:
            self._sessions[identity] = (key, self._clock() + self.ttl_seconds)

    def get(self, identity: str) -> Optional[bytes]:
        """Return the session key, or None if absent or expired.

        Expired sessions are evicted on the way out.
        """
        with self._lock:
            session = self._sessions.get(identity)
            if session is None:
                return None

            key, expires_at = session
            if self._clock() > expires_at:
                del self._sessions[identity]
                return None
            return key

    def is_active(self, identity: str) -> bool:
        return self.get(identity) is not None

    def remove(self, identity: str) -> bool:
        """Drop a session.

        Returns:
            True if a session was removed, False if there was none
        """
        with self._lock:
            return self._sessions.pop(identity, None) is not None

    def sweep(self) -> int:
        """Evict every expired session.

        Returns:
            Number of sessions evicted
        """
        with self._lock:
            now = self._clock()
            expired = [
                identity for identity, (_, expires_at) in self._sessions.items()
                if now > expires_at
            ]
            for identity in expired:
                del self._sessions[identity]
            return len(expired)

    def clear(self) -> None:
        """Drop all sessions (process shutdown)."""
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, identity: str) -> bool:
        return self.is_active(identity)
