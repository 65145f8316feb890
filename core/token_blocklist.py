# core/token_blocklist.py
import threading
import time
from typing import Dict, Optional


class TokenBlocklist:
    """
    Revoked access tokens, keyed by their ``jti`` claim.

    Each entry remembers the token's own ``exp``; once that passes the
    token is rejected by signature checks anyway, so the entry is purged.
    In-process only: revocations do not survive a restart.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._revoked: Dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, jti: str, expires_at: Optional[float]) -> None:
        with self._lock:
            self._purge()
            # tokens without exp never age out on their own; keep them until restart
            self._revoked[jti] = float(expires_at) if expires_at is not None else float("inf")

    def is_revoked(self, jti: Optional[str]) -> bool:
        if not jti:
            return False
        with self._lock:
            exp = self._revoked.get(jti)
            if exp is None:
                return False
            if exp <= self._clock():
                del self._revoked[jti]
                return False
            return True

    def clear(self) -> None:
        with self._lock:
            self._revoked.clear()

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._revoked)

    def _purge(self) -> None:
        now = self._clock()
        expired = [jti for jti, exp in self._revoked.items() if exp <= now]
        for jti in expired:
            del self._revoked[jti]


blocklist = TokenBlocklist()
