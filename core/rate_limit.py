# core/rate_limit.py
import logging
import math
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from fastapi import HTTPException, Request, status

from core.config import LOGIN_MAX_ATTEMPTS, LOGIN_WINDOW_SECONDS

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window request limiter keyed by client IP.

    Instances are FastAPI dependencies: ``Depends(login_limiter)``.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock=time.monotonic, name: str = "default"):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> float:
        """
        Record one request for ``key``.

        Returns 0 when allowed, otherwise the number of seconds until the
        oldest request in the window expires.
        """
        now = self._clock()
        with self._lock:
            self._purge(now)
            window = self._hits[key]
            while window and now - window[0] >= self.window_seconds:
                window.popleft()
            if len(window) >= self.max_requests:
                return self.window_seconds - (now - window[0])
            window.append(now)
            return 0.0

    def _purge(self, now: float) -> None:
        # caller holds the lock; a key whose newest hit left the window is idle
        idle = [
            key for key, window in self._hits.items()
            if not window or now - window[-1] >= self.window_seconds
        ]
        for key in idle:
            del self._hits[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def __call__(self, request: Request) -> None:
        client_ip = request.client.host if request.client else "unknown"
        retry_after = self.hit(client_ip)
        if retry_after:
            logger.warning("Rate limit %r exceeded for %s", self.name, client_ip)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many attempts from this IP, please try again later",
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )


login_limiter = RateLimiter(LOGIN_MAX_ATTEMPTS, LOGIN_WINDOW_SECONDS, name="login")
