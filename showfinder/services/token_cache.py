"""
In-memory cache for a single bearer token.

The provider-declared lifetime is shortened by a safety margin so a token
is never served within a minute of its real expiry.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

# Seconds shaved off the provider-declared lifetime
EXPIRY_MARGIN_SECONDS = 60


def epoch_ms() -> float:
    """Current time in epoch milliseconds."""
    return time.time() * 1000


@dataclass
class TokenCache:
    """Holds one token and the epoch-ms instant it stops being served."""

    token: str = ""
    expires_at: float = 0.0
    clock: Callable[[], float] = epoch_ms

    def is_valid(self, now: float | None = None) -> bool:
        """True while a token is cached and `now < expires_at`."""
        if now is None:
            now = self.clock()
        return bool(self.token) and now < self.expires_at

    def get(self, now: float | None = None) -> str | None:
        """Return the cached token if still valid."""
        if self.is_valid(now):
            return self.token
        return None

    def set(self, token: str, expires_in: int, now: float | None = None) -> str:
        """Store a fresh token with a lifetime of `expires_in` seconds."""
        if now is None:
            now = self.clock()
        self.token = token
        self.expires_at = now + max(expires_in - EXPIRY_MARGIN_SECONDS, 0) * 1000
        return token
