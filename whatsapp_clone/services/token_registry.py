"""
Token Registry — FCM tokens registered with the mock dispatch backend.

Kept in memory only; a real deployment would store tokens in a database.
Registration order is preserved so multicast sends are deterministic.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class TokenRegistry:
    """Ordered set of registered device tokens."""

    def __init__(self):
        self._tokens: dict[str, None] = {}
        self._lock = threading.Lock()

    def add(self, token: str) -> bool:
        """Register a token. Returns False if it was already registered."""
        with self._lock:
            if token in self._tokens:
                return False
            self._tokens[token] = None
        logger.info("FCM token registered: %s...", token[:20])
        return True

    def tokens(self) -> list[str]:
        with self._lock:
            return list(self._tokens)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._tokens)
            self._tokens.clear()
        logger.info("Cleared %d registered tokens", removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


_registry = TokenRegistry()


def get_token_registry() -> TokenRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return _registry
