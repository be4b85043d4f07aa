"""Runtime feature flag for AI matching."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class MatchingFlag:
    """Boolean switch read before every matching pass.

    Seeded from configuration and flipped at runtime through the settings
    endpoint, so matching can be turned off without a redeploy.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._lock = threading.Lock()

    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def set(self, enabled: bool) -> None:
        with self._lock:
            if enabled != self._enabled:
                logger.info("AI matching %s", "enabled" if enabled else "disabled")
            self._enabled = enabled
