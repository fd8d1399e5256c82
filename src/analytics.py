"""Analytics provider port.

Providers are handed explicitly to the content manager and the
syndication service; there is no global registry.  A provider that
raises is logged and skipped so tracking never breaks an operation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

logger = logging.getLogger(__name__)


class AnalyticsProvider(ABC):
    """Capability interface for an analytics backend."""

    name: str = "analytics"

    @abstractmethod
    def track(self, event: str, properties: dict[str, object] | None = None) -> None:
        """Record a named event."""

    @abstractmethod
    def identify(self, user_id: str, traits: dict[str, object] | None = None) -> None:
        """Associate traits with a user."""


class LoggingAnalyticsProvider(AnalyticsProvider):
    """Writes events to the standard logger."""

    name = "logging"

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def track(self, event: str, properties: dict[str, object] | None = None) -> None:
        logger.log(self._level, "event=%s properties=%s", event, properties or {})

    def identify(self, user_id: str, traits: dict[str, object] | None = None) -> None:
        logger.log(self._level, "identify user=%s traits=%s", user_id, traits or {})


def track_event(
    providers: Sequence[AnalyticsProvider],
    event: str,
    properties: dict[str, object] | None = None,
) -> None:
    """Send ``event`` to every provider, isolating provider failures."""
    for provider in providers:
        try:
            provider.track(event, properties)
        except Exception:
            logger.warning("Analytics provider %s failed on %s", provider.name, event, exc_info=True)

