"""Input filter registry — resolves input filters by name and caches them for the process lifetime."""

import threading
from typing import Optional

import structlog

from content_validation.exceptions import InputFilterNotFoundError
from content_validation.input_filter.base import InputFilterInterface
from content_validation.services.container import ServiceLocator

logger = structlog.get_logger()


class InputFilterRegistry:
    """Name → input filter cache backed by a service locator.

    Once ``has(name)`` succeeds the instance is cached permanently: the set
    of named input filters is static for the process, so there is no
    invalidation.
    """

    def __init__(self, services: Optional[ServiceLocator] = None):
        self.services = services
        self._input_filters: dict[str, InputFilterInterface] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def has(self, name: str) -> bool:
        """True if ``name`` resolves to an InputFilterInterface.

        A lookup result that is not an input filter counts as absent.
        """
        if name in self._input_filters:
            return True

        if self.services is None or not self.services.has(name):
            return False

        input_filter = self.services.get(name)
        if not isinstance(input_filter, InputFilterInterface):
            logger.warning(
                "input_filter_invalid_service",
                input_filter=name,
                service_type=type(input_filter).__name__,
            )
            return False

        with self._lock:
            # First writer wins; every caller sees the same fully built instance
            self._input_filters.setdefault(name, input_filter)
        return True

    def get(self, name: str) -> InputFilterInterface:
        """Return the cached input filter. Call has() first.

        Raises:
            InputFilterNotFoundError: ``name`` was never resolved
        """
        try:
            return self._input_filters[name]
        except KeyError:
            raise InputFilterNotFoundError(name) from None

    def lock(self, name: str) -> threading.Lock:
        """Lock serializing use of the shared ``name`` instance.

        Input filters keep the data and results of the last validation on the
        instance, so a request must hold this lock from narrowing the
        validation group until it has copied the messages or values out.
        """
        with self._lock:
            return self._locks.setdefault(name, threading.Lock())

    def cached_names(self) -> list[str]:
        return sorted(self._input_filters)
