"""Service container — the name → instance lookup backing the input filter registry."""

import threading
from typing import Any, Optional, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class ServiceLocator(Protocol):
    """Anything that can answer ``has(name)`` and ``get(name)``."""

    def has(self, name: str) -> bool:
        ...

    def get(self, name: str) -> Any:
        ...


@runtime_checkable
class AbstractFactory(Protocol):
    """Creates services on demand for names it recognizes."""

    def can_create(self, name: str) -> bool:
        ...

    def create(self, name: str) -> Any:
        ...


class ServiceContainer:
    """In-memory service locator.

    Explicit services win over abstract factories. A service created by a
    factory is shared: later lookups return the same instance.
    """

    def __init__(self, services: Optional[dict[str, Any]] = None):
        self._services: dict[str, Any] = dict(services or {})
        self._abstract_factories: list[AbstractFactory] = []
        self._lock = threading.Lock()

    def set_service(self, name: str, service: Any) -> None:
        with self._lock:
            self._services[name] = service

    def add_abstract_factory(self, factory: AbstractFactory) -> None:
        self._abstract_factories.append(factory)

    def has(self, name: str) -> bool:
        if name in self._services:
            return True
        return any(f.can_create(name) for f in self._abstract_factories)

    def get(self, name: str) -> Any:
        """Return the named service, creating it through an abstract factory if needed.

        Raises:
            KeyError: no service and no factory for ``name``
        """
        if name in self._services:
            return self._services[name]

        for factory in self._abstract_factories:
            if factory.can_create(name):
                service = factory.create(name)
                logger.debug("service_created", service=name, factory=type(factory).__name__)
                with self._lock:
                    # First writer wins if two callers raced to create it
                    return self._services.setdefault(name, service)

        raise KeyError(f"Service '{name}' is not registered")

    def names(self) -> list[str]:
        return list(self._services)
