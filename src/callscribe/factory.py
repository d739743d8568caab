"""Replace direct construction with a registry that tests can pre-load.

Production code asks the factory for instances instead of calling constructors::

    gateway = factory.create_as(PaymentGateway, StripeGateway, api_key, retries=3)

Tests queue substitutes before exercising that code::

    factory.set_one(PaymentGateway, fake_gateway)

Lookup order is queued substitutes (first in, first out), then the "always"
substitute, then a freshly constructed instance. Whichever path produced the
object, doubles implementing :class:`ConstructorCalledWith` are told which
arguments they were "constructed" with.
"""

from __future__ import annotations

import collections
import inspect
import threading
from typing import Any, ClassVar

from callscribe.recording.errors import ConstructionError, type_name
from callscribe.recording.introspection import (
    call_signature,
    describe_constructor_arguments,
    is_capability,
    match_constructor,
)
from callscribe.recording.logging_utils import DEFAULT_LOGGER, LoggingManager
from callscribe.recording.types import ConstructorCalledWith


class TestDoubleFactory:
    """Per-type registry of substitutes with constructor fallback."""

    # Keep pytest from collecting this class when tests import it.
    __test__ = False

    _instance: ClassVar[TestDoubleFactory | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, *, logger: LoggingManager = DEFAULT_LOGGER) -> None:
        self.logger = logger
        self._queued: dict[Any, collections.deque[Any]] = {}
        self._always: dict[Any, Any] = {}

    @classmethod
    def instance(cls) -> TestDoubleFactory:
        """Return the process-wide factory, creating it on first use."""
        if TestDoubleFactory._instance is None:
            with TestDoubleFactory._instance_lock:
                if TestDoubleFactory._instance is None:
                    TestDoubleFactory._instance = TestDoubleFactory()
        return TestDoubleFactory._instance

    def create(self, requested: Any, *args: Any, **kwargs: Any) -> Any:
        """Return a substitute for ``requested`` or construct ``requested(*args, **kwargs)``."""
        return self.create_as(requested, requested, *args, **kwargs)

    def create_as(self, requested: Any, implementation: Any, *args: Any, **kwargs: Any) -> Any:
        """Return a substitute registered for ``requested`` or construct ``implementation``."""
        obj = self._fetch(requested, implementation, args, kwargs)
        if isinstance(obj, ConstructorCalledWith):
            parameters = describe_constructor_arguments(implementation, args, kwargs)
            obj.constructor_called_with(parameters)
        return obj

    def set_one(self, requested: Any, substitute: Any) -> None:
        """Queue ``substitute`` to be returned by exactly one future ``create`` call."""
        self._queued.setdefault(requested, collections.deque()).append(substitute)

    def set_always(self, requested: Any, substitute: Any) -> None:
        self._always[requested] = substitute

    def clear(self, requested: Any) -> None:
        """Drop both the queue and the always substitute registered for ``requested``."""
        self._queued.pop(requested, None)
        self._always.pop(requested, None)

    def clear_all(self) -> None:
        self._queued.clear()
        self._always.clear()

    def _fetch(self, requested: Any, implementation: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        queue = self._queued.get(requested)
        if queue:
            self.logger.debug("Returning queued substitute for %s", type_name(requested))
            return queue.popleft()

        if requested in self._always:
            self.logger.debug("Returning always substitute for %s", type_name(requested))
            return self._always[requested]

        return self._construct(implementation, args, kwargs)

    def _construct(self, implementation: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        if is_capability(implementation):
            raise ConstructionError(
                implementation,
                args,
                kwargs,
                "capability sets cannot be constructed; register a substitute or pass an implementation",
            )
        if inspect.isabstract(implementation):
            raise ConstructionError(implementation, args, kwargs, "abstract classes cannot be constructed")

        if call_signature(implementation) is None:
            # Built-ins such as dict or int expose no signature; let the call itself decide.
            self.logger.debug("Constructing %s without an introspectable signature", type_name(implementation))
            try:
                return implementation(*args, **kwargs)
            except TypeError as exc:
                raise ConstructionError(implementation, args, kwargs) from exc

        if match_constructor(implementation, args, kwargs) is None:
            raise ConstructionError(implementation, args, kwargs)

        self.logger.debug("Constructing %s", type_name(implementation))
        return implementation(*args, **kwargs)


# Module-level helpers backed by the process-wide factory.
def create(requested: Any, *args: Any, **kwargs: Any) -> Any:
    return TestDoubleFactory.instance().create(requested, *args, **kwargs)


def create_as(requested: Any, implementation: Any, *args: Any, **kwargs: Any) -> Any:
    return TestDoubleFactory.instance().create_as(requested, implementation, *args, **kwargs)


def set_one(requested: Any, substitute: Any) -> None:
    TestDoubleFactory.instance().set_one(requested, substitute)


def set_always(requested: Any, substitute: Any) -> None:
    TestDoubleFactory.instance().set_always(requested, substitute)


def clear(requested: Any) -> None:
    TestDoubleFactory.instance().clear(requested)


def clear_all() -> None:
    TestDoubleFactory.instance().clear_all()
