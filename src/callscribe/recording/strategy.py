"""Choose between capability-based and subclass-based interception."""

from __future__ import annotations

from typing import Any

from callscribe.recording.introspection import (
    has_public_constructor,
    interceptable_capabilities,
    is_capability,
    is_extendable,
    overridable_members,
)
from callscribe.recording.logging_utils import DEFAULT_LOGGER, LoggingManager
from callscribe.recording.types import (
    LIMITATION_LABELS,
    InterceptionLimitation,
    ProxyStrategy,
)


class ProxyStrategySelector:
    """Decide how a requested type can be intercepted and explain why it cannot."""

    def __init__(self, *, logger: LoggingManager = DEFAULT_LOGGER) -> None:
        self.logger = logger

    def select(self, requested: Any, target: Any = None) -> ProxyStrategy:
        """Return the strategy used to wrap ``target`` as ``requested``.

        Capability sets always get a capability proxy. A concrete type still gets
        one when the bound target declares a capability set, so existing
        Protocol-based transcripts keep their shape. Everything else needs a
        generated subclass, which only works for eligible types.
        """
        if is_capability(requested):
            strategy = ProxyStrategy.CAPABILITY
        elif target is not None and interceptable_capabilities(type(target)):
            strategy = ProxyStrategy.CAPABILITY
        elif self.can_intercept(requested):
            strategy = ProxyStrategy.SUBCLASS
        else:
            strategy = ProxyStrategy.NOT_SUPPORTED

        self.logger.debug("Proxy strategy for %s: %s", getattr(requested, "__name__", requested), strategy.value)
        return strategy

    def can_intercept(self, type_: Any) -> bool:
        return self.explain(type_) is InterceptionLimitation.ELIGIBLE

    def explain(self, type_: Any) -> InterceptionLimitation:
        if is_capability(type_):
            return InterceptionLimitation.ELIGIBLE
        if not is_extendable(type_):
            return InterceptionLimitation.NOT_EXTENDABLE
        if not has_public_constructor(type_):
            return InterceptionLimitation.NO_CONSTRUCTOR
        if not overridable_members(type_):
            return InterceptionLimitation.NO_OVERRIDABLE_MEMBER
        return InterceptionLimitation.ELIGIBLE

    def describe(self, type_: Any) -> str:
        """Human-readable explanation for ``type_``."""
        return LIMITATION_LABELS[self.explain(type_)]


DEFAULT_SELECTOR = ProxyStrategySelector()
