"""Exceptions raised by the factory, the proxies and the audit tooling."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from callscribe.recording.types import LIMITATION_LABELS, InterceptionLimitation


def type_name(type_: Any) -> str:
    """Return a dotted display name for a class or other type token."""

    module = getattr(type_, "__module__", None)
    qualname = getattr(type_, "__qualname__", None) or repr(type_)
    if module in (None, "builtins"):
        return qualname
    return f"{module}.{qualname}"


def argument_shapes(args: Sequence[Any], kwargs: dict[str, Any] | None = None) -> str:
    """Render argument types as ``(str, int, flag=bool)`` for error messages."""

    shapes = ["None" if arg is None else type(arg).__name__ for arg in args]
    for key, value in (kwargs or {}).items():
        shapes.append(f"{key}={'None' if value is None else type(value).__name__}")
    return f"({', '.join(shapes)})"


class CallscribeError(Exception):
    """Base class for all callscribe failures."""


class ConstructionError(CallscribeError, TypeError):
    def __init__(self, type_: Any, args: Sequence[Any], kwargs: dict[str, Any] | None = None, detail: str = "") -> None:
        self.type_ = type_
        self.arguments = tuple(args)
        self.keyword_arguments = dict(kwargs or {})
        message = f"No suitable constructor found for type {type_name(type_)} with arguments {argument_shapes(args, kwargs)}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InterceptionIneligibleError(CallscribeError, TypeError):
    def __init__(self, type_: Any, reason: InterceptionLimitation) -> None:
        self.type_ = type_
        self.reason = reason
        super().__init__(f"Cannot create proxy for {type_name(type_)}: {LIMITATION_LABELS[reason]}")


class ReplayUnsupportedError(CallscribeError, NotImplementedError):
    def __init__(self, type_: Any) -> None:
        self.type_ = type_
        super().__init__(
            f"Replay mode for concrete classes is not yet supported ({type_name(type_)}). "
            "Consider creating a Protocol-based abstraction or a manual stub."
        )


class UnboundTargetError(CallscribeError, LookupError):
    def __init__(self, type_: Any, member: str) -> None:
        self.type_ = type_
        self.member = member
        super().__init__(f"No target bound to proxy for {type_name(type_)}; cannot forward call to {member}()")


class ManifestError(CallscribeError, ValueError):
    """Raised when an audit manifest cannot be read or has an unexpected shape."""
