"""Shared dataclasses, enums and protocols for the call recorder."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Protocol, runtime_checkable

CONSTRUCTOR_LABEL = "constructor_called_with"
DEFAULT_WRAP_EMOJI = "🔧"
UNKNOWN_CAPABILITY = "Unknown"

NOTE_GLYPH = "🗒️"
RETURN_GLYPH = "🔹"


class FieldRole(enum.Enum):
    ARGUMENT = "argument"
    OUT = "out"
    RETURN = "return"


FIELD_GLYPHS: dict[FieldRole, str] = {
    FieldRole.ARGUMENT: "🔸",
    FieldRole.OUT: "♦️",
    FieldRole.RETURN: RETURN_GLYPH,
}


class EntryKind(enum.Enum):
    METHOD = "method"
    CONSTRUCTOR = "constructor"


@dataclasses.dataclass(frozen=True)
class Field:
    name: str
    formatted_value: str
    role: FieldRole

    def render(self) -> str:
        if self.role is FieldRole.RETURN:
            return f"  {RETURN_GLYPH} Returns: {self.formatted_value}"
        return f"  {FIELD_GLYPHS[self.role]} {self.name}: {self.formatted_value}"


@dataclasses.dataclass(frozen=True)
class Entry:
    """One rendered call record; immutable once emitted."""

    kind: EntryKind
    emoji: str
    label: str
    fields: tuple[Field, ...] = ()
    notes: tuple[str, ...] = ()
    exception: bool = False

    def render(self) -> str:
        """Return the transcript text for this entry, blank line included."""
        if self.kind is EntryKind.CONSTRUCTOR:
            lines = [f"{self.emoji} {self.label} constructor called with:"]
        else:
            lines = [f"{self.emoji} {self.label}:"]

        lines.extend(field.render() for field in self.fields if field.role is not FieldRole.RETURN)
        lines.extend(f"  {NOTE_GLYPH} {note}" for note in self.notes if note)
        lines.extend(field.render() for field in self.fields if field.role is FieldRole.RETURN)
        return "\n".join(lines) + "\n\n"


@dataclasses.dataclass(frozen=True)
class ConstructorParameterInfo:
    """Name, declared type and supplied value of one constructor parameter."""

    name: str
    type: Any
    value: Any

    def __str__(self) -> str:
        type_name = getattr(self.type, "__name__", str(self.type))
        return f"{self.name}: {type_name} = {self.value}"


@runtime_checkable
class ConstructorCalledWith(Protocol):
    """Implemented by doubles that want to see the arguments they were built with."""

    def constructor_called_with(self, parameters: list[ConstructorParameterInfo]) -> None: ...


class ProxyStrategy(enum.Enum):
    CAPABILITY = "capability"
    SUBCLASS = "subclass"
    NOT_SUPPORTED = "not_supported"


PROXY_STRATEGY_LABELS: dict[ProxyStrategy, str] = {
    ProxyStrategy.CAPABILITY: "Capability proxy",
    ProxyStrategy.SUBCLASS: "Subclass proxy",
    ProxyStrategy.NOT_SUPPORTED: "Cannot be proxied",
}


class InterceptionLimitation(enum.Enum):
    NOT_EXTENDABLE = "not_extendable"
    NO_CONSTRUCTOR = "no_constructor"
    NO_OVERRIDABLE_MEMBER = "no_overridable_member"
    ELIGIBLE = "eligible"


LIMITATION_LABELS: dict[InterceptionLimitation, str] = {
    InterceptionLimitation.NOT_EXTENDABLE: (
        "Type cannot be subclassed (final or built-in). Consider wrapping it behind a Protocol."
    ),
    InterceptionLimitation.NO_CONSTRUCTOR: "Type exposes no public constructor to host a proxy instance.",
    InterceptionLimitation.NO_OVERRIDABLE_MEMBER: (
        "Type has no interceptable methods (all are private, static, final or inherited from object)."
    ),
    InterceptionLimitation.ELIGIBLE: "Type can be proxied.",
}
