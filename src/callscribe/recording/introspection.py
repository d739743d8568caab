"""Reflection helpers: capability sets, overridable members and constructor matching."""

from __future__ import annotations

import abc
import dataclasses
import inspect
import types
import typing
from collections.abc import Mapping, Sequence
from typing import Any

from callscribe.recording.types import ConstructorCalledWith, ConstructorParameterInfo

# Bits of ``type.__flags__``; see Include/object.h.
_TPFLAGS_DISALLOW_INSTANTIATION = 1 << 7
_TPFLAGS_BASETYPE = 1 << 10

_ROOT_TYPES: frozenset[Any] = frozenset({object, abc.ABC, typing.Protocol, typing.Generic})

# Numeric widening accepted when matching constructor annotations.
_WIDENING: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}

_UNION_ORIGINS: tuple[Any, ...] = (typing.Union, types.UnionType)


def is_capability(type_: Any) -> bool:
    """Return True for behaviour-only types: Protocols and ABCs with only abstract members."""

    if not isinstance(type_, type) or type_ in _ROOT_TYPES:
        return False
    if type_.__dict__.get("_is_protocol", False):
        return True
    if not isinstance(type_, abc.ABCMeta):
        return False
    if "__init__" in type_.__dict__ or "__new__" in type_.__dict__:
        return False
    for base in type_.__mro__[1:]:
        if base not in _ROOT_TYPES and not is_capability(base):
            return False
    for name, attr in type_.__dict__.items():
        if name.startswith("_"):
            continue
        if not getattr(attr, "__isabstractmethod__", False):
            return False
    return True


def _is_member(attr: Any) -> bool:
    return isinstance(attr, (types.FunctionType, property, classmethod, staticmethod))


def capability_members(type_: type) -> tuple[str, ...]:
    """Public methods, class-level methods and properties of a capability set, inherited ones included."""

    names: dict[str, None] = {}
    for base in type_.__mro__:
        if not is_capability(base):
            continue
        for name, attr in base.__dict__.items():
            if not name.startswith("_") and _is_member(attr):
                names.setdefault(name, None)
    return tuple(names)


def declared_capabilities(cls: type) -> list[type]:
    """Capability sets found in the MRO of ``cls``, most derived first."""

    return [base for base in cls.__mro__[1:] if is_capability(base)]


def interceptable_capabilities(cls: type) -> list[type]:
    """Declared capability sets that expose at least one member of their own."""

    return [
        capability
        for capability in declared_capabilities(cls)
        if capability is not ConstructorCalledWith and capability_members(capability)
    ]


def resolve_capability_name(cls: type) -> str:
    """Name the capability a class most likely stands for.

    The capability set with the most members wins. Ties, or a class with no
    non-marker capability, fall back to the class name. This is a heuristic and
    can pick an unrelated capability when counts are close; pass an explicit
    capability to ``CallRecorder.wrap`` when it matters.
    """

    candidates = interceptable_capabilities(cls)
    if not candidates:
        return cls.__name__

    counts = [(capability, len(capability_members(capability))) for capability in candidates]
    top = max(count for _, count in counts)
    winners = [capability for capability, count in counts if count == top]
    if len(winners) != 1:
        return cls.__name__
    return winners[0].__name__


def is_extendable(type_: Any) -> bool:
    if not isinstance(type_, type):
        return False
    if getattr(type_, "__final__", False):
        return False
    return bool(type_.__flags__ & _TPFLAGS_BASETYPE)


def has_public_constructor(cls: type) -> bool:
    if cls.__flags__ & _TPFLAGS_DISALLOW_INSTANTIATION:
        return False
    return getattr(cls, "__init__", None) is not None and getattr(cls, "__new__", None) is not None


def _is_overridable(attr: Any) -> bool:
    if getattr(attr, "__final__", False):
        return False
    return isinstance(attr, (types.FunctionType, types.MethodDescriptorType))


def overridable_members(cls: type) -> dict[str, Any]:
    """Public instance methods a subclass can intercept, keyed by name."""

    names: dict[str, None] = {}
    for base in cls.__mro__:
        if base is object:
            continue
        for name in base.__dict__:
            if not name.startswith("_"):
                names.setdefault(name, None)

    members: dict[str, Any] = {}
    for name in names:
        attr = inspect.getattr_static(cls, name)
        if _is_overridable(attr):
            members[name] = attr
    return members


def allocate_uninitialized(cls: type) -> Any:
    """Create an instance of ``cls`` without running any user-defined ``__new__`` or ``__init__``.

    Returns None when no built-in allocator accepts the class.
    """

    for base in cls.__mro__:
        allocator = base.__dict__.get("__new__")
        if allocator is None or isinstance(allocator, staticmethod):
            continue
        try:
            return allocator(cls)
        except TypeError:
            return None
    return None


def call_signature(func: Any, *, drop_first: bool = False) -> inspect.Signature | None:
    """Return the signature of ``func`` or None when it cannot be introspected."""

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    if drop_first and signature.parameters:
        signature = signature.replace(parameters=list(signature.parameters.values())[1:])
    return signature


def bind_call_arguments(
    signature: inspect.Signature | None,
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
) -> list[tuple[str, Any]]:
    """Pair call arguments with declared parameter names, falling back to ``Arg<n>``."""

    if signature is not None:
        try:
            bound = signature.bind(*args, **kwargs)
        except TypeError:
            pass
        else:
            return list(bound.arguments.items())

    labelled = [(f"Arg{index}", value) for index, value in enumerate(args)]
    labelled.extend(kwargs.items())
    return labelled


@dataclasses.dataclass(frozen=True)
class ConstructorMatch:
    """A constructor signature that accepts a given set of arguments."""

    type_: type
    parameters: tuple[ConstructorParameterInfo, ...]


def _constructor_hints(cls: type) -> dict[str, Any]:
    init = getattr(cls, "__init__", None)
    try:
        return typing.get_type_hints(init)
    except (NameError, TypeError, AttributeError):
        # Unresolvable forward references stay as strings and accept anything.
        return dict(getattr(init, "__annotations__", {}) or {})


def accepts(expected: Any, value: Any) -> bool:
    """Return True when ``value`` may be passed for a parameter annotated ``expected``."""

    if value is None or expected is None or expected is Any or isinstance(expected, str):
        return True

    origin = typing.get_origin(expected)
    if origin in _UNION_ORIGINS:
        return any(accepts(option, value) for option in typing.get_args(expected))
    if origin is typing.Literal:
        return value in typing.get_args(expected)
    if origin is typing.Annotated:
        return accepts(typing.get_args(expected)[0], value)
    if origin is not None:
        expected = origin

    if not isinstance(expected, type):
        return True
    if isinstance(value, _WIDENING.get(expected, ())):
        return True
    try:
        return isinstance(value, expected)
    except TypeError:
        # Protocols that are not runtime checkable cannot be verified.
        return True


def match_constructor(
    cls: Any,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> ConstructorMatch | None:
    """Find the constructor of ``cls`` that accepts ``args``/``kwargs``.

    Used both to build fresh instances and to describe constructor arguments to
    doubles, so the two always agree on parameter names and declared types.
    """

    kwargs = dict(kwargs or {})
    if not isinstance(cls, type) or is_capability(cls):
        return None

    signature = call_signature(cls)
    if signature is None:
        return None
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return None

    hints = _constructor_hints(cls)
    parameters: list[ConstructorParameterInfo] = []
    for name, value in bound.arguments.items():
        kind = signature.parameters[name].kind
        declared = hints.get(name, object)
        if kind is inspect.Parameter.VAR_POSITIONAL:
            items = [(f"{name}[{index}]", item) for index, item in enumerate(value)]
        elif kind is inspect.Parameter.VAR_KEYWORD:
            items = list(value.items())
        else:
            items = [(name, value)]

        for label, item in items:
            if not accepts(declared, item):
                return None
            parameters.append(ConstructorParameterInfo(label, declared, item))

    return ConstructorMatch(type_=cls, parameters=tuple(parameters))


def describe_constructor_arguments(
    cls: Any,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> list[ConstructorParameterInfo]:
    """Describe arguments by the matching constructor, else by position and runtime type."""

    kwargs = dict(kwargs or {})
    match = match_constructor(cls, args, kwargs)
    if match is not None:
        return list(match.parameters)

    parameters = [
        ConstructorParameterInfo(f"arg{index}", object if value is None else type(value), value)
        for index, value in enumerate(args)
    ]
    parameters.extend(
        ConstructorParameterInfo(name, object if value is None else type(value), value) for name, value in kwargs.items()
    )
    return parameters
