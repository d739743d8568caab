"""Generate recording stand-ins for capability sets and concrete classes."""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from callscribe.recording.context import RecordingContext, SuppressionState
from callscribe.recording.errors import InterceptionIneligibleError, ReplayUnsupportedError, UnboundTargetError
from callscribe.recording.introspection import (
    allocate_uninitialized,
    bind_call_arguments,
    call_signature,
    capability_members,
    interceptable_capabilities,
    is_capability,
    match_constructor,
    overridable_members,
    resolve_capability_name,
)
from callscribe.recording.logging_utils import DEFAULT_LOGGER, LoggingManager
from callscribe.recording.recorder import CallRecorder, Transcript
from callscribe.recording.strategy import DEFAULT_SELECTOR, ProxyStrategySelector
from callscribe.recording.types import (
    CONSTRUCTOR_LABEL,
    ConstructorCalledWith,
    ConstructorParameterInfo,
    InterceptionLimitation,
    ProxyStrategy,
)


class CallInterceptor:
    """Forward calls to the real target and record each one.

    Every call arms a fresh :class:`SuppressionState`, invokes the target,
    records either the outcome or the exception and then restores the previous
    state. Suppression only hides entries; the target is always invoked.
    """

    def __init__(
        self,
        transcript: Transcript,
        emoji: str,
        *,
        target: Any,
        proxied_type: type,
        strategy: ProxyStrategy,
        capability_name: str | None = None,
        logger: LoggingManager = DEFAULT_LOGGER,
    ) -> None:
        self.transcript = transcript
        self.emoji = emoji or ""
        self.target = target
        self.proxied_type = proxied_type
        self.strategy = strategy
        self.capability_name = capability_name
        self.logger = logger
        self._signatures: dict[str, inspect.Signature | None] = {}

    def invoke(self, member: str, args: Sequence[Any], kwargs: Mapping[str, Any]) -> Any:
        with RecordingContext.arm(member, self.capability_name) as state:
            try:
                result = self._forward(member, args, kwargs)
            except Exception as exc:
                self._record_failure(member, exc)
                raise

            if state.ignore_call:
                self.logger.debug("Call to %s suppressed by the implementation", member)
            else:
                self._record_success(member, args, kwargs, result, state)
            return result

    def notify_constructor(self, parameters: Sequence[ConstructorParameterInfo] | None) -> None:
        """Record a constructor entry, letting the target adjust it first."""
        parameters = list(parameters or ())
        with RecordingContext.arm(CONSTRUCTOR_LABEL, self.capability_name) as state:
            if self.target is not None and isinstance(self.target, ConstructorCalledWith):
                self.target.constructor_called_with(parameters)

            if state.ignore_call:
                return

            recorder = self._new_recorder().for_capability(self._capability_name(state))
            names = state.constructor_parameter_names or ()
            for index, parameter in enumerate(parameters):
                if state.is_argument_hidden(index):
                    continue
                name = names[index] if index < len(names) else (parameter.name or f"Arg{index}")
                recorder.with_argument(parameter.value, name)
            for note in state.notes:
                recorder.with_note(note)
            recorder.log(CONSTRUCTOR_LABEL)

    def _forward(self, member: str, args: Sequence[Any], kwargs: Mapping[str, Any]) -> Any:
        if self.target is None:
            if self.strategy is ProxyStrategy.SUBCLASS:
                raise ReplayUnsupportedError(self.proxied_type)
            raise UnboundTargetError(self.proxied_type, member)
        return getattr(self.target, member)(*args, **kwargs)

    def _new_recorder(self) -> CallRecorder:
        return CallRecorder(self.transcript, self.emoji).with_target(self.target)

    def _capability_name(self, state: SuppressionState) -> str:
        if state.capability_name:
            return state.capability_name
        if self.target is not None:
            return resolve_capability_name(type(self.target))
        return resolve_capability_name(self.proxied_type)

    def _signature(self, member: str) -> inspect.Signature | None:
        if member not in self._signatures:
            if self.target is not None:
                signature = call_signature(getattr(self.target, member, None))
            else:
                template = inspect.getattr_static(self.proxied_type, member, None)
                if isinstance(template, staticmethod):
                    signature = call_signature(template.__func__)
                elif isinstance(template, classmethod):
                    signature = call_signature(template.__func__, drop_first=True)
                else:
                    signature = call_signature(template, drop_first=True)
            self._signatures[member] = signature
        return self._signatures[member]

    def _record_success(
        self,
        member: str,
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
        result: Any,
        state: SuppressionState,
    ) -> None:
        recorder = self._new_recorder()
        if not state.ignore_all_arguments:
            for index, (name, value) in enumerate(bind_call_arguments(self._signature(member), args, kwargs)):
                if index in state.ignored_arguments:
                    continue
                recorder.with_argument(value, name)
        for note in state.notes:
            recorder.with_note(note)
        if not state.ignore_return:
            recorder.with_return(result)
        recorder.log(member)

    def _record_failure(self, member: str, exc: Exception) -> None:
        self.logger.debug("Call to %s raised %s", member, type(exc).__name__)
        self._new_recorder().with_exception(exc).log(member)


def _intercepting_method(interceptor: CallInterceptor, member: str, template: Any, owner: str) -> Callable[..., Any]:
    def method(self: Any, *args: Any, **kwargs: Any) -> Any:
        return interceptor.invoke(member, args, kwargs)

    method.__name__ = member
    method.__qualname__ = f"{owner}.{member}"
    method.__doc__ = getattr(template, "__doc__", None)
    return method


def _intercepting_class_member(
    interceptor: CallInterceptor, member: str, template: classmethod | staticmethod, owner: str
) -> classmethod | staticmethod:
    if isinstance(template, staticmethod):

        def function(*args: Any, **kwargs: Any) -> Any:
            return interceptor.invoke(member, args, kwargs)

    else:

        def function(cls: type, *args: Any, **kwargs: Any) -> Any:
            return interceptor.invoke(member, args, kwargs)

    function.__name__ = member
    function.__qualname__ = f"{owner}.{member}"
    function.__doc__ = getattr(template.__func__, "__doc__", None)
    return type(template)(function)


def _forwarding_property(interceptor: CallInterceptor, member: str) -> property:
    def getter(self: Any) -> Any:
        if interceptor.target is None:
            raise UnboundTargetError(interceptor.proxied_type, member)
        return getattr(interceptor.target, member)

    return property(getter)


def _constructor_hook(interceptor: CallInterceptor) -> Callable[..., None]:
    def constructor_called_with(self: Any, parameters: list[ConstructorParameterInfo]) -> None:
        interceptor.notify_constructor(parameters)

    return constructor_called_with


def _most_derived(capabilities: Sequence[type]) -> tuple[type, ...]:
    # MRO membership instead of issubclass(): plain Protocols reject class checks.
    return tuple(
        capability
        for capability in capabilities
        if not any(other is not capability and capability in other.__mro__ for other in capabilities)
    )


def build_capability_proxy(capabilities: Sequence[type], interceptor: CallInterceptor, class_name: str) -> Any:
    """Instantiate a generated class implementing every member of ``capabilities``."""

    bases = _most_derived(capabilities)
    namespace: dict[str, Any] = {}
    for capability in bases:
        for member in capability_members(capability):
            if member in namespace or member == CONSTRUCTOR_LABEL:
                continue
            template = inspect.getattr_static(capability, member)
            if isinstance(template, property):
                namespace[member] = _forwarding_property(interceptor, member)
            elif isinstance(template, (classmethod, staticmethod)):
                namespace[member] = _intercepting_class_member(interceptor, member, template, class_name)
            else:
                namespace[member] = _intercepting_method(interceptor, member, template, class_name)

    namespace[CONSTRUCTOR_LABEL] = _constructor_hook(interceptor)
    namespace["__repr__"] = lambda self: f"<{class_name} recording {interceptor.target!r}>"

    proxy_cls = types.new_class(class_name, bases, exec_body=lambda ns: ns.update(namespace))
    return proxy_cls()


def build_subclass_proxy(cls: type, interceptor: CallInterceptor) -> Any:
    """Instantiate a generated subclass of ``cls`` without running its constructor."""

    class_name = f"{cls.__name__}RecordingProxy"
    namespace: dict[str, Any] = {"__module__": cls.__module__}
    for member, template in overridable_members(cls).items():
        if member != CONSTRUCTOR_LABEL:
            namespace[member] = _intercepting_method(interceptor, member, template, class_name)
    namespace[CONSTRUCTOR_LABEL] = _constructor_hook(interceptor)

    def __getattr__(self: Any, name: str) -> Any:
        # The instance was never initialized; its state lives on the target.
        if interceptor.target is None:
            raise AttributeError(name)
        return getattr(interceptor.target, name)

    namespace["__getattr__"] = __getattr__

    try:
        proxy_cls = types.new_class(class_name, (cls,), exec_body=lambda ns: ns.update(namespace))
    except TypeError as exc:
        raise InterceptionIneligibleError(cls, InterceptionLimitation.NOT_EXTENDABLE) from exc

    instance = allocate_uninitialized(proxy_cls)
    if instance is not None:
        return instance

    if match_constructor(proxy_cls) is None:
        raise InterceptionIneligibleError(cls, InterceptionLimitation.NO_CONSTRUCTOR)
    interceptor.logger.debug("Falling back to the no-argument constructor of %s", cls.__name__)
    return proxy_cls()


def _capabilities_for(requested: Any, target: Any) -> list[type]:
    if is_capability(requested):
        return [requested]
    return interceptable_capabilities(type(target))


def create_recording_proxy(
    requested: Any,
    target: Any,
    transcript: Transcript,
    emoji: str,
    *,
    capability_name: str | None = None,
    selector: ProxyStrategySelector = DEFAULT_SELECTOR,
    logger: LoggingManager = DEFAULT_LOGGER,
) -> Any:
    """Wrap ``target`` so every call is forwarded and recorded into ``transcript``."""

    strategy = selector.select(requested, target)
    if strategy is ProxyStrategy.NOT_SUPPORTED:
        raise InterceptionIneligibleError(requested, selector.explain(requested))

    if strategy is ProxyStrategy.CAPABILITY:
        capabilities = _capabilities_for(requested, target)
        if capability_name is None and is_capability(requested):
            capability_name = requested.__name__
        interceptor = CallInterceptor(
            transcript,
            emoji,
            target=target,
            proxied_type=requested,
            strategy=strategy,
            capability_name=capability_name,
            logger=logger,
        )
        class_name = f"{capability_name or resolve_capability_name(type(target))}RecordingProxy"
        return build_capability_proxy(capabilities, interceptor, class_name)

    interceptor = CallInterceptor(
        transcript,
        emoji,
        target=target,
        proxied_type=requested,
        strategy=strategy,
        capability_name=capability_name,
        logger=logger,
    )
    return build_subclass_proxy(requested, interceptor)


def create_replay_proxy(
    requested: Any,
    transcript: Transcript,
    emoji: str,
    *,
    selector: ProxyStrategySelector = DEFAULT_SELECTOR,
    logger: LoggingManager = DEFAULT_LOGGER,
) -> Any:
    """Build a stand-in with no live target; only capability sets are supported."""

    strategy = selector.select(requested)
    if strategy is ProxyStrategy.SUBCLASS:
        raise ReplayUnsupportedError(requested)
    if strategy is ProxyStrategy.NOT_SUPPORTED:
        raise InterceptionIneligibleError(requested, selector.explain(requested))

    interceptor = CallInterceptor(
        transcript,
        emoji,
        target=None,
        proxied_type=requested,
        strategy=strategy,
        capability_name=requested.__name__,
        logger=logger,
    )
    return build_capability_proxy([requested], interceptor, f"{requested.__name__}RecordingProxy")
