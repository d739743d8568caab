"""Per-call formatting directives issued from inside a wrapped implementation.

Legacy code wrapped by a recording proxy cannot take extra parameters, so the
proxy arms an ambient :class:`SuppressionState` for the duration of each
intercepted call. The implementation reaches it through the static methods of
:class:`RecordingContext`::

    class PaymentGateway:
        def charge(self, card_number, amount):
            RecordingContext.suppress_argument(0)
            RecordingContext.annotate("card number hidden")
            ...

The state lives in a :class:`contextvars.ContextVar`, so concurrent calls on
different threads never see each other's directives, and a nested intercepted
call gets its own state and restores the outer one when it finishes.
"""

from __future__ import annotations

import contextvars
import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager

from callscribe.recording.logging_utils import DEFAULT_LOGGER

_current_state: contextvars.ContextVar[SuppressionState | None] = contextvars.ContextVar(
    "callscribe_suppression_state", default=None
)


@dataclasses.dataclass
class SuppressionState:
    """Directives collected while one intercepted call is in flight."""

    label: str
    capability_name: str | None = None
    ignore_call: bool = False
    ignored_arguments: set[int] = dataclasses.field(default_factory=set)
    ignore_all_arguments: bool = False
    ignore_return: bool = False
    notes: list[str] = dataclasses.field(default_factory=list)
    constructor_parameter_names: tuple[str, ...] | None = None

    def is_argument_hidden(self, index: int) -> bool:
        return self.ignore_all_arguments or index in self.ignored_arguments


class RecordingContext:
    """Static access to the directives of the call currently being recorded."""

    @staticmethod
    @contextmanager
    def arm(label: str, capability_name: str | None = None) -> Iterator[SuppressionState]:
        """Install a fresh state for one intercepted call and restore the previous one after."""
        state = SuppressionState(label=label, capability_name=capability_name)
        token = _current_state.set(state)
        try:
            yield state
        finally:
            _current_state.reset(token)

    @staticmethod
    def current() -> SuppressionState | None:
        return _current_state.get()

    @staticmethod
    def _require(directive: str) -> SuppressionState | None:
        state = _current_state.get()
        if state is None:
            DEFAULT_LOGGER.debug("Ignoring %s outside of an intercepted call", directive)
        return state

    @staticmethod
    def suppress_call() -> None:
        """Hide the whole entry; the call itself still runs."""
        state = RecordingContext._require("suppress_call")
        if state is not None:
            state.ignore_call = True

    @staticmethod
    def suppress_argument(index: int) -> None:
        state = RecordingContext._require("suppress_argument")
        if state is not None:
            state.ignored_arguments.add(index)

    @staticmethod
    def suppress_all_arguments() -> None:
        state = RecordingContext._require("suppress_all_arguments")
        if state is not None:
            state.ignore_all_arguments = True

    @staticmethod
    def suppress_return_value() -> None:
        state = RecordingContext._require("suppress_return_value")
        if state is not None:
            state.ignore_return = True

    @staticmethod
    def annotate(text: str) -> None:
        """Add a note line; repeated notes render in the order they were added."""
        state = RecordingContext._require("annotate")
        if state is not None:
            state.notes.append(text)

    @staticmethod
    def set_constructor_parameter_names(*names: str) -> None:
        state = RecordingContext._require("set_constructor_parameter_names")
        if state is not None:
            state.constructor_parameter_names = tuple(names)

    @staticmethod
    def get_constructor_parameter_names() -> tuple[str, ...] | None:
        state = _current_state.get()
        return state.constructor_parameter_names if state is not None else None


# Procedural aliases for legacy code that prefers plain functions.
suppress_call = RecordingContext.suppress_call
suppress_argument = RecordingContext.suppress_argument
suppress_all_arguments = RecordingContext.suppress_all_arguments
suppress_return_value = RecordingContext.suppress_return_value
annotate = RecordingContext.annotate
set_constructor_parameter_names = RecordingContext.set_constructor_parameter_names
get_constructor_parameter_names = RecordingContext.get_constructor_parameter_names
