"""Fluent call recording into a shared, append-only transcript."""

from __future__ import annotations

from typing import Any

from callscribe.recording.formatting import DEFAULT_FORMATTER, ValueFormatter
from callscribe.recording.introspection import resolve_capability_name
from callscribe.recording.types import (
    CONSTRUCTOR_LABEL,
    DEFAULT_WRAP_EMOJI,
    UNKNOWN_CAPABILITY,
    Entry,
    EntryKind,
    Field,
    FieldRole,
)


class Transcript:
    """Ordered text buffer shared by every recorder writing to it."""

    def __init__(self, text: str = "") -> None:
        self._parts: list[str] = [text] if text else []

    def append(self, text: str) -> Transcript:
        self._parts.append(text)
        return self

    def write(self, text: str) -> int:
        """File-like alias of :meth:`append`."""
        self._parts.append(text)
        return len(text)

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return sum(len(part) for part in self._parts)

    def __repr__(self) -> str:
        return f"Transcript({self.text!r})"


class CallRecorder:
    """Build one call entry at a time and append it to a transcript.

    Example::

        recorder = CallRecorder(emoji="📝")
        recorder.with_argument("value1", "first").with_return("ok").log("Process")

    ``log`` renders exactly one entry and resets the builder, so the same
    recorder can describe many calls.
    """

    def __init__(
        self,
        transcript: Transcript | None = None,
        emoji: str = "",
        *,
        formatter: ValueFormatter = DEFAULT_FORMATTER,
    ) -> None:
        self.transcript = transcript if transcript is not None else Transcript()
        self.emoji = emoji or ""
        self.formatter = formatter
        self._reset()

    def _reset(self) -> None:
        self._fields: list[Field] = []
        self._return: Field | None = None
        self._notes: list[str] = []
        self._exception = False
        self._capability_name: str | None = None
        self._target: Any = None

    def with_argument(self, value: Any, name: str | None = None) -> CallRecorder:
        label = name if name is not None else f"Arg{len(self._fields)}"
        self._fields.append(Field(label, self.formatter.format(value), FieldRole.ARGUMENT))
        return self

    def with_out(self, value: Any, name: str | None = None) -> CallRecorder:
        label = name if name is not None else f"Out{len(self._fields)}"
        self._fields.append(Field(label, self.formatter.format(value), FieldRole.OUT))
        return self

    def with_return(self, value: Any) -> CallRecorder:
        """Record a return value; ``None`` means no ``Returns`` line."""
        if value is None:
            self._return = None
        else:
            self._return = Field("Returns", self.formatter.format(value), FieldRole.RETURN)
        return self

    def with_note(self, note: str | None) -> CallRecorder:
        if note:
            self._notes.append(note)
        return self

    def with_exception(self, exc: BaseException) -> CallRecorder:
        self._exception = True
        self._notes.append(f"Exception: {exc}")
        return self

    def for_capability(self, name: str | None) -> CallRecorder:
        self._capability_name = name
        return self

    def with_target(self, target: Any) -> CallRecorder:
        """Remember the wrapped object so constructor entries can name its capability."""
        self._target = target
        return self

    def log(self, label: str) -> Entry:
        entry = self._build(label)
        self.transcript.append(entry.render())
        self._reset()
        return entry

    def _build(self, label: str) -> Entry:
        if label == CONSTRUCTOR_LABEL:
            return Entry(
                kind=EntryKind.CONSTRUCTOR,
                emoji=self.emoji,
                label=self._resolve_capability_name(),
                fields=tuple(self._fields),
                notes=tuple(self._notes),
            )

        fields = tuple(self._fields)
        if self._return is not None:
            fields += (self._return,)
        return Entry(
            kind=EntryKind.METHOD,
            emoji=self.emoji,
            label=label,
            fields=fields,
            notes=tuple(self._notes),
            exception=self._exception,
        )

    def _resolve_capability_name(self) -> str:
        if self._capability_name:
            return self._capability_name
        if self._target is not None:
            return resolve_capability_name(type(self._target))
        return UNKNOWN_CAPABILITY

    def wrap(self, target: Any, emoji: str = DEFAULT_WRAP_EMOJI, capability: type | None = None) -> Any:
        """Return a proxy recording every call to ``target`` into this transcript.

        When ``capability`` is given the proxy satisfies that type and constructor
        entries use its name; otherwise the strategy is picked from ``target``.
        """
        from callscribe.recording.proxies import create_recording_proxy

        requested = capability if capability is not None else type(target)
        capability_name = capability.__name__ if capability is not None else None
        return create_recording_proxy(
            requested,
            target,
            self.transcript,
            emoji,
            capability_name=capability_name,
        )

    def replay(self, requested: type, emoji: str = DEFAULT_WRAP_EMOJI) -> Any:
        """Return a proxy for ``requested`` with no live target behind it."""
        from callscribe.recording.proxies import create_replay_proxy

        return create_replay_proxy(requested, self.transcript, emoji)
