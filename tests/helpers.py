"""Reusable test utilities and recording stubs for the test suite."""

from callscribe.recording.recorder import CallRecorder, Transcript


class RecordingLogger:
    """In-memory logger capturing log messages and setup calls."""

    def __init__(self):
        self.messages: list[str] = []
        self.setup_calls: list[tuple[bool, str | None]] = []

    def setup(self, verbose: bool, log_file: str | None = None) -> None:
        self.setup_calls.append((verbose, log_file))

    def log(self, msg: str, *args: object) -> None:
        self.messages.append(msg % args if args else msg)

    def debug(self, msg: str, *args: object) -> None:
        self.messages.append(f"DEBUG:{msg % args if args else msg}")


def implements(obj: object, capability: type) -> bool:
    """Nominal capability check that also works for non-runtime-checkable Protocols."""

    return capability in type(obj).__mro__


def new_recorder(emoji: str = "") -> tuple[Transcript, CallRecorder]:
    """Return a fresh transcript together with a recorder writing into it."""

    transcript = Transcript()
    return transcript, CallRecorder(transcript, emoji)
