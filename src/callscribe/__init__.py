"""Record calls to legacy collaborators and substitute their construction in tests."""

from callscribe.factory import TestDoubleFactory
from callscribe.recording.context import RecordingContext
from callscribe.recording.errors import (
    CallscribeError,
    ConstructionError,
    InterceptionIneligibleError,
    ReplayUnsupportedError,
    UnboundTargetError,
)
from callscribe.recording.formatting import format_value
from callscribe.recording.recorder import CallRecorder, Transcript
from callscribe.recording.strategy import ProxyStrategySelector
from callscribe.recording.types import (
    ConstructorCalledWith,
    ConstructorParameterInfo,
    InterceptionLimitation,
    ProxyStrategy,
)

__all__ = [
    "CallRecorder",
    "CallscribeError",
    "ConstructionError",
    "ConstructorCalledWith",
    "ConstructorParameterInfo",
    "InterceptionIneligibleError",
    "InterceptionLimitation",
    "ProxyStrategy",
    "ProxyStrategySelector",
    "RecordingContext",
    "ReplayUnsupportedError",
    "TestDoubleFactory",
    "Transcript",
    "UnboundTargetError",
    "format_value",
]
