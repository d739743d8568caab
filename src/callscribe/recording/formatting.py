"""Render recorded values as canonical, reproducible text."""

from __future__ import annotations

import array
import ctypes
import datetime
import math
import numbers
from collections.abc import Sequence, Set
from typing import Any

SINGLE_PRECISION_DIGITS = 2
DOUBLE_PRECISION_DIGITS = 10
DATETIME_PATTERN = "%m/%d/%Y %H:%M:%S"
NULL_TEXT = "null"

_TEXT_TYPES = (str, bytes, bytearray)
_CTYPES_INTEGERS = (
    ctypes.c_bool,
    ctypes.c_byte,
    ctypes.c_ubyte,
    ctypes.c_short,
    ctypes.c_ushort,
    ctypes.c_int,
    ctypes.c_uint,
    ctypes.c_long,
    ctypes.c_ulong,
    ctypes.c_longlong,
    ctypes.c_ulonglong,
)


class ValueFormatter:
    """Turn any runtime value into the text written to a transcript.

    The checks run in a fixed priority order: ``None``, sequences, floating
    point numbers, integers, dates and finally ``str()``. Sequences recurse per
    element so numeric arrays pick up the numeric rules.
    """

    def format(self, value: Any) -> str:
        if value is None:
            return NULL_TEXT

        if isinstance(value, array.array):
            return self._format_array(value)

        if isinstance(value, Set):
            return self._format_set(value)

        if isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES):
            return ",".join(self.format(item) for item in value)

        if isinstance(value, ctypes.c_float):
            return self.format_float(value.value, SINGLE_PRECISION_DIGITS)

        if isinstance(value, ctypes.c_double):
            return self.format_float(value.value, DOUBLE_PRECISION_DIGITS)

        if isinstance(value, _CTYPES_INTEGERS):
            return str(value.value)

        if isinstance(value, float):
            return self.format_float(value, DOUBLE_PRECISION_DIGITS)

        if isinstance(value, int):
            return str(value)

        if isinstance(value, datetime.datetime):
            return self.format_datetime(value)

        if isinstance(value, datetime.date):
            return self.format_datetime(datetime.datetime(value.year, value.month, value.day))

        return str(value)

    def format_float(self, value: float, digits: int) -> str:
        """Round half-even to ``digits`` decimals and trim trailing zeros."""

        if not math.isfinite(value):
            return str(value)

        text = f"{value:.{digits}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text == "-0":
            return "0"
        return text

    def format_datetime(self, value: datetime.datetime) -> str:
        """Render in UTC; naive values are taken to already be UTC."""

        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.strftime(DATETIME_PATTERN)

    def _format_set(self, value: Set[Any]) -> str:
        """Join members in sorted order: numerically for all-number sets, else by rendered text."""

        if all(isinstance(item, numbers.Real) for item in value):
            return ",".join(self.format(item) for item in sorted(value))
        return ",".join(sorted(self.format(item) for item in value))

    def _format_array(self, value: array.array) -> str:
        if value.typecode == "f":
            return ",".join(self.format_float(item, SINGLE_PRECISION_DIGITS) for item in value)
        return ",".join(self.format(item) for item in value)


DEFAULT_FORMATTER = ValueFormatter()


def format_value(value: Any) -> str:
    return DEFAULT_FORMATTER.format(value)
