"""Typed cell values held in result tuples."""

from __future__ import annotations

import abc
import struct
from typing import Optional

__all__ = ["TupleValue", "IntValue", "FloatValue", "StringValue"]


def _to_single(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", float(value)))[0]


class TupleValue(abc.ABC):
    """A single cell value that can be printed and compared with its own kind."""

    @abc.abstractmethod
    def to_string(self) -> str:
        """Return the printable form of the value."""

    @abc.abstractmethod
    def compare(self, other: "TupleValue") -> int:
        """Return a negative, zero or positive number as self is below, equal to or above other."""

    def __str__(self) -> str:
        return self.to_string()


class IntValue(TupleValue):
    """An integer cell."""

    __slots__ = ("value",)

    def __init__(self, value: int) -> None:
        self.value = int(value)

    def to_string(self) -> str:
        return str(self.value)

    def compare(self, other: TupleValue) -> int:
        if not isinstance(other, IntValue):
            raise TypeError(f"cannot compare IntValue with {type(other).__name__}")
        return self.value - other.value

    def __repr__(self) -> str:
        return f"IntValue({self.value!r})"


class FloatValue(TupleValue):
    """A single-precision floating point cell."""

    __slots__ = ("value",)

    def __init__(self, value: float) -> None:
        self.value = _to_single(value)

    def to_string(self) -> str:
        # six significant digits, as a default-formatted stream would print
        return f"{self.value:g}"

    def compare(self, other: TupleValue) -> int:
        if not isinstance(other, FloatValue):
            raise TypeError(f"cannot compare FloatValue with {type(other).__name__}")
        result = self.value - other.value
        if result > 0:
            return 1
        if result < 0:
            return -1
        return 0

    def __repr__(self) -> str:
        return f"FloatValue({self.value!r})"


class StringValue(TupleValue):
    """A character cell, optionally cut to a given length."""

    __slots__ = ("value",)

    def __init__(self, value: str, length: Optional[int] = None) -> None:
        self.value = value if length is None else value[:length]

    def to_string(self) -> str:
        return self.value

    def compare(self, other: TupleValue) -> int:
        if not isinstance(other, StringValue):
            raise TypeError(f"cannot compare StringValue with {type(other).__name__}")
        mine = self.value.encode("utf-8")
        theirs = other.value.encode("utf-8")
        return (mine > theirs) - (mine < theirs)

    def __repr__(self) -> str:
        return f"StringValue({self.value!r})"