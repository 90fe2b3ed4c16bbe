"""I/O ports: input sources and output sinks that drive a Runtime."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TextIO

from isa import IntcodeError


class PortError(IntcodeError):
    """Raised when a port cannot serve a read or accept a write."""

    pass


class NoMoreInput(PortError):
    """Raised by an input source that has been drained."""

    pass


class InputPort(ABC):
    @abstractmethod
    def read(self) -> int:
        """Return the next input word."""


class OutputPort(ABC):
    @abstractmethod
    def write(self, value: int) -> None:
        """Accept one output word."""


class NullPort(InputPort, OutputPort):
    """Port for programs that must not do any I/O."""

    def read(self) -> int:
        msg = "input not implemented"
        raise PortError(msg)

    def write(self, value: int) -> None:
        msg = f"output not implemented (got {value})"
        raise PortError(msg)


class IteratorInput(InputPort):
    """Serves words from any iterable, in order."""

    def __init__(self, values: Iterable[int]) -> None:
        self._it = iter(values)

    def read(self) -> int:
        try:
            return int(next(self._it))
        except StopIteration as e:
            msg = "no more input"
            raise NoMoreInput(msg) from e


class CollectOutput(OutputPort):
    """Appends every word to `values`."""

    def __init__(self, values: list[int] | None = None) -> None:
        self.values = values if values is not None else []

    def write(self, value: int) -> None:
        self.values.append(value)


class PrintOutput(OutputPort):
    """Prints one word per line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def write(self, value: int) -> None:
        self.stream.write(f"{value}\n")
