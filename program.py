"""Program template and non-interactive entry points."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from config import load_config
from parser import parse
from ports import CollectOutput, InputPort, IteratorInput, NullPort, OutputPort
from processor import AwaitingInput, Complete, ProducedOutput, Runtime


def drive(rt: Runtime, source: InputPort, sink: OutputPort) -> Runtime:
    """Resume `rt` until it halts, serving inputs from `source` and outputs to `sink`."""
    state = rt.resume()
    while not isinstance(state, Complete):
        if isinstance(state, AwaitingInput):
            state = rt.resume(source.read())
        elif isinstance(state, ProducedOutput):
            sink.write(state.value)
            state = rt.resume()
    return rt


class Program:
    """Immutable parsed word sequence; a factory for fresh runtimes."""

    words: tuple[int, ...]

    def __init__(self, words: Sequence[int]) -> None:
        self.words = tuple(int(w) for w in words)

    @classmethod
    def parse(cls, text: str) -> Program:
        """Parse comma-separated program text (raises ParseError)."""
        return cls(parse(text))

    def __len__(self) -> int:
        return len(self.words)

    def __repr__(self) -> str:
        return f"Program({len(self.words)} words)"

    def new_runtime(self, trace: bool = False, step_limit: int | None = None) -> Runtime:
        """Return a runtime over a private copy of the words, at pc 0."""
        return Runtime(self.words, trace=trace, step_limit=step_limit)

    def run_io(self, source: InputPort, sink: OutputPort, **kwargs: Any) -> Runtime:
        """Run to completion against `source` and `sink`; returns the halted runtime."""
        return drive(self.new_runtime(**kwargs), source, sink)

    def run(self, noun: int, verb: int, **kwargs: Any) -> int:
        """Patch addresses 1 and 2, run without I/O and return address 0."""
        rt = self.new_runtime(**kwargs)
        rt.set(1, noun)
        rt.set(2, verb)
        port = NullPort()
        drive(rt, port, port)
        return rt.get(0)

    def run_collect_output(self, inputs: Iterable[int], **kwargs: Any) -> list[int]:
        """Feed `inputs` in order and return every output."""
        out = CollectOutput()
        self.run_io(IteratorInput(inputs), out, **kwargs)
        return out.values


def run_source(
    text: str, inputs: Iterable[int] = (), config: str | dict[str, Any] | None = None
) -> tuple[list[int], Runtime]:
    """Parse `text`, run it under `config` and return (outputs, halted runtime)."""
    cfg = load_config(config)
    prog = Program.parse(text)
    out = CollectOutput()
    rt = prog.run_io(IteratorInput(inputs), out, trace=cfg["trace"], step_limit=cfg["step_limit"])
    logging.debug("run_source: %d outputs in %d steps", len(out.values), rt.steps)
    return out.values, rt
