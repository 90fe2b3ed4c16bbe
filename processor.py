"""Processor (Memory + Runtime) and CLI wrapper.

Provides the resumable execution engine, logging initialization and an
optional memory dump emitted when debug logging is enabled.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Union

from isa import AddressError, Instruction, IntcodeError, decode_instr, to_word

LOGFILE = "intcode.log"


def init_logging(logfile: str = LOGFILE, debug: bool = False, console: bool = False) -> None:
    """Configure root logger to write to `logfile`.

    If debug=True set DEBUG level. If console=True also echo logs to stdout.
    """
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    lvl = logging.DEBUG if debug else logging.CRITICAL
    root.setLevel(lvl)

    if debug:
        file_fmt = "%(levelname)s %(name)s:%(filename)s:%(lineno)d %(message)s"
    else:
        file_fmt = "%(levelname)-5s %(message)s"

    # always create a FileHandler even when not debug to allow easier inspection if asked
    fh = logging.FileHandler(logfile, mode="w", encoding="utf-8")
    fh.setLevel(lvl)
    fh.setFormatter(logging.Formatter(file_fmt))
    root.addHandler(fh)

    if debug and console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(lvl)
        ch.setFormatter(logging.Formatter("%(levelname)5s %(message)s"))
        root.addHandler(ch)


class ProtocolError(IntcodeError):
    """Raised when a caller breaks the resume contract."""

    pass


class StepLimitError(IntcodeError):
    """Raised when a runtime executes more instructions than allowed."""

    pass


# ---------- Machine states ----------
@dataclass(frozen=True)
class AwaitingInput:
    """Suspended at an input instruction; the next value lands at `address`."""

    address: int


@dataclass(frozen=True)
class ProducedOutput:
    """Suspended right after emitting `value`."""

    value: int


@dataclass(frozen=True)
class Complete:
    """Halted. Cannot be resumed."""


MachineState = Union[AwaitingInput, ProducedOutput, Complete]


class Memory:
    """Sparse word-addressed store; unwritten cells read as zero."""

    cells: dict[int, int]

    def __init__(self, words: Iterable[int] = ()) -> None:
        self.cells = {}
        for addr, w in enumerate(words):
            if w:
                self.cells[addr] = to_word(w)

    @staticmethod
    def _check(addr: int) -> None:
        if addr < 0:
            msg = f"negative address {addr}"
            raise AddressError(msg)

    def __getitem__(self, addr: int) -> int:
        self._check(addr)
        return self.cells.get(addr, 0)

    def __setitem__(self, addr: int, value: int) -> None:
        self._check(addr)
        self.cells[addr] = to_word(value)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        """Iterate over written (address, word) pairs in address order."""
        return iter(sorted(self.cells.items()))

    def __len__(self) -> int:
        return len(self.cells)


class Runtime:
    """One execution instance implementing the FETCH-DECODE-EXEC loop.

    The runtime never performs I/O. It returns control to the caller just
    before an input is needed and just after an output was produced; the
    caller continues it with `resume`.
    """

    memory: Memory
    pc: int
    relative_base: int
    state: MachineState | None
    steps: int
    step_limit: int | None
    trace: bool

    def __init__(self, words: Iterable[int], trace: bool = False, step_limit: int | None = None) -> None:
        """Create a runtime with a private copy of `words` at address 0."""
        self.memory = Memory(words)
        self.pc = 0
        self.relative_base = 0
        self.state = None
        self.steps = 0
        self.step_limit = step_limit
        self.trace = trace
        logging.debug("Runtime: loaded %d non-zero words", len(self.memory))

    # ---------- memory patch interface ----------
    def get(self, addr: int) -> int:
        """Read the word at `addr` (zero if never written)."""
        return self.memory[addr]

    def set(self, addr: int, value: int) -> None:
        """Write `value` to `addr`."""
        self.memory[addr] = value

    # ---------- hooks for operations ----------
    def request_input(self, addr: int) -> None:
        self.state = AwaitingInput(addr)

    def emit(self, value: int) -> None:
        self.state = ProducedOutput(value)

    def halt(self) -> None:
        logging.debug("HALT encountered after %d steps", self.steps + 1)
        self.state = Complete()

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, Complete)

    def read_instruction(self) -> Instruction:
        """Decode the instruction at the program counter without running it."""
        return decode_instr(self, self.pc)

    def _log_step(self, instr: Instruction) -> None:
        if self.trace:
            logging.debug("pc=%d rb=%d %s", self.pc, self.relative_base, instr)

    def _run(self) -> MachineState:
        """Execute until the next suspension point or halt."""
        self.state = None
        while True:
            if self.step_limit is not None and self.steps >= self.step_limit:
                msg = f"step limit {self.step_limit} exceeded at pc={self.pc}"
                raise StepLimitError(msg)
            instr = self.read_instruction()
            self._log_step(instr)
            target = instr.execute(self)
            self.steps += 1
            # pc stays on the halt instruction
            if isinstance(self.state, Complete):
                return self.state
            self.pc = target if target is not None else self.pc + instr.size
            if self.state is not None:
                return self.state

    # ---------- resume protocol ----------
    def resume(self, value: int | None = None) -> MachineState:
        """Advance execution to the next suspension point.

        When the runtime is awaiting input, `value` is written to the recorded
        address first. A value supplied while no input is pending is not
        checked and is dropped.
        """
        state = self.state
        if isinstance(state, Complete):
            msg = "already complete"
            raise ProtocolError(msg)
        if isinstance(state, AwaitingInput):
            if value is None:
                msg = "expected to resume with input"
                raise ProtocolError(msg)
            self.set(state.address, value)
        elif value is not None:
            logging.debug("resume: no input pending, dropping %d", value)
        return self._run()

    def step(self, value: int) -> tuple[int | None, bool]:
        """Feed one input, collect one output.

        Returns (output, is_complete). The output is None only when the
        machine halts without producing one.
        """
        state = self.resume(value)
        if isinstance(state, Complete):
            return None, True
        if isinstance(state, AwaitingInput):
            msg = "expected output, machine requested more input"
            raise ProtocolError(msg)
        out = state.value
        nxt = self.resume()
        if isinstance(nxt, ProducedOutput):
            msg = f"expected a single output, got {out} then {nxt.value}"
            raise ProtocolError(msg)
        return out, isinstance(nxt, Complete)

    def step_read(self, n: int) -> list[int] | None:
        """Drain exactly `n` outputs; None if the machine halts first."""
        out: list[int] = []
        while len(out) < n:
            state = self.resume()
            if isinstance(state, Complete):
                return None
            if isinstance(state, AwaitingInput):
                msg = f"machine requested input after {len(out)} of {n} outputs"
                raise ProtocolError(msg)
            out.append(state.value)
        return out

    def step_n(self, inputs: Iterable[int], n: int) -> list[int] | None:
        """Supply `inputs` in order, then collect `n` outputs."""
        vals = list(inputs)
        state: MachineState | None = self.state
        for i, v in enumerate(vals):
            if not isinstance(self.state, AwaitingInput):
                msg = f"machine not awaiting input for value {i} of {len(vals)}"
                raise ProtocolError(msg)
            state = self.resume(v)
        out: list[int] = []
        if isinstance(state, ProducedOutput) and vals and n > 0:
            out.append(state.value)
        elif isinstance(state, Complete):
            return None
        rest = self.step_read(n - len(out))
        if rest is None:
            return None
        return out + rest

    def wait_for_input(self) -> bool:
        """Run until input is requested (True) or the machine halts (False)."""
        state = self.state
        if isinstance(state, AwaitingInput):
            return True
        if isinstance(state, Complete):
            return False
        state = self.resume()
        if isinstance(state, ProducedOutput):
            msg = f"expected input request, machine produced {state.value}"
            raise ProtocolError(msg)
        return isinstance(state, AwaitingInput)

    def dump_memory(self, path: str) -> None:
        """Write every non-zero memory cell to `path`."""
        with open(path, "w", encoding="utf-8") as f:
            f.write("=== MEMORY DUMP ===\n")
            f.write(f"pc: {self.pc}  relative_base: {self.relative_base}  steps: {self.steps}\n")
            f.write(f"state: {self.state}\n\n")
            for addr, w in self.memory:
                if w:
                    f.write(f"{addr:08d}: {w}\n")
            f.write("\n=== END DUMP ===\n")


# ---------- CLI ----------
if __name__ == "__main__":
    import argparse
    from pathlib import Path

    from config import ConfigError, load_config
    from parser import ParseError
    from ports import IteratorInput, PrintOutput
    from program import Program

    ap = argparse.ArgumentParser(description="Intcode VM runner. Executes a comma-separated program file.")
    ap.add_argument("program", help="program file (comma-separated integers)")
    ap.add_argument("--input", help="comma-separated input values", default="")
    ap.add_argument("--noun", type=int, default=None, help="value for address 1 (no-I/O mode)")
    ap.add_argument("--verb", type=int, default=None, help="value for address 2 (no-I/O mode)")
    ap.add_argument("--config", help="path to yaml config", default=None)
    ap.add_argument("--debug", action="store_true", help="enable debug logging to logfile")
    ap.add_argument("--logfile", default=None, help="path to log file")
    ap.add_argument("--console", action="store_true", help="also echo logs to console (only when --debug)")
    ap.add_argument("--dump", action="store_true", help="write memory_dump.txt after the run (only when --debug)")
    args = ap.parse_args()

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print("Bad config:", e)
        sys.exit(2)

    debug_enabled = args.debug or cfg["debug"]
    init_logging(logfile=args.logfile or cfg["logfile"], debug=debug_enabled, console=args.console)

    code_path = Path(args.program)
    if not code_path.exists():
        print("Program file not found:", args.program)
        sys.exit(2)
    try:
        prog = Program.parse(code_path.read_text(encoding="utf-8"))
        inputs = [int(t) for t in args.input.split(",") if t.strip()]
    except (ParseError, ValueError) as e:
        print("Bad program or input:", e)
        sys.exit(2)

    if args.noun is not None or args.verb is not None:
        print(prog.run(args.noun or 0, args.verb or 0))
        sys.exit(0)

    rt = prog.run_io(
        IteratorInput(inputs),
        PrintOutput(sys.stdout),
        trace=cfg["trace"],
        step_limit=cfg["step_limit"],
    )
    logging.debug("CLI: program completed in %d steps", rt.steps)
    if debug_enabled and args.dump:
        try:
            rt.dump_memory("memory_dump.txt")
        except OSError as e:
            logging.debug("Failed to write memory_dump.txt: %s", e)
