"""ISA: word helpers, operation table and instruction decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from processor import Runtime

WORD_BITS = 64
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1


class IntcodeError(RuntimeError):
    """Base class for all engine errors."""

    pass


class DecodeError(IntcodeError):
    """Raised for an unknown opcode or an unknown parameter mode."""

    pass


class AddressError(IntcodeError):
    """Raised for illegal write targets and negative addresses."""

    pass


def to_word(value: int) -> int:
    """Wrap `value` into a signed 64-bit word (two's complement)."""
    v = int(value) & ((1 << WORD_BITS) - 1)
    if v & (1 << (WORD_BITS - 1)):
        v -= 1 << WORD_BITS
    return v


class OpCode(IntEnum):
    """Keeps opcodes from all operations."""

    ADD = 1  # dest = a + b
    MUL = 2  # dest = a * b
    IN = 3  # dest = next input (suspends)
    OUT = 4  # emit a (suspends)
    JT = 5  # if a != 0: pc = b
    JF = 6  # if a == 0: pc = b
    LT = 7  # dest = a < b
    EQ = 8  # dest = a == b
    RBO = 9  # relative_base += a
    HALT = 99


class ParamMode(IntEnum):
    """Addressing mode digits."""

    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


# ---------- Parameters ----------
@dataclass(frozen=True)
class Param:
    """Raw operand of an instruction, not yet dereferenced."""

    value: int

    def resolve(self, rt: Runtime) -> int:
        """Read the operand as an input value."""
        return rt.get(self.position(rt))

    def position(self, rt: Runtime) -> int:
        """Compute the address this operand writes to."""
        raise NotImplementedError


@dataclass(frozen=True)
class Position(Param):
    """Operand is an absolute address."""

    def position(self, rt: Runtime) -> int:
        return self.value

    def __str__(self) -> str:
        return f"[{self.value}]"


@dataclass(frozen=True)
class Immediate(Param):
    """Operand is the value itself."""

    def resolve(self, rt: Runtime) -> int:
        return self.value

    def position(self, rt: Runtime) -> int:
        msg = f"immediate parameter {self.value} used as write target"
        raise AddressError(msg)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Relative(Param):
    """Operand is an offset from the relative base."""

    def position(self, rt: Runtime) -> int:
        return rt.relative_base + self.value

    def __str__(self) -> str:
        if self.value < 0:
            return f"[rb{self.value}]"
        return f"[rb+{self.value}]"


PARAM_KINDS: dict[int, type[Param]] = {
    ParamMode.POSITION: Position,
    ParamMode.IMMEDIATE: Immediate,
    ParamMode.RELATIVE: Relative,
}


# ---------- Operations ----------
# An action returns the new program counter when it jumps, None otherwise.
Action = Callable[["Runtime", list[Param]], "int | None"]


@dataclass(frozen=True)
class Operation:
    """One entry of the operation table."""

    opcode: OpCode
    arity: int
    action: Action = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.opcode.name


def _add(rt: Runtime, p: list[Param]) -> int | None:
    rt.set(p[2].position(rt), p[0].resolve(rt) + p[1].resolve(rt))
    return None


def _mul(rt: Runtime, p: list[Param]) -> int | None:
    rt.set(p[2].position(rt), p[0].resolve(rt) * p[1].resolve(rt))
    return None


def _in(rt: Runtime, p: list[Param]) -> int | None:
    rt.request_input(p[0].position(rt))
    return None


def _out(rt: Runtime, p: list[Param]) -> int | None:
    rt.emit(p[0].resolve(rt))
    return None


def _jump_if_true(rt: Runtime, p: list[Param]) -> int | None:
    if p[0].resolve(rt) != 0:
        return p[1].resolve(rt)
    return None


def _jump_if_false(rt: Runtime, p: list[Param]) -> int | None:
    if p[0].resolve(rt) == 0:
        return p[1].resolve(rt)
    return None


def _less_than(rt: Runtime, p: list[Param]) -> int | None:
    rt.set(p[2].position(rt), 1 if p[0].resolve(rt) < p[1].resolve(rt) else 0)
    return None


def _equals(rt: Runtime, p: list[Param]) -> int | None:
    rt.set(p[2].position(rt), 1 if p[0].resolve(rt) == p[1].resolve(rt) else 0)
    return None


def _adjust_base(rt: Runtime, p: list[Param]) -> int | None:
    rt.relative_base += p[0].resolve(rt)
    return None


def _halt(rt: Runtime, p: list[Param]) -> int | None:
    rt.halt()
    return None


OP_ADD = Operation(OpCode.ADD, 3, _add)
OP_MUL = Operation(OpCode.MUL, 3, _mul)
OP_IN = Operation(OpCode.IN, 1, _in)
OP_OUT = Operation(OpCode.OUT, 1, _out)
OP_JT = Operation(OpCode.JT, 2, _jump_if_true)
OP_JF = Operation(OpCode.JF, 2, _jump_if_false)
OP_LT = Operation(OpCode.LT, 3, _less_than)
OP_EQ = Operation(OpCode.EQ, 3, _equals)
OP_RBO = Operation(OpCode.RBO, 1, _adjust_base)
OP_HALT = Operation(OpCode.HALT, 0, _halt)

OPERATIONS: dict[int, Operation] = {
    op.opcode: op for op in (OP_ADD, OP_MUL, OP_IN, OP_OUT, OP_JT, OP_JF, OP_LT, OP_EQ, OP_RBO, OP_HALT)
}


# ---------- Instructions ----------
@dataclass
class Instruction:
    """Decoded operation bound to its parameters."""

    operation: Operation
    params: list[Param]

    @property
    def size(self) -> int:
        return len(self.params) + 1

    def execute(self, rt: Runtime) -> int | None:
        """Run the action against `rt`; returns the jump target if any."""
        return self.operation.action(rt, self.params)

    def __str__(self) -> str:
        return mnemonic(self)


def mnemonic(instr: Instruction) -> str:
    """Get instruction mnemonic, e.g. ``MUL [4], 3, [4]``."""
    if not instr.params:
        return instr.operation.name
    return f"{instr.operation.name} " + ", ".join(str(p) for p in instr.params)


def decode_instr(rt: Runtime, pc: int) -> Instruction:
    """Decode the instruction at `pc`.

    The opcode is the word modulo 100; the digits above it select the
    addressing mode of each parameter, least significant first.
    Raises DecodeError for an unknown opcode or mode digit.
    """
    word = rt.get(pc)
    op = OPERATIONS.get(word % 100) if word >= 0 else None
    if op is None:
        msg = f"unknown opcode {word} at address {pc}"
        raise DecodeError(msg)

    modes = word // 100
    params: list[Param] = []
    for i in range(op.arity):
        digit = modes % 10
        modes //= 10
        kind = PARAM_KINDS.get(digit)
        if kind is None:
            msg = f"unknown parameter mode {digit} in instruction {word} at address {pc}"
            raise DecodeError(msg)
        params.append(kind(rt.get(pc + 1 + i)))
    return Instruction(op, params)
