"""Amplifier chains: serial pass and feedback loop over independent runtimes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from itertools import permutations

from processor import AwaitingInput, ProtocolError, Runtime
from program import Program


def _prime(prog: Program, phase: int) -> Runtime:
    """Start an amplifier and feed it its phase setting."""
    amp = prog.new_runtime()
    state = amp.resume()
    if not isinstance(state, AwaitingInput):
        msg = f"amplifier did not ask for its phase setting (got {state})"
        raise ProtocolError(msg)
    amp.resume(phase)
    return amp


def run_chain(prog: Program, phases: Sequence[int], signal: int = 0) -> int:
    """Pass `signal` once through one amplifier per phase setting."""
    for amp in [_prime(prog, p) for p in phases]:
        out, _ = amp.step(signal)
        if out is None:
            msg = "amplifier halted without output"
            raise ProtocolError(msg)
        signal = out
    return signal


def run_feedback_loop(prog: Program, phases: Sequence[int], signal: int = 0) -> int:
    """Route the last amplifier back into the first until every amplifier halts.

    Returns the last signal produced.
    """
    amps = [_prime(prog, p) for p in phases]
    done = [False] * len(amps)
    rounds = 0
    while not all(done):
        for i, amp in enumerate(amps):
            if done[i]:
                continue
            out, done[i] = amp.step(signal)
            if out is not None:
                signal = out
        rounds += 1
    logging.debug("feedback loop %s settled after %d rounds -> %d", list(phases), rounds, signal)
    return signal


def find_max(prog: Program, phases: Iterable[int] = range(5)) -> tuple[int, list[int]]:
    """Try every ordering of `phases` through the serial chain."""
    best, best_phases = 0, []
    for perm in permutations(phases):
        out = run_chain(prog, perm)
        if out > best or not best_phases:
            best, best_phases = out, list(perm)
    return best, best_phases


def find_max_feedback(prog: Program, phases: Iterable[int] = range(5, 10)) -> tuple[int, list[int]]:
    """Try every ordering of `phases` through the feedback loop."""
    best, best_phases = 0, []
    for perm in permutations(phases):
        out = run_feedback_loop(prog, perm)
        if out > best or not best_phases:
            best, best_phases = out, list(perm)
    return best, best_phases
