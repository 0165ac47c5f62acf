# rulekeeper:domain=engine
"""Collect-all accumulator: thread a value through steps while concatenating their logs."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

A = TypeVar("A")
B = TypeVar("B")
L = TypeVar("L")


@dataclass(frozen=True)
class Writer(Generic[A, L]):
    """A value paired with an ordered log.

    Unlike exception-based validation, a step that logs entries never stops
    the steps after it: ``flat_map`` always runs the next step and appends
    its log to what was collected so far.
    """

    value: A
    log: tuple[L, ...] = ()

    @classmethod
    def success(cls, value: A) -> Writer[A, L]:
        return cls(value, ())

    @classmethod
    def error(cls, value: A, log: Iterable[L]) -> Writer[A, L]:
        return cls(value, tuple(log))

    def flat_map(self, step: Callable[[A], Writer[B, L]]) -> Writer[B, L]:
        nxt = step(self.value)
        return Writer(nxt.value, self.log + nxt.log)

    def run(self) -> tuple[A, list[L]]:
        return self.value, list(self.log)


def sequence(initial: A, steps: Iterable[Callable[[A], Writer[A, L]]]) -> Writer[A, L]:
    """Run *steps* in order starting from *initial*; logs are concatenated in step order."""
    return reduce(lambda acc, step: acc.flat_map(step), steps, Writer.success(initial))
