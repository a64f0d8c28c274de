__all__ = [
    "Instruction",
    "Jump",
    "Pattern",
    "PreferNext",
    "PreferTarget",
    "Program",
    "ProgramCounterError",
    "Step",
    "thompson_vm",
]

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

from weftmatch.weight import FnStep, SymbolStep, Trivial, Weight

T = TypeVar("T")
W = TypeVar("W", bound=Weight)

log = logging.getLogger(__name__)


class ProgramCounterError(ValueError):
    """A program counter does not fit the configured width."""

    def __init__(self, pc: int, pc_width: int) -> None:
        super().__init__(f"PC {pc} out of range for a {pc_width}-bit program counter")
        self.pc = pc
        self.pc_width = pc_width


class Instruction(Generic[T]):
    pass


@dataclass
class Step(Instruction[T]):
    __slots__ = ("step",)
    step: SymbolStep[T, Any]

    def __post_init__(self) -> None:
        if isinstance(self.step, SymbolStep):
            return
        if not callable(self.step):
            msg = f"{Step.__name__} requires a SymbolStep or a callable; found: {self.step!r}"
            raise TypeError(msg)
        self.step = FnStep(self.step)


@dataclass
class Jump(Instruction[T]):
    __slots__ = ("goto",)
    goto: int


@dataclass
class PreferTarget(Instruction[T]):
    """Continue at `goto`, with a lower-priority thread at the next PC."""

    __slots__ = ("goto",)
    goto: int


@dataclass
class PreferNext(Instruction[T]):
    """Continue at the next PC, with a lower-priority thread at `goto`."""

    __slots__ = ("goto",)
    goto: int


Program: TypeAlias = Sequence[Instruction[T]]


def merge(a: W | None, b: W | None) -> W | None:
    """Combine two optional results, `a` being the higher priority one."""
    if a is None:
        return b
    if b is not None:
        a.merge(b)
    return a


_END_OF_INPUT = object()


class Pattern(Generic[T, W]):
    """Weighted Thompson VM over a fixed program.

    Threads are (pc, weight) pairs kept in priority order with at most one
    thread per pc. Each input symbol rebuilds the thread list from scratch.
    A thread walking past the last instruction is a completed match, and
    the completed match at the latest input position wins.

    The scratch state is reused between calls to `eval`, so a single
    instance must not evaluate two inputs at once. The program itself is
    only ever read.

    Control instructions are expanded recursively; the depth is bounded by
    the number of non-Step instructions, provided every control cycle in
    the program passes through a Step.
    """

    __slots__ = "program", "weight", "pc_width", "max_pc", "_threads", "_index"

    def __init__(
        self,
        program: Program[T],
        weight: type[W] = Trivial,  # type: ignore[assignment]
        pc_width: int = 16,
    ) -> None:
        self.program = program
        self.weight = weight
        self.pc_width = pc_width
        self.max_pc = (1 << pc_width) - 1
        if len(program) > self.max_pc:
            raise ProgramCounterError(len(program), pc_width)
        self._threads: list[tuple[int, W]] = []
        self._index: dict[int, int] = {}

    def eval(self, symbols: Iterable[T]) -> W | None:
        log.debug("evaluating pattern of %d instructions", len(self.program))
        self._threads.clear()
        self._threads.append((0, self.weight.success()))
        result: W | None = None
        position = 0
        for symbol in _with_end(symbols):
            self._index.clear()
            threads, self._threads = self._threads, []
            matched: W | None = None
            for pc, weight in threads:
                matched = merge(matched, self._add(pc, weight, symbol))
            if matched is not None:
                result = matched
            if not self._threads:
                if symbol is not _END_OF_INPUT:
                    log.debug("no threads left at position %d", position)
                break
            position += 1
        log.debug("pattern of %d instructions finished: %r", len(self.program), result)
        return result

    def _add(self, pc: int, weight: W, symbol: object) -> W | None:
        if pc < 0 or pc > self.max_pc:
            raise ProgramCounterError(pc, self.pc_width)
        if pc >= len(self.program):
            # Walking off the end of the program is a successful match.
            return weight.copy()

        inst = self.program[pc]
        if isinstance(inst, Step):
            if symbol is _END_OF_INPUT:
                return None
            cur = inst.step.step(symbol)
            new = None if cur is None else weight.concat(cur)
            if new is not None:
                self._register(pc + 1, new)
            return None
        elif isinstance(inst, Jump):
            return self._add(inst.goto, weight, symbol)
        elif isinstance(inst, PreferTarget):
            return merge(
                self._add(inst.goto, weight, symbol),
                self._add(pc + 1, weight, symbol),
            )
        elif isinstance(inst, PreferNext):
            return merge(
                self._add(pc + 1, weight, symbol),
                self._add(inst.goto, weight, symbol),
            )
        else:  # pragma: no cover
            msg = f"Unknown instruction at PC {pc}: {inst!r}"
            raise TypeError(msg)

    def _register(self, pc: int, weight: W) -> None:
        if pc > self.max_pc:  # pragma: no cover
            raise ProgramCounterError(pc, self.pc_width)
        loc = self._index.get(pc)
        if loc is None:
            self._index[pc] = len(self._threads)
            self._threads.append((pc, weight))
        else:
            # Converged with a higher-priority thread on the same instruction.
            self._threads[loc][1].merge(weight)


def _with_end(symbols: Iterable[T]) -> Iterable[Any]:
    yield from symbols
    yield _END_OF_INPUT


def thompson_vm(
    program: Program[T],
    sequence: Iterable[T],
    weight: type[W] = Trivial,  # type: ignore[assignment]
) -> W | None:
    """One-shot evaluation; build a `Pattern` to reuse it across inputs."""
    return Pattern(program, weight).eval(sequence)
