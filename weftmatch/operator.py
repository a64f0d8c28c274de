__all__ = [
    "Alt",
    "Dot",
    "Op",
    "Plus",
    "QMark",
    "Quantifier",
    "Repeat",
    "Star",
    "compile_pattern",
]

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from itertools import zip_longest
from typing import Any, Generic, TypeAlias, TypeVar

from weftmatch.thompson import Instruction, Jump, PreferNext, PreferTarget, Step
from weftmatch.weight import AnySymbol, Literal, SymbolStep, Trivial, Weight

T = TypeVar("T")


class ProgramCounter:
    __slots__ = "_val", "weight"

    def __init__(self, weight: type[Weight] = Trivial) -> None:
        self._val = 0
        self.weight = weight

    @property
    def val(self) -> int:  # Use property to avoid accidental assigns to val
        return self._val

    def inc(self) -> None:
        self._val += 1


class Op(ABC, Generic[T]):
    @abstractmethod
    def __eq__(self, other: object) -> bool:
        raise NotImplementedError

    @abstractmethod
    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        raise NotImplementedError

    @property
    @abstractmethod
    def nullable(self) -> bool:
        """Whether this op can match without consuming a symbol."""
        raise NotImplementedError


OpElem: TypeAlias = T | SymbolStep[T, Any] | Op[T]


def op_elems_eq(es1: Iterable[OpElem[T]], es2: Iterable[OpElem[T]]) -> bool:
    return all(a == b for a, b in zip_longest(es1, es2, fillvalue=None))


def op_elems_repr(es: Iterable[OpElem[T]]) -> str:
    return ", ".join(repr(e) for e in es)


def elems_nullable(es: Iterable[OpElem[T]]) -> bool:
    return all(isinstance(e, Op) and e.nullable for e in es)


def check_loop_body(op: "Quantifier") -> None:
    # A loop around a body that consumes nothing never reaches a Step.
    if elems_nullable(op.elems):
        msg = (
            f"{type(op).__name__} body must consume at least one symbol; "
            f"found: {op_elems_repr(op.elems)}"
        )
        raise ValueError(msg)


def compile_elements(
    es: Iterable[OpElem[T]], pc: ProgramCounter
) -> Iterator[Instruction[T]]:
    for e in es:
        if isinstance(e, Op):
            yield from e.compile(pc)
            continue
        if e is None:
            msg = "None is not a valid pattern element"
            raise TypeError(msg)
        pc.inc()  # The only location where we increment pc for Step
        if isinstance(e, SymbolStep) or callable(e):
            yield Step(e)
        else:
            yield Step(Literal(e, pc.weight))


class Quantifier(Op[T], ABC):
    __slots__ = "elems", "greedy"

    def __init__(self, e: OpElem, *es: OpElem, greedy: bool = True) -> None:
        self.elems: list[OpElem] = [e, *es]
        self.greedy: bool = greedy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return op_elems_eq(self.elems, other.elems) and self.greedy == other.greedy

    def __repr__(self) -> str:
        return f"{type(self).__name__}({op_elems_repr(self.elems)}, greedy={self.greedy})"


class Plus(Quantifier[T]):
    def __init__(self, e: OpElem, *es: OpElem, greedy: bool = True) -> None:
        super().__init__(e, *es, greedy=greedy)
        check_loop_body(self)

    @property
    def nullable(self) -> bool:
        return elems_nullable(self.elems)

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        start = pc.val
        yield from compile_elements(self.elems, pc)
        pc.inc()  # increment for loop
        yield PreferTarget(start) if self.greedy else PreferNext(start)


class Star(Quantifier[T]):
    def __init__(self, e: OpElem, *es: OpElem, greedy: bool = True) -> None:
        super().__init__(e, *es, greedy=greedy)
        check_loop_body(self)

    @property
    def nullable(self) -> bool:
        return True

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        start = pc.val
        pc.inc()  # increment for skip
        skip: PreferNext[T] | PreferTarget[T] = (
            PreferNext(pc.val) if self.greedy else PreferTarget(pc.val)
        )
        yield skip
        yield from compile_elements(self.elems, pc)
        pc.inc()  # increment for jump
        skip.goto = pc.val
        yield Jump(start)


class QMark(Quantifier[T]):
    @property
    def nullable(self) -> bool:
        return True

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        pc.inc()  # increment for skip
        skip: PreferNext[T] | PreferTarget[T] = (
            PreferNext(pc.val) if self.greedy else PreferTarget(pc.val)
        )
        yield skip
        yield from compile_elements(self.elems, pc)
        skip.goto = pc.val


class Alt(Op[T]):
    """Left alternative first; the right one is tried at lower priority."""

    __slots__ = "left", "right"

    def __init__(self, left: list[OpElem[T]], right: list[OpElem[T]]) -> None:
        self.left = left
        self.right = right

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alt):
            return False
        return op_elems_eq(self.left, other.left) and op_elems_eq(
            self.right, other.right
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}([{op_elems_repr(self.left)}], "
            f"[{op_elems_repr(self.right)}])"
        )

    @property
    def nullable(self) -> bool:
        return elems_nullable(self.left) or elems_nullable(self.right)

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        pc.inc()  # increment for split
        split: PreferNext[T] = PreferNext(pc.val)
        yield split
        yield from compile_elements(self.left, pc)
        pc.inc()  # increment for jump
        jump: Jump[T] = Jump(pc.val)
        yield jump
        split.goto = pc.val
        yield from compile_elements(self.right, pc)
        jump.goto = pc.val


class Dot(Op[T]):
    def __eq__(self, other: object) -> bool:
        return isinstance(other, Dot)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @property
    def nullable(self) -> bool:
        return False

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        pc.inc()
        yield Step(AnySymbol(pc.weight))


class Repeat(Op[T]):
    __slots__ = "count", "elems"

    def __init__(self, e: OpElem, *es: OpElem, count: int = 1) -> None:
        if count < 0:
            msg = f"{Repeat.__name__} count must be non-negative; found: {count}"
            raise ValueError(msg)
        self.count: int = count
        self.elems: list[OpElem] = [e, *es]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Repeat):
            return False
        return op_elems_eq(self.elems, other.elems) and self.count == other.count

    def __repr__(self) -> str:
        return f"{type(self).__name__}({op_elems_repr(self.elems)}, count={self.count})"

    @property
    def nullable(self) -> bool:
        return self.count == 0 or elems_nullable(self.elems)

    def compile(self, pc: ProgramCounter) -> Iterator[Instruction[T]]:
        for _ in range(self.count):
            yield from compile_elements(self.elems, pc)


def compile_pattern(
    seq: Iterable[OpElem[T]], weight: type[Weight] = Trivial
) -> list[Instruction[T]]:
    """Assemble combinators into a program. There is no match instruction;
    running past the last instruction is a match."""
    return list(compile_elements(seq, ProgramCounter(weight)))
