__all__ = [
    "AnySymbol",
    "FnStep",
    "InclusiveRange",
    "KeySet",
    "Literal",
    "SymbolStep",
    "Trivial",
    "Weight",
]

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from typing_extensions import Self

T = TypeVar("T")
W = TypeVar("W", bound="Weight")


class Weight(ABC):
    """Information extracted from a match.

    A weight behaves like an element of a semiring: `success` is "one",
    `concat` is "multiply" and `merge` is "add". "Zero" is never a weight
    value, it is represented by None. Hence `concat` and `merge` are only
    ever called on non-zero weights.

    `concat` must return a new value; the engine may keep both operands
    alive on other paths. `merge` mutates `self` in place.
    """

    @classmethod
    @abstractmethod
    def success(cls) -> Self:
        """The weight every thread starts with."""
        raise NotImplementedError  # pragma: no cover

    @abstractmethod
    def concat(self, other: Self) -> Self | None:
        """Combine the weight accumulated so far (`self`) with the weight of
        the step that just succeeded (`other`). Both succeeded on their own
        but may be incompatible together, in which case return None."""
        raise NotImplementedError  # pragma: no cover

    @abstractmethod
    def merge(self, other: Self) -> None:
        """Fold the result of a lower-priority alternative (`other`) into
        the result of a higher-priority one (`self`) for the same input.
        Must not fail; it may discard `other` entirely."""
        raise NotImplementedError  # pragma: no cover

    def copy(self) -> Self:
        return copy.copy(self)


@dataclass(frozen=True)
class Trivial(Weight):
    """Weight for plain recognition: did the input match or not."""

    @classmethod
    def success(cls) -> "Trivial":
        return cls()

    def concat(self, other: "Trivial") -> "Trivial":
        return self

    def merge(self, other: "Trivial") -> None:
        pass

    def copy(self) -> "Trivial":
        return self


class KeySet(Weight):
    """Set of candidate keys packed into the low `WIDTH` bits of an int.

    Concatenation intersects, merging unions.
    """

    __slots__ = ("bits",)
    WIDTH: ClassVar[int] = 128

    def __init__(self, bits: int) -> None:
        self.bits = bits & ((1 << self.WIDTH) - 1)

    @classmethod
    def success(cls) -> Self:
        return cls((1 << cls.WIDTH) - 1)

    @classmethod
    def single(cls, key: int) -> Self:
        return cls(1 << key)

    def concat(self, other: Self) -> Self | None:
        bits = self.bits & other.bits
        return type(self)(bits) if bits else None

    def merge(self, other: Self) -> None:
        self.bits |= other.bits

    def keys(self) -> list[int]:
        return [k for k in range(self.WIDTH) if self.bits >> k & 1]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeySet):
            return NotImplemented
        return self.WIDTH == other.WIDTH and self.bits == other.bits

    def __hash__(self) -> int:
        return hash((self.WIDTH, self.bits))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.bits:#x})"


class SymbolStep(ABC, Generic[T, W]):
    """Decides whether a single input symbol is acceptable."""

    @abstractmethod
    def step(self, symbol: T) -> W | None:
        raise NotImplementedError  # pragma: no cover


@dataclass
class InclusiveRange(SymbolStep[T, W]):
    """Accepts `lo <= symbol <= hi` with the success weight."""

    lo: T
    hi: T
    weight: type[Any] = Trivial

    def step(self, symbol: T) -> W | None:
        if self.lo <= symbol <= self.hi:  # type: ignore[operator]
            return self.weight.success()
        return None


@dataclass
class Literal(SymbolStep[T, W]):
    value: T
    weight: type[Any] = Trivial

    def step(self, symbol: T) -> W | None:
        return self.weight.success() if symbol == self.value else None


@dataclass
class AnySymbol(SymbolStep[T, W]):
    weight: type[Any] = Trivial

    def step(self, symbol: T) -> W | None:
        return self.weight.success()


@dataclass
class FnStep(SymbolStep[T, W]):
    """Lets any `symbol -> weight | None` function act as a step."""

    fn: Callable[[T], W | None]

    def step(self, symbol: T) -> W | None:
        return self.fn(symbol)
