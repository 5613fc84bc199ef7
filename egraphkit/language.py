"""E-node languages: the node interface, a symbolic language and merge helpers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")


class Language(ABC):
    """An e-node: an operator applied to a tuple of child ids.

    Concrete nodes expose ``children``, a tuple of integer ids.
    """

    children: tuple[int, ...]

    @abstractmethod
    def matches(self, other: "Language") -> bool:
        """Whether ``other`` has the same operator; children ids are ignored."""

    @abstractmethod
    def with_children(self, children: Sequence[int]) -> "Language":
        """Return a copy of this node with the given children."""

    def is_leaf(self) -> bool:
        """Whether this node has no children."""
        return not self.children

    def map_children(self, f: Callable[[int], int]) -> "Language":
        """Return a copy with every child id replaced by ``f(id)``."""
        return self.with_children(tuple(f(child) for child in self.children))

    @classmethod
    @abstractmethod
    def from_op(cls, op: str, children: Sequence[int]) -> "Language":
        """Build a node from an operator string and its children."""


class FromOpError(ValueError):
    """Raised when an operator and children do not form a valid e-node."""

    def __init__(self, op: str, children: Iterable[int]):
        self.op = op
        self.children = tuple(children)
        super().__init__(
            f'could not parse an e-node with operator "{op}" '
            f"and children {list(self.children)}"
        )


class SymbolLang(Language):
    """A simple language of 32-bit numbers and named operators."""

    def _key(self) -> tuple[Any, ...]:
        raise TypeError(f"{type(self).__name__} is not a concrete SymbolLang node")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SymbolLang):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SymbolLang):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SymbolLang):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SymbolLang):
            return NotImplemented
        return self._key() >= other._key()

    @classmethod
    def leaf(cls, op: str) -> "SymbolOp":
        """A childless operator node."""
        return SymbolOp(op, ())

    @classmethod
    def from_op(cls, op: str, children: Sequence[int]) -> "SymbolLang":
        """A number if ``op`` is a 32-bit integer, otherwise an operator node."""
        if _INTEGER.fullmatch(op):
            value = int(op)
            if I32_MIN <= value <= I32_MAX:
                return SymbolNum(value)
        return SymbolOp(op, tuple(children))


@dataclass(frozen=True)
class SymbolNum(SymbolLang):
    """A numeric leaf."""

    value: int

    def __post_init__(self) -> None:
        if not I32_MIN <= self.value <= I32_MAX:
            raise ValueError(f"{self.value} does not fit in 32 bits")

    @property
    def children(self) -> tuple[int, ...]:  # type: ignore[override]
        return ()

    def matches(self, other: Language) -> bool:
        return isinstance(other, SymbolNum) and other.value == self.value

    def with_children(self, children: Sequence[int]) -> "SymbolNum":
        if len(children):
            raise ValueError("a number node has no children")
        return self

    def _key(self) -> tuple[Any, ...]:
        return (0, self.value, "", ())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SymbolOp(SymbolLang):
    """A named operator with any number of children."""

    op: str
    children: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def matches(self, other: Language) -> bool:
        return (
            isinstance(other, SymbolOp)
            and other.op == self.op
            and len(other.children) == len(self.children)
        )

    def with_children(self, children: Sequence[int]) -> "SymbolOp":
        return SymbolOp(self.op, tuple(children))

    def _key(self) -> tuple[Any, ...]:
        return (1, 0, self.op, self.children)

    def __str__(self) -> str:
        return self.op


@dataclass(frozen=True)
class DidMerge:
    """Which inputs of a merge differ from its result."""

    a_merged: bool
    b_merged: bool

    def __or__(self, other: "DidMerge") -> "DidMerge":
        if not isinstance(other, DidMerge):
            return NotImplemented
        return DidMerge(self.a_merged or other.a_merged, self.b_merged or other.b_merged)


def merge_max(to: Any, other: Any) -> tuple[Any, DidMerge]:
    """Merge two totally ordered values by taking the maximum.

    Returns the merged value and which inputs it differs from.
    """
    if to < other:
        return other, DidMerge(True, False)
    if to == other:
        return to, DidMerge(False, False)
    return to, DidMerge(False, True)


def merge_min(to: Any, other: Any) -> tuple[Any, DidMerge]:
    """Merge two totally ordered values by taking the minimum.

    Returns the merged value and which inputs it differs from.
    """
    if to < other:
        return to, DidMerge(False, True)
    if to == other:
        return to, DidMerge(False, False)
    return other, DidMerge(True, False)


def ffn_inc(value: int) -> int:
    """The next level of an integer ffn lattice."""
    return value + 1


def ffn_merge(a: int, b: int) -> int:
    """Join two ffn levels."""
    return max(a, b)