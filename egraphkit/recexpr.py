"""Recursive expressions stored as a flat list of e-nodes."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Sequence, Type, Union

from .language import FromOpError, Language
from .sexp import Sexp, SexpError, parse_sexp, pretty_print, sexp_to_string

log = logging.getLogger(__name__)


class RecExprParseError(ValueError):
    """Raised when text cannot be read as a :class:`RecExpr`.

    ``kind`` is one of ``"empty"``, ``"head_list"``, ``"bad_op"`` or
    ``"bad_sexp"``.
    """

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(message)


class RecExpr:
    """An expression whose nodes refer to earlier nodes by index.

    The last node is the root.  Children of every node must point to
    nodes that come before it.
    """

    def __init__(self, nodes: Iterable[Language] = ()):
        self.nodes: list[Language] = list(nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Language]:
        return iter(self.nodes)

    def __getitem__(self, node_id: int) -> Language:
        return self.nodes[node_id]

    def __setitem__(self, node_id: int, node: Language) -> None:
        self.nodes[node_id] = node

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecExpr):
            return NotImplemented
        return self.nodes == other.nodes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RecExpr({self.nodes!r})"

    def __str__(self) -> str:
        if not self.nodes:
            return "()"
        return sexp_to_string(self.to_sexp())

    def add(self, node: Language) -> int:
        """Append ``node`` and return its id; its children must already exist."""
        if any(child >= len(self.nodes) for child in node.children):
            raise ValueError(f"node {node!r} has children not in this expr: {self!r}")
        self.nodes.append(node)
        return len(self.nodes) - 1

    def is_dag(self) -> bool:
        """Whether every child points to an earlier node."""
        return all(
            child < position
            for position, node in enumerate(self.nodes)
            for child in node.children
        )

    def compact(self) -> "RecExpr":
        """Return an equivalent expression with duplicate nodes shared."""
        new_ids: dict[int, int] = {}
        unique: dict[Language, int] = {}
        for position, node in enumerate(self.nodes):
            node = node.map_children(new_ids.__getitem__)
            new_ids[position] = unique.setdefault(node, len(unique))
        return RecExpr(unique)

    def extract(self, new_root: int) -> "RecExpr":
        """The sub-expression rooted at ``new_root``."""
        return build_recexpr(self[new_root], self.__getitem__)

    def to_sexp(self) -> Sexp:
        """Convert the expression, rooted at its last node, to an s-expression."""
        if not self.is_dag():
            log.warning("Tried to print a non-dag: %r", self.nodes)
        return self._to_sexp_rec(len(self.nodes) - 1)

    def _to_sexp_rec(self, position: int) -> Sexp:
        node = self.nodes[position]
        op = str(node)
        if node.is_leaf():
            return op
        items: list[Sexp] = [op]
        for child in node.children:
            if child < position:
                items.append(self._to_sexp_rec(child))
            else:
                items.append(f"<<<< CYCLE to {position} = {node!r} >>>>")
        return items

    def pretty(self, width: int) -> str:
        """Pretty-print with lines broken to fit ``width``."""
        return pretty_print(self.to_sexp(), width, 1)

    @classmethod
    def parse(cls, text: str, language: Type[Language]) -> "RecExpr":
        """Read an expression of ``language`` from s-expression text."""
        try:
            sexp = parse_sexp(text.strip())
        except SexpError as error:
            raise RecExprParseError("bad_sexp", str(error)) from error
        expr = cls()
        _parse_into(sexp, expr, language)
        return expr


def _parse_into(sexp: Sexp, expr: RecExpr, language: Type[Language]) -> int:
    if isinstance(sexp, str):
        return expr.add(_from_op(language, sexp, []))
    if not sexp:
        raise RecExprParseError("empty", "found empty s-expression")
    head, *rest = sexp
    if isinstance(head, list):
        raise RecExprParseError(
            "head_list", f"found a list in the head position: {sexp_to_string(head)}"
        )
    children = [_parse_into(item, expr, language) for item in rest]
    return expr.add(_from_op(language, head, children))


def _from_op(language: Type[Language], op: str, children: list[int]) -> Language:
    try:
        return language.from_op(op, children)
    except FromOpError as error:
        raise RecExprParseError("bad_op", str(error)) from error


def join_recexprs(
    node: Language,
    child_recexpr: Callable[[int], Union[RecExpr, Sequence[Language]]],
) -> RecExpr:
    """Make a new expression by replacing each child of ``node`` with an expression."""
    expr = RecExpr()

    def build(source: Sequence[Language]) -> int:
        last = source[-1]
        new_node = last.map_children(lambda child: build(source[: child + 1]))
        return expr.add(new_node)

    root = node.map_children(lambda child: build(list(child_recexpr(child))))
    expr.add(root)
    return expr


def build_recexpr(node: Language, get_node: Callable[[int], Language]) -> RecExpr:
    """Build an expression rooted at ``node``, choosing a node for each id.

    ``get_node`` must return the same node for the same id on every call.
    Identical sub-terms are shared in the result.
    """
    unique: dict[Language, int] = {}
    ids: dict[int, int] = {}
    todo = list(node.children)

    while todo:
        node_id = todo[-1]
        if node_id in ids:
            todo.pop()
            continue
        current = get_node(node_id)
        missing = [child for child in current.children if child not in ids]
        if missing:
            todo.extend(missing)
            continue
        current = current.map_children(ids.__getitem__)
        ids[node_id] = unique.setdefault(current, len(unique))
        todo.pop()

    nodes = list(unique)
    nodes.append(node.map_children(ids.__getitem__))
    return RecExpr(nodes)