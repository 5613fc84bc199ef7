"""Explanations that two terms are equal, as proof trees and flat rewrite chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .language import Language
from .sexp import Sexp, pretty_print, sexp_to_string

TreeExplanation = list  # list[TreeTerm]
FlatExplanation = list  # list[FlatTerm]


def _wrap_rules(expr: Sexp, backward_rule: Optional[str], forward_rule: Optional[str]) -> Sexp:
    if backward_rule is not None:
        expr = ["Rewrite<=", str(backward_rule), expr]
    if forward_rule is not None:
        expr = ["Rewrite=>", str(forward_rule), expr]
    return expr


@dataclass(eq=False)
class TreeTerm:
    """A term whose children each carry a proof from their initial to final form.

    ``forward_rule`` rewrites the previous term's final form into this term;
    ``backward_rule`` rewrites this term back into the previous term's final
    form.  Terms may be shared between proofs; sharing is by identity.
    """

    node: Language
    child_proofs: list = field(default_factory=list)
    backward_rule: Optional[str] = None
    forward_rule: Optional[str] = None

    def __str__(self) -> str:
        return pretty_print(self.get_sexp(), 80, 1)

    def get_sexp(self) -> Sexp:
        """This term as an s-expression with nested explanations."""
        return self._get_sexp_with_bindings({})

    def _get_sexp_with_bindings(self, bindings: dict) -> Sexp:
        op = str(self.node)
        if self.node.is_leaf():
            expr: Sexp = op
        else:
            items: list = [op]
            for child in self.child_proofs:
                if not child:
                    raise ValueError("a child proof must hold at least one term")
                if len(child) == 1:
                    items.append(_bound_or_sexp(child[0], bindings))
                else:
                    items.append(
                        ["Explanation"] + [_bound_or_sexp(term, bindings) for term in child]
                    )
            expr = items
        return _wrap_rules(expr, self.backward_rule, self.forward_rule)

    def flatten_explanation(self) -> list:
        """The flat rewrite chain that this term stands for."""
        child_flat_proofs = [_flatten_proof(child) for child in self.child_proofs]
        representatives = [flat[0].remove_rewrites() for flat in child_flat_proofs]

        proof = [FlatTerm(self.node, [rep._clone() for rep in representatives])]
        for position, child_proof in enumerate(child_flat_proofs):
            # the first step keeps the rule annotation of the child proof
            proof[-1].children[position] = child_proof[0]._clone()
            for child in child_proof[1:]:
                children = [
                    child._clone() if other == position else rep._clone()
                    for other, rep in enumerate(representatives)
                ]
                proof.append(FlatTerm(self.node, children))
            representatives[position] = child_proof[-1].remove_rewrites()

        proof[0].backward_rule = self.backward_rule
        proof[0].forward_rule = self.forward_rule
        return proof


def _bound_or_sexp(term: TreeTerm, bindings: dict) -> Sexp:
    existing = bindings.get(id(term))
    if existing is not None:
        return existing
    return term._get_sexp_with_bindings(bindings)


def _flatten_proof(proof: list) -> list:
    flat: list = []
    for tree in proof:
        explanation = tree.flatten_explanation()
        first = explanation[0]
        if flat and not first.has_rewrite_forward() and not first.has_rewrite_backward():
            first._combine_rewrites(flat.pop())
        flat.extend(explanation)
    return flat


@dataclass(eq=False)
class FlatTerm:
    """One step of a flat explanation.

    After the first step, exactly one place in each term carries a
    ``forward_rule`` or ``backward_rule`` naming the rewrite from the
    previous step.  Equality compares operators and children only.
    """

    node: Language
    children: list = field(default_factory=list)
    backward_rule: Optional[str] = None
    forward_rule: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlatTerm):
            return NotImplemented
        if not self.node.matches(other.node):
            return False
        return all(left == right for left, right in zip(self.children, other.children))

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return sexp_to_string(self.get_sexp())

    def get_sexp(self) -> Sexp:
        """This step as an s-expression, rewrites marked where they happen."""
        op = str(self.node)
        if self.node.is_leaf():
            expr: Sexp = op
        else:
            expr = [op] + [child.get_sexp() for child in self.children]
        return _wrap_rules(expr, self.backward_rule, self.forward_rule)

    def has_rewrite_forward(self) -> bool:
        """Whether this term or any descendant has a forward rule."""
        return self.forward_rule is not None or any(
            child.has_rewrite_forward() for child in self.children
        )

    def has_rewrite_backward(self) -> bool:
        """Whether this term or any descendant has a backward rule."""
        return self.backward_rule is not None or any(
            child.has_rewrite_backward() for child in self.children
        )

    def remove_rewrites(self) -> "FlatTerm":
        """A copy of this term with every rule annotation dropped."""
        return FlatTerm(self.node, [child.remove_rewrites() for child in self.children])

    def _clone(self) -> "FlatTerm":
        return FlatTerm(
            self.node,
            [child._clone() for child in self.children],
            self.backward_rule,
            self.forward_rule,
        )

    def _combine_rewrites(self, other: "FlatTerm") -> None:
        if other.forward_rule is not None:
            if self.forward_rule is not None:
                raise ValueError("conflicting forward rules while combining rewrites")
            self.forward_rule = other.forward_rule
        if other.backward_rule is not None:
            if self.backward_rule is not None:
                raise ValueError("conflicting backward rules while combining rewrites")
            self.backward_rule = other.backward_rule
        for left, right in zip(self.children, other.children):
            left._combine_rewrites(right)


class Explanation:
    """An explanation that two terms are equivalent.

    Holds the tree form and builds the flat form on demand.
    """

    def __init__(self, explanation_trees: list):
        self.explanation_trees: list = list(explanation_trees)
        self._flat: Optional[list] = None

    def __str__(self) -> str:
        return pretty_print(self.get_sexp(), 100, 0)

    def make_flat_explanation(self) -> list:
        """The flat explanation, computed once and then cached."""
        if self._flat is None:
            self._flat = _flatten_proof(self.explanation_trees)
        return self._flat

    def get_sexp(self) -> Sexp:
        """The tree explanation as an s-expression."""
        return ["Explanation"] + [tree.get_sexp() for tree in self.explanation_trees]

    def get_sexp_with_let(self) -> Sexp:
        """The tree explanation with shared sub-proofs bound by ``let``."""
        shared: set = set()
        to_let_bind: list = []
        for term in self.explanation_trees:
            _find_to_let_bind(term, shared, to_let_bind)

        bindings: dict = {}
        generated: list = []
        for term in to_let_bind:
            if id(term) not in bindings:
                name = f"v_{len(generated)}"
                generated.append((name, term._get_sexp_with_bindings(bindings)))
                bindings[id(term)] = name

        result: Sexp = ["Explanation"] + [
            _bound_or_sexp(tree, bindings) for tree in self.explanation_trees
        ]
        for name, expr in reversed(generated):
            result = ["let", [name, expr], result]
        return result

    def get_string(self) -> str:
        """The tree explanation, pretty-printed."""
        return str(self)

    def get_string_with_let(self) -> str:
        """The ``let``-bound tree explanation, pretty-printed."""
        return pretty_print(self.get_sexp_with_let(), 100, 0)

    def get_flat_sexps(self) -> list:
        """Each step of the flat explanation as an s-expression."""
        return [term.get_sexp() for term in self.make_flat_explanation()]

    def get_flat_strings(self) -> list:
        """Each step of the flat explanation as a string."""
        return [str(term) for term in self.make_flat_explanation()]

    def get_flat_string(self) -> str:
        """The flat explanation, one step per line."""
        return "\n".join(self.get_flat_strings())


def _find_to_let_bind(term: TreeTerm, shared: set, to_let_bind: list) -> None:
    for proof in term.child_proofs:
        for child in proof:
            _find_to_let_bind(child, shared, to_let_bind)
    if term.child_proofs:
        if id(term) in shared:
            to_let_bind.append(term)
        else:
            shared.add(id(term))