"""Cost functions for choosing the cheapest term among equivalent ones."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from .language import Language
from .recexpr import RecExpr


class CostFunction(ABC):
    """Assigns a cost to an e-node given the costs of its children.

    Costs only need to be comparable.  For extraction to behave well the
    function should be monotonic: a node should cost more than any of its
    children.
    """

    @abstractmethod
    def cost(self, enode: Language, costs: Callable[[int], Any]) -> Any:
        """The cost of ``enode``, where ``costs(child_id)`` gives a child's cost."""

    def cost_rec(self, expr: RecExpr) -> Any:
        """The total cost of ``expr``, computed bottom-up to its root."""
        if not len(expr):
            raise ValueError("cannot compute the cost of an empty expression")
        computed: dict[int, Any] = {}
        for position, node in enumerate(expr):
            computed[position] = self.cost(node, computed.__getitem__)
        return computed[len(expr) - 1]


class AstSize(CostFunction):
    """Counts the total number of nodes in the term."""

    def cost(self, enode: Language, costs: Callable[[int], Any]) -> int:
        return 1 + sum(costs(child) for child in enode.children)


class AstDepth(CostFunction):
    """Counts the maximum depth of the term."""

    def cost(self, enode: Language, costs: Callable[[int], Any]) -> int:
        return 1 + max((costs(child) for child in enode.children), default=0)