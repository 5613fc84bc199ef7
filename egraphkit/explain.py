"""The proof forest behind explanations of e-graph equalities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .explanation import Explanation, TreeTerm
from .language import Language


@dataclass(frozen=True)
class Justification:
    """Why two e-nodes were unioned: a named rule, or congruence when ``rule_name`` is None."""

    rule_name: Optional[str] = None

    @classmethod
    def rule(cls, name: str) -> "Justification":
        """A union caused by the rule or reason called ``name``."""
        return cls(str(name))

    @classmethod
    def congruence(cls) -> "Justification":
        """A union caused by congruence of children."""
        return cls(None)

    @property
    def is_congruence(self) -> bool:
        return self.rule_name is None


@dataclass
class _ExplainNode:
    node: Language
    next: int
    current: int
    justification: Justification
    # The node that caused this one to exist: its parent, an adjacent node
    # produced by a rewrite, or itself when it was added directly.
    existance_node: int
    is_rewrite_forward: bool


class Explain:
    """A forest of proof edges over every e-node ever added.

    Each node points towards the root of its tree; each edge records the
    justification of the union that created it.
    """

    def __init__(self) -> None:
        self._nodes: list[_ExplainNode] = []
        self.uncanon_memo: dict[Language, int] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, node: Language, set_id: int, existance_node: int) -> int:
        """Record a new e-node under id ``set_id``, which must be the next free id."""
        if set_id != len(self._nodes):
            raise ValueError(f"expected id {len(self._nodes)} for a new node, got {set_id}")
        self.uncanon_memo[node] = set_id
        self._nodes.append(
            _ExplainNode(
                node=node,
                next=set_id,
                current=set_id,
                justification=Justification.congruence(),
                existance_node=existance_node,
                is_rewrite_forward=False,
            )
        )
        return set_id

    def set_existance_reason(self, node: int, existance_node: int) -> None:
        """Record that ``node`` exists because of ``existance_node``."""
        self._nodes[node].existance_node = existance_node

    def _make_leader(self, node: int) -> None:
        """Reverse the edges on the path to the root so ``node`` becomes the root."""
        path = [node]
        while self._nodes[path[-1]].next != path[-1]:
            path.append(self._nodes[path[-1]].next)
        for child, parent in reversed(list(zip(path, path[1:]))):
            source = self._nodes[child]
            target = self._nodes[parent]
            target.justification = source.justification
            target.is_rewrite_forward = not source.is_rewrite_forward
            target.next = child

    def union(
        self, node1: int, node2: int, justification: Justification, new_rhs: bool
    ) -> None:
        """Add a proof edge from ``node1`` to ``node2``."""
        if justification.is_congruence and not self._nodes[node1].node.matches(
            self._nodes[node2].node
        ):
            raise ValueError("congruence union of e-nodes with different operators")
        if new_rhs:
            self.set_existance_reason(node2, node1)
        self._make_leader(node1)
        entry = self._nodes[node1]
        entry.next = node2
        entry.justification = justification
        entry.is_rewrite_forward = True

    def explain_equivalence(self, left: int, right: int) -> Explanation:
        """An explanation that the terms of ``left`` and ``right`` are equal."""
        return Explanation(self._explain_enodes(left, right, {}, {}))

    def explain_existance(self, left: int) -> Explanation:
        """An explanation of how the term of ``left`` came to exist."""
        enode_cache: dict[int, TreeTerm] = {}
        rest = self._node_to_explanation(left, enode_cache)
        return Explanation(self._explain_enode_existance(left, rest, {}, enode_cache))

    def _node_to_explanation(self, node_id: int, cache: dict[int, TreeTerm]) -> TreeTerm:
        existing = cache.get(node_id)
        if existing is not None:
            return existing
        node = self._nodes[node_id].node
        children = [[self._node_to_explanation(child, cache)] for child in node.children]
        term = TreeTerm(node, children)
        cache[node_id] = term
        return term

    def _common_ancestor(self, left: int, right: int) -> int:
        seen_left: set[int] = set()
        seen_right: set[int] = set()
        while True:
            seen_left.add(left)
            if left in seen_right:
                return left
            seen_right.add(right)
            if right in seen_left:
                return right
            next_left = self._nodes[left].next
            next_right = self._nodes[right].next
            if next_left == left and next_right == right:
                raise ValueError("nodes are not in the same proof tree")
            left, right = next_left, next_right

    def _get_nodes(self, node: int, ancestor: int) -> list[_ExplainNode]:
        nodes: list[_ExplainNode] = []
        while node != ancestor:
            entry = self._nodes[node]
            nodes.append(entry)
            if entry.next != ancestor and entry.next == node:
                raise ValueError("reached a root before the common ancestor")
            node = entry.next
        return nodes

    @staticmethod
    def _shallow_copy(term: TreeTerm) -> TreeTerm:
        return TreeTerm(
            term.node,
            [list(proof) for proof in term.child_proofs],
            term.backward_rule,
            term.forward_rule,
        )

    def _explain_enode_existance(
        self,
        node: int,
        rest_of_proof: TreeTerm,
        cache: dict,
        enode_cache: dict[int, TreeTerm],
    ) -> list:
        graphnode = self._nodes[node]
        existance = graphnode.existance_node
        existance_node = self._nodes[existance]

        if existance == node:
            return [self._node_to_explanation(node, enode_cache), rest_of_proof]

        if graphnode.next == existance or existance_node.next == node:
            if graphnode.next == existance:
                direction = not graphnode.is_rewrite_forward
                justification = graphnode.justification
            else:
                direction = existance_node.is_rewrite_forward
                justification = existance_node.justification
            adjacent = self._explain_adjacent(
                existance, node, direction, justification, cache, enode_cache
            )
            return self._explain_enode_existance(existance, adjacent, cache, enode_cache)

        new_rest = self._shallow_copy(self._node_to_explanation(existance, enode_cache))
        try:
            index_of_child = list(existance_node.node.children).index(node)
        except ValueError:
            raise ValueError(
                f"node {node} is not a child of the node {existance} it exists because of"
            ) from None
        new_rest.child_proofs[index_of_child].append(rest_of_proof)
        return self._explain_enode_existance(existance, new_rest, cache, enode_cache)

    def _explain_enodes(
        self,
        left: int,
        right: int,
        cache: dict,
        enode_cache: dict[int, TreeTerm],
    ) -> list:
        proof = [self._node_to_explanation(left, enode_cache)]
        ancestor = self._common_ancestor(left, right)
        left_nodes = self._get_nodes(left, ancestor)
        right_nodes = self._get_nodes(right, ancestor)

        steps = [(entry, False) for entry in left_nodes]
        steps += [(entry, True) for entry in reversed(right_nodes)]
        for entry, reversed_step in steps:
            direction = entry.is_rewrite_forward
            current, nxt = entry.current, entry.next
            if reversed_step:
                direction = not direction
                current, nxt = nxt, current
            proof.append(
                self._explain_adjacent(
                    current, nxt, direction, entry.justification, cache, enode_cache
                )
            )
        return proof

    def _explain_adjacent(
        self,
        current: int,
        nxt: int,
        rule_direction: bool,
        justification: Justification,
        cache: dict,
        enode_cache: dict[int, TreeTerm],
    ) -> TreeTerm:
        fingerprint = (current, nxt)
        answer = cache.get(fingerprint)
        if answer is not None:
            return answer

        if not justification.is_congruence:
            term = self._shallow_copy(self._node_to_explanation(nxt, enode_cache))
            if rule_direction:
                term.forward_rule = justification.rule_name
            else:
                term.backward_rule = justification.rule_name
        else:
            current_node = self._nodes[current].node
            next_node = self._nodes[nxt].node
            if not current_node.matches(next_node):
                raise ValueError("congruence edge between e-nodes with different operators")
            subproofs = [
                self._explain_enodes(left_child, right_child, cache, enode_cache)
                for left_child, right_child in zip(current_node.children, next_node.children)
            ]
            term = TreeTerm(current_node, subproofs)

        cache[fingerprint] = term
        return term