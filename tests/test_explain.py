import pytest
from hypothesis import given, strategies as st

from egraphkit.explain import Explain, Justification
from egraphkit.language import SymbolOp


def _leaves(explain, *names):
    nodes = []
    for name in names:
        node = SymbolOp(name)
        node_id = len(explain)
        explain.add(node, node_id, node_id)
        nodes.append(node)
    return nodes


def test_justification_constructors():
    assert Justification.rule("r").rule_name == "r"
    assert Justification.congruence().is_congruence
    assert not Justification.rule("r").is_congruence


def test_add_records_memo():
    explain = Explain()
    a, b = _leaves(explain, "a", "b")
    assert explain.uncanon_memo[a] == 0
    assert explain.uncanon_memo[b] == 1
    assert len(explain) == 2


def test_add_with_wrong_id_raises():
    explain = Explain()
    with pytest.raises(ValueError):
        explain.add(SymbolOp("a"), 3, 3)


def test_congruence_union_of_mismatched_nodes_raises():
    explain = Explain()
    _leaves(explain, "a", "b")
    with pytest.raises(ValueError):
        explain.union(0, 1, Justification.congruence(), False)


def test_forward_rule_explanation():
    explain = Explain()
    a, b = _leaves(explain, "a", "b")
    explain.union(0, 1, Justification.rule("r"), False)
    expl = explain.explain_equivalence(0, 1)
    flat = expl.make_flat_explanation()
    assert len(flat) == 2
    assert flat[0].node == a
    assert flat[0].forward_rule is None and flat[0].backward_rule is None
    assert flat[1].node == b
    assert flat[1].forward_rule == "r"
    assert expl.get_flat_strings() == ["a", "(Rewrite=> r b)"]


def test_reverse_direction_uses_backward_rule():
    explain = Explain()
    a, b = _leaves(explain, "a", "b")
    explain.union(0, 1, Justification.rule("r"), False)
    flat = explain.explain_equivalence(1, 0).make_flat_explanation()
    assert flat[0].node == b
    assert flat[1].node == a
    assert flat[1].backward_rule == "r"
    assert flat[1].forward_rule is None


def test_congruence_explanation():
    explain = Explain()
    a, b = _leaves(explain, "a", "b")
    fa = SymbolOp("f", (0,))
    fb = SymbolOp("f", (1,))
    explain.add(fa, 2, 2)
    explain.add(fb, 3, 3)
    explain.union(0, 1, Justification.rule("r"), False)
    explain.union(2, 3, Justification.congruence(), False)
    expl = explain.explain_equivalence(2, 3)
    assert expl.get_flat_strings() == ["(f a)", "(f (Rewrite=> r b))"]
    flat = expl.make_flat_explanation()
    assert flat[1].forward_rule is None
    assert flat[1].children[0].forward_rule == "r"
    assert flat[1].children[0].node == b


def test_make_leader_reverses_edges():
    explain = Explain()
    a, b, c, d = _leaves(explain, "a", "b", "c", "d")
    explain.union(0, 1, Justification.rule("r1"), False)
    explain.union(2, 3, Justification.rule("r2"), False)
    explain.union(0, 2, Justification.rule("r3"), False)
    flat = explain.explain_equivalence(1, 3).make_flat_explanation()
    assert [term.node for term in flat] == [b, a, c, d]
    assert flat[1].backward_rule == "r1"
    assert flat[2].forward_rule == "r3"
    assert flat[3].forward_rule == "r2"


def test_explain_existance_through_rewrite():
    explain = Explain()
    a, b = _leaves(explain, "a", "b")
    explain.union(0, 1, Justification.rule("r"), True)
    flat = explain.explain_existance(1).make_flat_explanation()
    assert [term.node for term in flat] == [a, b]
    assert flat[1].forward_rule == "r"


def test_explain_existance_through_parent():
    explain = Explain()
    a = SymbolOp("a")
    fa = SymbolOp("f", (0,))
    explain.add(a, 0, 1)
    explain.add(fa, 1, 1)
    expl = explain.explain_existance(0)
    assert len(expl.explanation_trees) == 2
    assert expl.explanation_trees[0].node == fa
    flat = expl.make_flat_explanation()
    assert len(flat) == 1
    assert flat[0].node == fa
    assert not flat[0].has_rewrite_forward()


def test_explaining_node_with_itself_is_trivial():
    explain = Explain()
    (a,) = _leaves(explain, "a")
    flat = explain.explain_equivalence(0, 0).make_flat_explanation()
    assert len(flat) == 1
    assert flat[0].node == a


@given(st.integers(min_value=2, max_value=12), st.data())
def test_chain_explanations(length, data):
    explain = Explain()
    names = [f"x{i}" for i in range(length)]
    nodes = _leaves(explain, *names)
    for i in range(length - 1):
        explain.union(i, i + 1, Justification.rule(f"r{i}"), False)
    left = data.draw(st.integers(min_value=0, max_value=length - 1))
    right = data.draw(st.integers(min_value=0, max_value=length - 1))
    flat = explain.explain_equivalence(left, right).make_flat_explanation()
    assert len(flat) == abs(left - right) + 1
    assert flat[0].node == nodes[left]
    assert flat[-1].node == nodes[right]
    for term in flat[1:]:
        assert term.has_rewrite_forward() != term.has_rewrite_backward()