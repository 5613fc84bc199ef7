import pytest
from hypothesis import given, strategies as st

from egraphkit.extract import AstDepth, AstSize, CostFunction
from egraphkit.language import SymbolLang
from egraphkit.recexpr import RecExpr


def parse(text):
    return RecExpr.parse(text, SymbolLang)


class SillyCostFn(CostFunction):
    def cost(self, enode, costs):
        op_cost = {"foo": 100.0, "bar": 0.7}.get(str(enode), 1.0)
        total = op_cost
        for child in enode.children:
            total = total + costs(child)
        return total


class ConstantCost(CostFunction):
    def cost(self, enode, costs):
        return 1


def test_ast_size_documented_example():
    assert AstSize().cost_rec(parse("(do_it foo bar baz)")) == 4


def test_ast_depth_documented_example():
    assert AstDepth().cost_rec(parse("(do_it foo bar baz)")) == 2


def test_custom_cost_documented_example():
    assert SillyCostFn().cost_rec(parse("(do_it foo bar baz)")) == pytest.approx(102.7)


def test_leaf_costs_one():
    expr = parse("x")
    assert AstSize().cost_rec(expr) == 1
    assert AstDepth().cost_rec(expr) == 1


def test_number_leaf_costs_one():
    expr = parse("42")
    assert AstSize().cost_rec(expr) == 1
    assert AstDepth().cost_rec(expr) == 1


def test_cost_ignores_children_when_function_does():
    assert ConstantCost().cost_rec(parse("(f (g a) b)")) == 1


def test_cost_uses_root_as_last_node():
    expr = RecExpr()
    a = expr.add(SymbolLang.leaf("a"))
    expr.add(SymbolLang.from_op("f", [a, a]))
    assert AstSize().cost_rec(expr) == 3
    assert AstDepth().cost_rec(expr) == 2


def test_cost_receives_child_costs():
    a = SymbolLang.leaf("a")
    node = SymbolLang.from_op("f", [0, 1])
    child_costs = {0: 5, 1: 7}
    assert AstSize().cost(node, child_costs.__getitem__) == 1 + 5 + 7
    assert AstDepth().cost(node, child_costs.__getitem__) == 1 + 7
    assert AstSize().cost(a, child_costs.__getitem__) == 1


def test_empty_expression_raises():
    with pytest.raises(ValueError):
        AstSize().cost_rec(RecExpr())


def test_cost_function_is_abstract():
    with pytest.raises(TypeError):
        CostFunction()


_leaf = st.sampled_from(["a", "b", "c", "1", "2"])
_term = st.recursive(
    _leaf,
    lambda inner: st.tuples(st.sampled_from(["f", "g", "+"]), st.lists(inner, min_size=1, max_size=3)),
    max_leaves=12,
)


def _render(term):
    if isinstance(term, str):
        return term
    op, args = term
    return "(" + " ".join([op] + [_render(arg) for arg in args]) + ")"


@given(_term)
def test_size_counts_every_parsed_node(term):
    expr = parse(_render(term))
    assert AstSize().cost_rec(expr) == len(expr)


@given(_term)
def test_depth_never_exceeds_size(term):
    expr = parse(_render(term))
    depth = AstDepth().cost_rec(expr)
    assert 1 <= depth <= AstSize().cost_rec(expr)


@given(_term)
def test_wrapping_adds_one_to_both(term):
    inner = parse(_render(term))
    outer = parse("(h " + _render(term) + ")")
    assert AstSize().cost_rec(outer) == AstSize().cost_rec(inner) + 1
    assert AstDepth().cost_rec(outer) == AstDepth().cost_rec(inner) + 1