# egraphkit

Building blocks for working with e-graphs and equality saturation. The package
is pure Python and has no runtime dependencies.

## Modules

- `egraphkit.sexp` reads and writes s-expressions. `parse_sexp(text)` returns
  either an atom (`str`) or a nested `list`, and raises `SexpError` on malformed
  input. `sexp_to_string(sexp)` prints an s-expression on one line.
  `pretty_print(sexp, width, indent)` breaks any list that is wider than `width`.
- `egraphkit.language` defines e-nodes. `Language` is the abstract base, with
  `matches`, `with_children`, `is_leaf`, `map_children` and `from_op`.
  `SymbolLang` is a ready-made language. `SymbolLang.from_op` returns a
  `SymbolNum` when the operator is a 32-bit integer and a `SymbolOp` otherwise.
  `SymbolLang.leaf(op)` returns a childless `SymbolOp`. The module also holds
  `FromOpError` and `DidMerge`, which can be combined with `|`. `merge_max` and
  `merge_min` return a `(merged_value, DidMerge)` pair. `ffn_inc` and
  `ffn_merge` work on integer ffn levels.
- `egraphkit.recexpr` holds `RecExpr`, a flat list of nodes in which every
  child id refers to an earlier node and the last node is the root. It offers
  `add`, `is_dag`, `compact`, `extract`, `to_sexp`, `pretty` and
  `RecExpr.parse(text, language)`. Parse failures raise `RecExprParseError`,
  whose `kind` is `"empty"`, `"head_list"`, `"bad_op"` or `"bad_sexp"`.
  `join_recexprs` and `build_recexpr` assemble new expressions from a node.
- `egraphkit.explanation` holds the explanation types. `TreeTerm` is the proof
  tree form and `FlatTerm` is one step of a flat rewrite chain. `Explanation`
  gives the tree form with `get_sexp` / `get_string`, the tree form with
  `let`-bound shared sub-proofs with `get_sexp_with_let` /
  `get_string_with_let`, and the flat form with `get_flat_sexps` /
  `get_flat_strings` / `get_flat_string`.
- `egraphkit.explain` holds `Explain`, a proof forest over e-nodes. It records
  `add` and `union` calls with a `Justification`, which is either
  `Justification.rule(name)` or `Justification.congruence()`. It answers
  `explain_equivalence(left, right)` and `explain_existance(node)` with an
  `Explanation`.
- `egraphkit.extract` holds `CostFunction`, the base class for cost functions,
  and `cost_rec(expr)`, which computes the cost of a whole `RecExpr`. It also
  provides the cost functions `AstSize` and `AstDepth`.

## Installation

```
pip install egraphkit
```

## Example

```python
from egraphkit.language import SymbolLang
from egraphkit.recexpr import RecExpr
from egraphkit.extract import AstSize, AstDepth

expr = RecExpr.parse("(* (+ 2 2) (+ x y))", SymbolLang)
print(expr)            # (* (+ 2 2) (+ x y))
print(expr.pretty(10))
# (*
#   (+ 2 2)
#   (+ x y))

e = RecExpr.parse("(do_it foo bar baz)", SymbolLang)
assert AstSize().cost_rec(e) == 4
assert AstDepth().cost_rec(e) == 2
```

### Explaining an equivalence

```python
from egraphkit.explain import Explain, Justification
from egraphkit.language import SymbolLang

explain = Explain()
a = explain.add(SymbolLang.leaf("a"), 0, 0)
b = explain.add(SymbolLang.leaf("b"), 1, 1)
explain.union(a, b, Justification.rule("a-is-b"), False)

explanation = explain.explain_equivalence(a, b)
print(explanation.get_flat_string())
# a
# (Rewrite=> a-is-b b)
```

## What is not included

The package provides the parts listed above, but it does not include an e-graph
itself. There is no hash-consed e-class store and no rebuilding. It does not do
pattern search, rewrite rules or a saturation runner. It also has no extractor
that walks an e-graph: `CostFunction`, `AstSize` and `AstDepth` score
individual nodes and whole `RecExpr`s, and the code that calls `Explain.add` and
`Explain.union` as terms are merged is left to you. There is no command-line
tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```