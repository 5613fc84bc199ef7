"""E-graph building blocks: s-expressions, languages, recursive expressions, explanations and cost functions."""

__version__ = "0.8.1"

__all__ = ["explain", "explanation", "extract", "language", "recexpr", "sexp"]