"""Guard expressions over context variables.

A guard such as ``amount >= 10`` or ``ambientLight < 0.5 and not manual``
is parsed with :mod:`ast` and interpreted by walking the tree. Only
comparisons, boolean and arithmetic operators, literals and context
variable names are accepted; attribute access, calls, subscripts and
everything else are rejected when the expression is compiled.
"""

import ast
import operator
from collections.abc import Callable, Collection
from typing import Any

from .exceptions import ResolutionError

_COMPARE: dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}

_BINARY: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY: dict[type, Callable[[Any], Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


class GuardExpression:
    """A compiled guard expression, callable as ``guard(context, event)``."""

    def __init__(self, source: str, known_terms: Collection[str]):
        self.source = source
        try:
            tree = ast.parse(source.strip(), mode="eval")
        except SyntaxError as e:
            raise ResolutionError(source, "guard", f"invalid expression ({e.msg})") from e
        self.terms = self._check(tree.body, set(known_terms))
        self._body = tree.body

    def _check(self, node: ast.AST, known: set[str]) -> list[str]:
        """Validate the tree and return the context terms it references."""
        terms: list[str] = []
        for child in ast.walk(node):
            if isinstance(child, ast.Name):
                if child.id not in known:
                    raise ResolutionError(
                        self.source,
                        "guard",
                        f"term '{child.id}' is not a context variable",
                    )
                if child.id not in terms:
                    terms.append(child.id)
            elif isinstance(child, ast.Constant):
                if not isinstance(child.value, (int, float, str, bool, type(None))):
                    raise ResolutionError(self.source, "guard", "unsupported literal")
            elif not isinstance(
                child,
                (
                    ast.BoolOp,
                    ast.And,
                    ast.Or,
                    ast.Compare,
                    ast.BinOp,
                    ast.UnaryOp,
                    ast.Load,
                    ast.Tuple,
                    ast.List,
                    *_COMPARE,
                    *_BINARY,
                    *_UNARY,
                ),
            ):
                raise ResolutionError(
                    self.source,
                    "guard",
                    f"'{type(child).__name__}' is not allowed in guard expressions",
                )
        return terms

    def evaluate(self, values: Any) -> Any:
        return self._eval(self._body, values)

    def _eval(self, node: ast.AST, values: Any) -> Any:
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.Name):
            return values[node.id]
        if isinstance(node, (ast.Tuple, ast.List)):
            return [self._eval(elt, values) for elt in node.elts]
        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self._eval(value, values)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self._eval(value, values)
                if result:
                    return result
            return result
        if isinstance(node, ast.UnaryOp):
            return _UNARY[type(node.op)](self._eval(node.operand, values))
        if isinstance(node, ast.BinOp):
            return _BINARY[type(node.op)](
                self._eval(node.left, values), self._eval(node.right, values)
            )
        if isinstance(node, ast.Compare):
            left = self._eval(node.left, values)
            for op, comparator in zip(node.ops, node.comparators, strict=True):
                right = self._eval(comparator, values)
                if not _COMPARE[type(op)](left, right):
                    return False
                left = right
            return True
        raise TypeError(f"Unexpected node in guard expression: {type(node).__name__}")

    def __call__(self, context: Any, event: Any = None) -> bool:  # noqa: ARG002
        return bool(self.evaluate(context))

    def __repr__(self) -> str:
        return f"GuardExpression({self.source!r})"
