"""Sandboxed evaluation of template fragments.

Fragments are parsed with :mod:`ast`, checked against an allow-list once at
compile time, and interpreted node by node at render time. Nothing is handed
to ``eval``/``exec``.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Mapping, MutableMapping
from typing import Any

from sitestack.domain.errors import TemplateSandboxError, TemplateSyntaxError

_DOLLAR_PREFIX = "_dollar_"
_STRING_PREFIX_CHARS = "rRbBfFuU"

_SAFE_DICT_METHODS = frozenset({"get", "items", "keys", "values"})
_DENIED_ATTRIBUTES = frozenset({
    "format",
    "format_map",
    "mro",
    "gi_frame",
    "gi_code",
    "cr_frame",
    "cr_code",
    "ag_frame",
    "ag_code",
    "f_globals",
    "f_locals",
    "f_builtins",
    "f_back",
    "tb_frame",
    "tb_next",
})

_BIN_OPS: dict[type[ast.operator], Any] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
_UNARY_OPS: dict[type[ast.unaryop], Any] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}
_CMP_OPS: dict[type[ast.cmpop], Any] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

_ALLOWED_NODES = (
    ast.Expression,
    ast.Constant,
    ast.Name,
    ast.Attribute,
    ast.Subscript,
    ast.Slice,
    ast.Call,
    ast.keyword,
    ast.BinOp,
    ast.UnaryOp,
    ast.BoolOp,
    ast.Compare,
    ast.IfExp,
    ast.List,
    ast.Tuple,
    ast.Dict,
    ast.Set,
    ast.JoinedStr,
    ast.FormattedValue,
    ast.expr_context,
    ast.operator,
    ast.boolop,
    ast.unaryop,
    ast.cmpop,
)


def translate_dollars(fragment: str) -> str:
    """Rewrite ``$name`` identifiers into parseable names, leaving string literals alone.

    Replacement fields of f-strings are code, so ``$`` names inside ``{...}``
    are rewritten there too.
    """
    out: list[str] = []
    _scan_code(fragment, 0, out, in_field=False)
    return "".join(out)


def _string_prefix(text: str, i: int) -> str:
    start = i
    while start > 0 and i - start < 2 and text[start - 1] in _STRING_PREFIX_CHARS:
        start -= 1
    if start > 0 and (text[start - 1].isalnum() or text[start - 1] == "_"):
        return ""
    return text[start:i]


def _scan_code(text: str, i: int, out: list[str], *, in_field: bool) -> int:
    """Copy code from ``i``; inside an f-string field, stop at its closing ``}``."""
    depth = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "'\"":
            i = _scan_string(text, i, out, formatted="f" in _string_prefix(text, i).lower())
            continue
        if in_field and depth == 0:
            if ch == "}":
                return i
            if ch == ":":
                out.append(ch)
                return _scan_format_spec(text, i + 1, out)
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        out.append(_DOLLAR_PREFIX if ch == "$" else ch)
        i += 1
    return i


def _scan_string(text: str, i: int, out: list[str], *, formatted: bool) -> int:
    quote = text[i : i + 3] if text[i : i + 3] in ('"""', "'''") else text[i]
    out.append(quote)
    i += len(quote)
    n = len(text)
    while i < n:
        if text[i] == "\\" and i + 1 < n:
            out.append(text[i : i + 2])
            i += 2
        elif text.startswith(quote, i):
            out.append(quote)
            return i + len(quote)
        elif formatted and text[i] == "{":
            i = _scan_field(text, i, out)
        else:
            out.append(text[i])
            i += 1
    return i


def _scan_field(text: str, i: int, out: list[str]) -> int:
    """Copy an f-string replacement field starting at its ``{``; ``{{`` is a literal brace."""
    if text.startswith("{{", i):
        out.append("{{")
        return i + 2
    out.append("{")
    i = _scan_code(text, i + 1, out, in_field=True)
    if i < len(text):
        out.append("}")
        i += 1
    return i


def _scan_format_spec(text: str, i: int, out: list[str]) -> int:
    n = len(text)
    while i < n and text[i] != "}":
        if text[i] == "{":
            i = _scan_field(text, i, out)
        else:
            out.append(text[i])
            i += 1
    return i


def scope_key(identifier: str) -> str:
    """Map a parsed identifier back to its context key (``_dollar_title`` -> ``$title``)."""
    if identifier.startswith(_DOLLAR_PREFIX):
        return "$" + identifier[len(_DOLLAR_PREFIX) :]
    return identifier


def check_expression(node: ast.AST, fragment: str) -> None:
    """Reject any syntax outside the template expression language."""
    for child in ast.walk(node):
        if not isinstance(child, _ALLOWED_NODES):
            raise TemplateSyntaxError(
                f"Unsupported syntax '{type(child).__name__}' in template expression",
                fragment=fragment,
            )
        if isinstance(child, ast.Name):
            if child.id.startswith("_") and not child.id.startswith(_DOLLAR_PREFIX):
                raise TemplateSyntaxError(f"Name '{child.id}' is not permitted", fragment=fragment)
        elif isinstance(child, ast.Attribute):
            if child.attr.startswith(_DOLLAR_PREFIX):
                continue
            if child.attr.startswith("_") or child.attr in _DENIED_ATTRIBUTES:
                raise TemplateSyntaxError(f"Attribute '{child.attr}' is not permitted", fragment=fragment)
        elif isinstance(child, ast.BinOp) and type(child.op) not in _BIN_OPS:
            raise TemplateSyntaxError("Unsupported binary operator", fragment=fragment)
        elif isinstance(child, ast.keyword) and child.arg is None:
            raise TemplateSyntaxError("Argument unpacking is not permitted", fragment=fragment)
        elif isinstance(child, ast.Dict) and any(key is None for key in child.keys):
            raise TemplateSyntaxError("Dict unpacking is not permitted", fragment=fragment)


def check_target(node: ast.AST, fragment: str) -> None:
    """Assignment and loop targets are plain names or tuples/lists of them."""
    if isinstance(node, ast.Name):
        if node.id.startswith("_") and not node.id.startswith(_DOLLAR_PREFIX):
            raise TemplateSyntaxError(f"Name '{node.id}' is not permitted", fragment=fragment)
        return
    if isinstance(node, (ast.Tuple, ast.List)):
        for element in node.elts:
            check_target(element, fragment)
        return
    raise TemplateSyntaxError("Only names can be assigned in templates", fragment=fragment)


def parse_expression(fragment: str) -> ast.expr:
    """Parse and validate one ``{{ expression }}`` body."""
    try:
        tree = ast.parse(translate_dollars(fragment).strip(), mode="eval")
    except SyntaxError as exc:
        raise TemplateSyntaxError(f"Invalid expression ({exc.msg})", fragment=fragment) from exc
    check_expression(tree, fragment)
    return tree.body


class ExpressionEvaluator:
    """Interprets validated expression trees against one render scope."""

    def __init__(self, scope: MutableMapping[str, Any]) -> None:
        self.scope = scope

    def evaluate(self, node: ast.AST) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise TemplateSandboxError(f"Unsupported expression element '{type(node).__name__}'")
        return method(node)

    def assign(self, target: ast.AST, value: Any) -> None:
        if isinstance(target, ast.Name):
            self.scope[scope_key(target.id)] = value
            return
        if isinstance(target, (ast.Tuple, ast.List)):
            values = list(value)
            if len(values) != len(target.elts):
                raise ValueError(
                    f"Cannot unpack {len(values)} values into {len(target.elts)} names"
                )
            for element, item in zip(target.elts, values):
                self.assign(element, item)
            return
        raise TemplateSandboxError("Only names can be assigned in templates")

    def execute(self, statement: ast.stmt) -> None:
        if isinstance(statement, ast.Expr):
            self.evaluate(statement.value)
        elif isinstance(statement, ast.Assign):
            value = self.evaluate(statement.value)
            for target in statement.targets:
                self.assign(target, value)
        elif isinstance(statement, ast.AugAssign):
            current = self.visit_Name(statement.target)
            self.assign(statement.target, _BIN_OPS[type(statement.op)](current, self.evaluate(statement.value)))
        else:
            raise TemplateSandboxError(f"Unsupported statement '{type(statement).__name__}'")

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> Any:
        return self.scope.get(scope_key(node.id))

    def visit_Attribute(self, node: ast.Attribute) -> Any:
        value = self.evaluate(node.value)
        attr = scope_key(node.attr)
        if value is None:
            raise TypeError(f"Cannot read attribute '{attr}' of None")
        if isinstance(value, Mapping):
            if attr in value:
                return value[attr]
            if isinstance(value, dict) and attr in _SAFE_DICT_METHODS:
                return getattr(value, attr)
            return None
        return getattr(value, attr, None)

    def visit_Subscript(self, node: ast.Subscript) -> Any:
        value = self.evaluate(node.value)
        if isinstance(node.slice, ast.Slice):
            return value[self.visit_Slice(node.slice)]
        return value[self.evaluate(node.slice)]

    def visit_Slice(self, node: ast.Slice) -> slice:
        lower = self.evaluate(node.lower) if node.lower is not None else None
        upper = self.evaluate(node.upper) if node.upper is not None else None
        step = self.evaluate(node.step) if node.step is not None else None
        return slice(lower, upper, step)

    def visit_Call(self, node: ast.Call) -> Any:
        func = self.evaluate(node.func)
        if not callable(func):
            raise TypeError(f"'{type(func).__name__}' object is not callable")
        owner = getattr(func, "__self__", None)
        if isinstance(owner, type) or (isinstance(func, type) and func not in _SAFE_TYPES):
            raise TemplateSandboxError(f"Calling '{getattr(func, '__name__', func)!s}' is not permitted")
        args = [self.evaluate(arg) for arg in node.args]
        kwargs = {kw.arg: self.evaluate(kw.value) for kw in node.keywords if kw.arg is not None}
        return func(*args, **kwargs)

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        return _BIN_OPS[type(node.op)](self.evaluate(node.left), self.evaluate(node.right))

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        return _UNARY_OPS[type(node.op)](self.evaluate(node.operand))

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        value: Any = None
        if isinstance(node.op, ast.And):
            for value_node in node.values:
                value = self.evaluate(value_node)
                if not value:
                    return value
            return value
        for value_node in node.values:
            value = self.evaluate(value_node)
            if value:
                return value
        return value

    def visit_Compare(self, node: ast.Compare) -> bool:
        left = self.evaluate(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            right = self.evaluate(comparator)
            if not _CMP_OPS[type(op)](left, right):
                return False
            left = right
        return True

    def visit_IfExp(self, node: ast.IfExp) -> Any:
        if self.evaluate(node.test):
            return self.evaluate(node.body)
        return self.evaluate(node.orelse)

    def visit_List(self, node: ast.List) -> list[Any]:
        return [self.evaluate(element) for element in node.elts]

    def visit_Tuple(self, node: ast.Tuple) -> tuple[Any, ...]:
        return tuple(self.evaluate(element) for element in node.elts)

    def visit_Set(self, node: ast.Set) -> set[Any]:
        return {self.evaluate(element) for element in node.elts}

    def visit_Dict(self, node: ast.Dict) -> dict[Any, Any]:
        return {
            self.evaluate(key): self.evaluate(value)
            for key, value in zip(node.keys, node.values)
            if key is not None
        }

    def visit_JoinedStr(self, node: ast.JoinedStr) -> str:
        return "".join(str(self.evaluate(value)) for value in node.values)

    def visit_FormattedValue(self, node: ast.FormattedValue) -> str:
        value = self.evaluate(node.value)
        if node.conversion == ord("r"):
            value = repr(value)
        elif node.conversion == ord("a"):
            value = ascii(value)
        elif node.conversion == ord("s"):
            value = str(value)
        format_spec = self.evaluate(node.format_spec) if node.format_spec is not None else ""
        return format(value, format_spec)


SAFE_BUILTINS: dict[str, Any] = {
    "len": len,
    "range": range,
    "enumerate": enumerate,
    "sorted": sorted,
    "reversed": reversed,
    "zip": zip,
    "min": min,
    "max": max,
    "sum": sum,
    "abs": abs,
    "round": round,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
}

_SAFE_TYPES = frozenset(value for value in SAFE_BUILTINS.values() if isinstance(value, type))
