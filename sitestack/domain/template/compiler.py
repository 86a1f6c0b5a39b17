"""Template compiler: turns a delimited template string into a renderer.

Delimiters:
    {{ expression }}  appends the value of ``expression`` (``None`` appends nothing)
    << statement >>   control flow or side effect, appends nothing itself

Statements:
    << for item in items >> ... << else >> ... << end >>
    << if cond >> ... << elif other >> ... << else >> ... << end >>
    << name = expression >>
    << $entitle("Docs", $) >>

``<< end >>``, ``<< endfor >>``, ``<< endif >>`` and an empty ``<< >>`` all
close the innermost block. The ``else`` of a ``for`` runs when the loop had no
iterations.
"""

from __future__ import annotations

import ast
import re
from collections import ChainMap
from dataclasses import dataclass, field
from typing import Any

from sitestack.domain.errors import TemplateSyntaxError
from sitestack.domain.template.instructions import (
    ExpressionAppend,
    Instruction,
    LiteralAppend,
    RawStatement,
)
from sitestack.domain.template.sandbox import (
    SAFE_BUILTINS,
    ExpressionEvaluator,
    check_expression,
    check_target,
    parse_expression,
    translate_dollars,
)

_EXPRESSION_RE = r"\{\{\s*([\s\S]+?)\s*\}\}"
_STATEMENT_RE = r"<<\s*([\s\S]+?)\s*>>"
_DELIMITERS_RE = re.compile(f"{_EXPRESSION_RE}|{_STATEMENT_RE}")

_BLOCK_END_RE = re.compile(r"^(?:end|endfor|endif)?$")
_KEYWORD_RE = re.compile(r"^(for|if|elif|else)\b\s*(.*?)\s*:?$", re.DOTALL)


def scan(source: str) -> list[Instruction]:
    """Split ``source`` into an ordered instruction list in a single pass."""
    instructions: list[Instruction] = []
    index = 0

    for match in _DELIMITERS_RE.finditer(source):
        if match.start() > index:
            instructions.append(LiteralAppend(source[index : match.start()]))
        expression, statement = match.group(1), match.group(2)
        if expression is not None:
            instructions.append(ExpressionAppend(expression.strip()))
        else:
            instructions.append(RawStatement(statement.strip()))
        index = match.end()

    if index < len(source):
        instructions.append(LiteralAppend(source[index:]))

    return instructions


# Executable tree, built once from the instruction list.


@dataclass
class _Text:
    value: str


@dataclass
class _Output:
    expr: ast.expr


@dataclass
class _Exec:
    statement: ast.stmt


@dataclass
class _For:
    target: ast.expr
    iterable: ast.expr
    body: list[Any] = field(default_factory=list)
    orelse: list[Any] = field(default_factory=list)


@dataclass
class _If:
    branches: list[tuple[ast.expr, list[Any]]] = field(default_factory=list)
    orelse: list[Any] = field(default_factory=list)


@dataclass
class _Frame:
    node: _For | _If
    body: list[Any]
    in_else: bool = False


def _parse_header(keyword: str, rest: str, code: str) -> ast.stmt:
    text = translate_dollars(f"{keyword} {rest}" if rest else keyword)
    try:
        tree = ast.parse(f"{text}:\n    pass")
    except SyntaxError as exc:
        raise TemplateSyntaxError(f"Invalid '{keyword}' statement ({exc.msg})", fragment=code) from exc
    return tree.body[0]


def _parse_simple(code: str) -> ast.stmt:
    try:
        tree = ast.parse(translate_dollars(code))
    except SyntaxError as exc:
        raise TemplateSyntaxError(f"Invalid statement ({exc.msg})", fragment=code) from exc

    if len(tree.body) != 1:
        raise TemplateSyntaxError("Expected exactly one statement", fragment=code)

    statement = tree.body[0]
    if isinstance(statement, ast.Expr):
        check_expression(statement.value, code)
    elif isinstance(statement, ast.Assign):
        for target in statement.targets:
            check_target(target, code)
        check_expression(statement.value, code)
    elif isinstance(statement, ast.AugAssign):
        if not isinstance(statement.target, ast.Name):
            raise TemplateSyntaxError("Only names can be assigned in templates", fragment=code)
        check_target(statement.target, code)
        check_expression(ast.BinOp(left=ast.Constant(0), op=statement.op, right=statement.value), code)
    else:
        raise TemplateSyntaxError(
            f"Unsupported statement '{type(statement).__name__}'", fragment=code
        )
    return statement


def _build_tree(instructions: list[Instruction]) -> list[Any]:
    root: list[Any] = []
    frames: list[_Frame] = []

    def current() -> list[Any]:
        return frames[-1].body if frames else root

    for instruction in instructions:
        if isinstance(instruction, LiteralAppend):
            current().append(_Text(instruction.text))
            continue
        if isinstance(instruction, ExpressionAppend):
            current().append(_Output(parse_expression(instruction.code)))
            continue

        code = instruction.code
        if _BLOCK_END_RE.match(code):
            if not frames:
                raise TemplateSyntaxError("Block end without an open block", fragment=code)
            frames.pop()
            continue

        keyword_match = _KEYWORD_RE.match(code)
        if keyword_match is None:
            current().append(_Exec(_parse_simple(code)))
            continue

        keyword, rest = keyword_match.group(1), keyword_match.group(2)
        if keyword == "for":
            header = _parse_header(keyword, rest, code)
            assert isinstance(header, ast.For)
            check_target(header.target, code)
            check_expression(header.iter, code)
            loop = _For(target=header.target, iterable=header.iter)
            current().append(loop)
            frames.append(_Frame(loop, loop.body))
        elif keyword == "if":
            header = _parse_header(keyword, rest, code)
            assert isinstance(header, ast.If)
            check_expression(header.test, code)
            branch = _If(branches=[(header.test, [])])
            current().append(branch)
            frames.append(_Frame(branch, branch.branches[0][1]))
        elif keyword == "elif":
            frame = frames[-1] if frames else None
            if frame is None or not isinstance(frame.node, _If) or frame.in_else:
                raise TemplateSyntaxError("'elif' outside of an 'if' block", fragment=code)
            header = _parse_header("if", rest, code)
            assert isinstance(header, ast.If)
            check_expression(header.test, code)
            body: list[Any] = []
            frame.node.branches.append((header.test, body))
            frame.body = body
        else:
            frame = frames[-1] if frames else None
            if frame is None or frame.in_else or rest:
                raise TemplateSyntaxError("'else' outside of an 'if' or 'for' block", fragment=code)
            frame.in_else = True
            frame.body = frame.node.orelse

    if frames:
        raise TemplateSyntaxError("Unclosed block at end of template")

    return root


class CompiledTemplate:
    """Executable renderer: ``template(context) -> str``.

    The compile-time ``context`` is a base scope; per-call context keys win
    over it. The per-call context itself is never written to by the template's
    own assignments, only by helpers that receive it explicitly.
    """

    def __init__(self, instructions: list[Instruction], context: dict[str, Any]) -> None:
        self.instructions = tuple(instructions)
        self.context = context
        self._tree = _build_tree(instructions)

    @property
    def source(self) -> str:
        """Readable listing of the instruction program."""
        return "\n".join(instruction.listing() for instruction in self.instructions)

    def __call__(self, context: dict[str, Any] | None = None) -> str:
        # Reads see helper writes to the context live; assignments stay local.
        scope = ChainMap({}, context if context is not None else {}, self.context)
        out: list[str] = []
        self._execute(self._tree, ExpressionEvaluator(scope), out)
        return "".join(out)

    def _execute(self, nodes: list[Any], evaluator: ExpressionEvaluator, out: list[str]) -> None:
        for node in nodes:
            if isinstance(node, _Text):
                out.append(node.value)
            elif isinstance(node, _Output):
                value = evaluator.evaluate(node.expr)
                if value is not None:
                    out.append(str(value))
            elif isinstance(node, _Exec):
                evaluator.execute(node.statement)
            elif isinstance(node, _For):
                looped = False
                for item in evaluator.evaluate(node.iterable):
                    looped = True
                    evaluator.assign(node.target, item)
                    self._execute(node.body, evaluator, out)
                if not looped:
                    self._execute(node.orelse, evaluator, out)
            elif isinstance(node, _If):
                for test, body in node.branches:
                    if evaluator.evaluate(test):
                        self._execute(body, evaluator, out)
                        break
                else:
                    self._execute(node.orelse, evaluator, out)


def compile_template(source: str, context: dict[str, Any] | None = None) -> CompiledTemplate:
    """Compile ``source`` into a renderer.

    Args:
        source: Template text.
        context: Base scope fixed at compile time (helpers, imports). Merged
            over the safe builtins.

    Returns:
        CompiledTemplate callable.

    Raises:
        TemplateSyntaxError: If a fragment is malformed, uses syntax outside
            the template language, or blocks are unbalanced.
    """
    base = {**SAFE_BUILTINS, **(context or {})}
    return CompiledTemplate(scan(source), base)
