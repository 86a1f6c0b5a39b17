"""Template language: compiler, instruction program and sandboxed evaluator."""

from .compiler import CompiledTemplate, compile_template, scan
from .instructions import ExpressionAppend, LiteralAppend, RawStatement, escape_literal
from .sandbox import SAFE_BUILTINS

__all__ = [
    "CompiledTemplate",
    "compile_template",
    "scan",
    "ExpressionAppend",
    "LiteralAppend",
    "RawStatement",
    "escape_literal",
    "SAFE_BUILTINS",
]
