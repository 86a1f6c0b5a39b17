"""Instruction program produced by the template compiler."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Characters that cannot appear raw inside a single-quoted string literal.
_SPECIAL_CHARS_RE = re.compile("['\n\r\u2028\u2029\\\\]")
_SPECIAL_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def escape_literal(text: str) -> str:
    """Escape ``text`` for embedding between single quotes in the program listing."""
    return _SPECIAL_CHARS_RE.sub(lambda match: _SPECIAL_ESCAPES[match.group(0)], text)


@dataclass(frozen=True)
class LiteralAppend:
    text: str

    def listing(self) -> str:
        return f"__append('{escape_literal(self.text)}')"


@dataclass(frozen=True)
class RawStatement:
    code: str

    def listing(self) -> str:
        return self.code


@dataclass(frozen=True)
class ExpressionAppend:
    code: str

    def listing(self) -> str:
        return f"__append({self.code})"


Instruction = LiteralAppend | RawStatement | ExpressionAppend
