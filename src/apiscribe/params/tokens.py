from __future__ import annotations

import ast
import io
import tokenize
from dataclasses import dataclass
from typing import Optional

from apiscribe.domain.errors import ClauseSyntaxError, Position

_KINDS = {
    tokenize.STRING: "string",
    tokenize.NAME: "name",
    tokenize.OP: "op",
    tokenize.NUMBER: "number",
}
_SKIPPED = {
    tokenize.NEWLINE,
    tokenize.NL,
    tokenize.INDENT,
    tokenize.DEDENT,
    tokenize.ENDMARKER,
    tokenize.COMMENT,
}


@dataclass(frozen=True)
class Token:
    kind: str  # string | name | op | number | other
    text: str
    start: Position
    end: Position

    def string_value(self) -> Optional[str]:
        """Decoded value of a plain string literal, None for anything else."""
        if self.kind != "string":
            return None
        try:
            value = ast.literal_eval(self.text)
        except (ValueError, SyntaxError):
            return None
        return value if isinstance(value, str) else None


def tokenize_clause(clause: str) -> list[Token]:
    """
    Tokens of a clause, layout ignored. The clause is tokenized inside a pair
    of parentheses so line breaks and indentation never produce
    NEWLINE/INDENT tokens; the wrapper is dropped and line 1 columns are
    shifted back onto the clause text.
    """
    out: list[Token] = []
    try:
        for tok in tokenize.generate_tokens(io.StringIO(f"({clause})").readline):
            if tok.type in _SKIPPED:
                continue
            if tok.type == tokenize.ERRORTOKEN and not tok.string.strip():
                continue
            start, end = _unwrap(tok.start), _unwrap(tok.end)
            if tok.type == tokenize.ERRORTOKEN:
                raise ClauseSyntaxError(
                    f"unexpected character: {tok.string!r}",
                    text=tok.string,
                    start=start,
                    end=end,
                    clause=clause,
                )
            out.append(Token(_KINDS.get(tok.type, "other"), tok.string, start, end))
    except (tokenize.TokenError, SyntaxError) as exc:
        # unterminated strings and unbalanced brackets
        msg = exc.args[0] if exc.args else str(exc)
        raise ClauseSyntaxError(f"untokenizable clause: {msg}", clause=clause) from exc

    if len(out) < 2 or out[0].text != "(" or out[-1].text != ")":
        raise ClauseSyntaxError("untokenizable clause: unbalanced parentheses", clause=clause)
    return out[1:-1]


def _unwrap(pos: Position) -> Position:
    line, col = pos
    return (line, col - 1) if line == 1 else pos


class TokenStream:
    """Cursor over the tokens of exactly one clause."""

    def __init__(self, tokens: list[Token], clause: str = ""):
        self._tokens = tokens
        self._pos = 0
        self.clause = clause

    @classmethod
    def from_text(cls, clause: str) -> "TokenStream":
        return cls(tokenize_clause(clause), clause=clause)

    def is_empty(self) -> bool:
        return self._pos >= len(self._tokens)

    def peek(self, kind: str, text: Optional[str] = None) -> bool:
        if self.is_empty():
            return False
        tok = self._tokens[self._pos]
        return tok.kind == kind and (text is None or tok.text == text)

    def peek_op(self, text: str) -> bool:
        return self.peek("op", text)

    def current(self) -> Optional[Token]:
        return None if self.is_empty() else self._tokens[self._pos]

    def next(self) -> Token:
        tok = self.current()
        if tok is None:
            raise self.error("unexpected end of clause")
        self._pos += 1
        return tok

    def expect_op(self, text: str, message: str) -> Token:
        if not self.peek_op(text):
            raise self.error(message)
        return self.next()

    def expect_name(self, message: str) -> Token:
        if not self.peek("name"):
            raise self.error(message)
        return self.next()

    def expect_string(self, message: str) -> str:
        tok = self.current()
        value = tok.string_value() if tok is not None else None
        if value is None:
            raise self.error(message)
        self._pos += 1
        return value

    def error(self, message: str, token: Optional[Token] = None) -> ClauseSyntaxError:
        tok = token if token is not None else self.current()
        if tok is None:
            end = self._tokens[-1].end if self._tokens else (1, 0)
            return ClauseSyntaxError(message, start=end, end=end, clause=self.clause)
        return ClauseSyntaxError(
            message, text=tok.text, start=tok.start, end=tok.end, clause=self.clause
        )
