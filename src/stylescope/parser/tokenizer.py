"""Tokenizer for style source text.

Turns source text with ``${name}`` placeholders into a lazy stream of
located tokens. Whitespace and comments are skipped; whether whitespace
preceded a token is recorded on the token so the parser can decide where a
space is a descendant combinator.

References:
    - [css syntax](https://www.w3.org/TR/css-syntax-3/#tokenization)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from stylescope.model.location import Location
from stylescope.parser.errors import TokenError

__all__ = ["Token", "TokenKind", "Tokenizer", "tokenize"]

_WHITESPACE = " \t\n\r\f"
_QUOTES = ("\"", "'")


class TokenKind(Enum):
    IDENT = "ident"
    STRING = "string"
    NUMBER = "number"
    URL = "url"
    PUNCT = "punct"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class Token:
    """A located slice of the source.

    ``text`` is the exact source slice. ``value`` is the content without
    delimiters for strings and urls, the name for placeholders, and the same
    as ``text`` otherwise.
    """

    kind: TokenKind
    text: str
    value: str
    location: Location
    spaced: bool = False

    def is_punct(self, chars: str) -> bool:
        """True if this is a punctuation token whose text is one of *chars*."""
        return self.kind is TokenKind.PUNCT and self.text in chars

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r})"


class Check:
    @staticmethod
    def letter(current: str | None) -> bool:
        return current is not None and current.isalpha()

    @staticmethod
    def digit(current: str | None) -> bool:
        return current is not None and current.isascii() and current.isdigit()

    @staticmethod
    def non_ascii(current: str | None) -> bool:
        return current is not None and ord(current) >= 0x80

    @staticmethod
    def ident_start(current: str | None) -> bool:
        return current is not None and (
            Check.letter(current) or Check.non_ascii(current) or current == "_"
        )

    @staticmethod
    def ident(current: str | None) -> bool:
        return Check.ident_start(current) or Check.digit(current) or current == "-"

    @staticmethod
    def escape(current: str | None, next: str | None) -> bool:
        return current == "\\" and next is not None and next not in "\n\r\f"

    @staticmethod
    def starts_with_ident(first: str | None, second: str | None, third: str | None) -> bool:
        if first == "-":
            return Check.ident_start(second) or second == "-" or Check.escape(second, third)
        if first == "\\":
            return Check.escape(first, second)
        return Check.ident_start(first)

    @staticmethod
    def starts_with_number(first: str | None, second: str | None, third: str | None) -> bool:
        if first is not None and first in "+-":
            return Check.digit(second) or (second == "." and Check.digit(third))
        if first == ".":
            return Check.digit(second)
        return Check.digit(first)

    @staticmethod
    def placeholder_name(current: str | None) -> bool:
        return current is not None and current.isascii() and (current.isalnum() or current == "_")


class Tokenizer:
    """Lazy, single-pass iterator over the tokens of *source*."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.index = 0
        self.line = 1
        self.line_start = 0
        self._tokens = self._generate()

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        return next(self._tokens)

    # --- cursor ---------------------------------------------------------------

    def peek(self, amount: int = 0) -> str | None:
        """The code point *amount* positions ahead of the cursor."""
        index = self.index + amount
        if index < len(self.source):
            return self.source[index]
        return None

    def advance(self, amount: int = 1) -> None:
        for _ in range(amount):
            if self.index >= len(self.source):
                return
            if self.source[self.index] == "\n":
                self.line += 1
                self.line_start = self.index + 1
            self.index += 1

    def location(self, start: int, line: int, column: int) -> Location:
        return Location(start=start, end=self.index, line=line, column=column)

    # --- scanning -------------------------------------------------------------

    def _generate(self) -> Iterator[Token]:
        while True:
            spaced = self._skip_trivia()
            if self.peek() is None:
                return
            start, line, column = self.index, self.line, self.index - self.line_start + 1
            kind, value = self._consume_token(start, line, column)
            yield Token(
                kind=kind,
                text=self.source[start : self.index],
                value=value,
                location=self.location(start, line, column),
                spaced=spaced,
            )

    def _skip_trivia(self) -> bool:
        """Skip whitespace and comments, returning True if whitespace was seen."""
        spaced = False
        while True:
            current = self.peek()
            if current is not None and current in _WHITESPACE:
                spaced = True
                self.advance()
            elif current == "/" and self.peek(1) == "*":
                self._consume_comment()
            else:
                return spaced

    def _consume_comment(self) -> None:
        start, line, column = self.index, self.line, self.index - self.line_start + 1
        end = self.source.find("*/", self.index + 2)
        if end == -1:
            self.advance(len(self.source) - self.index)
            raise TokenError("unterminated comment", self.location(start, line, column))
        self.advance(end + 2 - self.index)

    def _consume_token(self, start: int, line: int, column: int) -> tuple[TokenKind, str]:
        current, second, third = self.peek(), self.peek(1), self.peek(2)
        if current in _QUOTES:
            return TokenKind.STRING, self._consume_string(start, line, column)
        if current == "$" and second == "{":
            return TokenKind.PLACEHOLDER, self._consume_placeholder(start, line, column)
        if Check.starts_with_number(current, second, third):
            return TokenKind.NUMBER, self._consume_numeric()
        if Check.starts_with_ident(current, second, third):
            return self._consume_ident_like(start, line, column)
        self.advance()
        return TokenKind.PUNCT, current or ""

    def _consume_string(self, start: int, line: int, column: int) -> str:
        ending = self.peek()
        self.advance()
        content_start = self.index
        while True:
            current = self.peek()
            if current is None or current == "\n":
                raise TokenError("unterminated string", self.location(start, line, column))
            if current == "\\":
                # An escaped newline continues the string on the next line.
                self.advance(2)
            elif current == ending:
                value = self.source[content_start : self.index]
                self.advance()
                return value
            else:
                self.advance()

    def _consume_placeholder(self, start: int, line: int, column: int) -> str:
        self.advance(2)
        name_start = self.index
        while Check.placeholder_name(self.peek()):
            self.advance()
        name = self.source[name_start : self.index]
        if not name or self.peek() != "}":
            raise TokenError("malformed placeholder", self.location(start, line, column))
        self.advance()
        return name

    def _consume_ident(self) -> str:
        start = self.index
        while True:
            current = self.peek()
            if Check.ident(current):
                self.advance()
            elif Check.escape(current, self.peek(1)):
                self.advance(2)
            else:
                return self.source[start : self.index]

    def _consume_number(self) -> None:
        if self.peek() in ("+", "-"):
            self.advance()
        while Check.digit(self.peek()):
            self.advance()
        if self.peek() == "." and Check.digit(self.peek(1)):
            self.advance()
            while Check.digit(self.peek()):
                self.advance()
        exponent = self.peek()
        if exponent is not None and exponent in "eE":
            sign = self.peek(1)
            if Check.digit(sign):
                self.advance()
            elif sign is not None and sign in "+-" and Check.digit(self.peek(2)):
                self.advance(2)
            else:
                return
            while Check.digit(self.peek()):
                self.advance()

    def _consume_numeric(self) -> str:
        """Consume a number with an optional unit or percent sign."""
        start = self.index
        self._consume_number()
        if Check.starts_with_ident(self.peek(), self.peek(1), self.peek(2)):
            self._consume_ident()
        elif self.peek() == "%":
            self.advance()
        return self.source[start : self.index]

    def _consume_ident_like(self, start: int, line: int, column: int) -> tuple[TokenKind, str]:
        ident = self._consume_ident()
        if ident.lower() != "url" or self.peek() != "(":
            return TokenKind.IDENT, ident

        lookahead = 1
        while (current := self.peek(lookahead)) is not None and current in _WHITESPACE:
            lookahead += 1
        if self.peek(lookahead) in _QUOTES:
            # url("...") is a plain function call: ident, paren, string, paren.
            return TokenKind.IDENT, ident

        self.advance()
        content_start = self.index
        end = self.source.find(")", self.index)
        if end == -1:
            self.advance(len(self.source) - self.index)
            raise TokenError("unterminated url", self.location(start, line, column))
        value = self.source[content_start:end].strip()
        self.advance(end + 1 - self.index)
        return TokenKind.URL, value


def tokenize(source: str) -> list[Token]:
    """Tokenize the entire source at once."""
    return list(Tokenizer(source))
