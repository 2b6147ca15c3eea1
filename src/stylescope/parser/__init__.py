"""Style source parsing: tokenizer, recursive-descent parser and errors."""

from stylescope.parser.errors import InterpolationError, ParseError, StyleError, TokenError
from stylescope.parser.parser import Parser, parse_sheet
from stylescope.parser.tokenizer import Token, TokenKind, Tokenizer, tokenize

__all__ = [
    "StyleError",
    "TokenError",
    "ParseError",
    "InterpolationError",
    "Token",
    "TokenKind",
    "Tokenizer",
    "tokenize",
    "Parser",
    "parse_sheet",
]
