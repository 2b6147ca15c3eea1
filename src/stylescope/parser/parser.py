"""Hand-written recursive-descent parser for style sources.

Grammar (informal)::

    sheet        := item* EOF
    item         := at_rule | style_rule | declaration | ";"
    at_rule      := "@" IDENT condition "{" item* "}"
    style_rule   := selector ("," selector)* "{" item* "}"
    declaration  := key ":" value (";" | before "}")

Whether an item is a rule or a declaration is decided by looking ahead for
a ``{`` before the next ``;`` or ``}``; ``name: value`` followed by a rule
without a ``;`` in between is split into both. Malformed declarations are kept as
:class:`DanglingDeclaration` and parsing resumes at the next boundary; every
other grammar violation raises :class:`ParseError`.
"""

from __future__ import annotations

import logging

from stylescope.model.ast import (
    AtRuleKind,
    Conditional,
    DanglingDeclaration,
    Declaration,
    ScopeContent,
    Selector,
    Sheet,
    StyleRule,
)
from stylescope.model.fragment import (
    Combinator,
    Fragment,
    Literal,
    NestingMarker,
    Placeholder,
    SelectorFragment,
)
from stylescope.model.location import Location
from stylescope.parser.errors import ParseError
from stylescope.parser.tokenizer import Token, TokenKind, Tokenizer

__all__ = ["Parser", "parse_sheet"]

logger = logging.getLogger(__name__)

_COMBINATORS = ">+~"
_CLOSERS = {"(": ")", "[": "]"}


def _span(first: Token, last: Token) -> Location:
    return Location(
        start=first.location.start,
        end=last.location.end,
        line=first.location.line,
        column=first.location.column,
    )


def _join(tokens: list[Token]) -> str:
    """Source text of *tokens* with runs of whitespace collapsed to one space."""
    return "".join((" " if i and t.spaced else "") + t.text for i, t in enumerate(tokens))


def _fragments(tokens: list[Token]) -> tuple[Fragment, ...]:
    """Turn value tokens into literal text runs split around placeholders."""
    pieces: list[Fragment] = []
    text = ""
    for i, token in enumerate(tokens):
        sep = " " if i and token.spaced else ""
        if token.kind is TokenKind.PLACEHOLDER:
            text += sep
            if text:
                pieces.append(Literal(text))
                text = ""
            pieces.append(Placeholder(token.value, token.location))
        else:
            text += sep + token.text
    if text:
        pieces.append(Literal(text))
    return tuple(pieces)


class Parser:
    """Parse one style source into a :class:`Sheet`.

    Tokens are pulled lazily from the tokenizer, so a :class:`TokenError`
    surfaces at the point the parser reaches the bad input.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._tokens = Tokenizer(source)
        self._buffer: list[Token] = []
        self._exhausted = False

    # --- token stream ---------------------------------------------------------

    def peek(self, amount: int = 0) -> Token | None:
        while len(self._buffer) <= amount and not self._exhausted:
            try:
                self._buffer.append(next(self._tokens))
            except StopIteration:
                self._exhausted = True
        if amount < len(self._buffer):
            return self._buffer[amount]
        return None

    def next(self) -> Token | None:
        token = self.peek()
        if token is not None:
            self._buffer.pop(0)
        return token

    def reconsume(self, tokens: list[Token]) -> None:
        self._buffer[0:0] = tokens

    def _eof_location(self) -> Location:
        end = len(self.source)
        line = self.source.count("\n", 0, end) + 1
        column = end - (self.source.rfind("\n", 0, end) + 1) + 1
        return Location(start=end, end=end, line=line, column=column)

    # --- entry point ----------------------------------------------------------

    def parse(self) -> Sheet:
        return Sheet(self._parse_contents(opening=None))

    def _parse_contents(self, opening: Token | None) -> tuple[ScopeContent, ...]:
        """Parse a sheet body; each run of bare declarations becomes a selector-less rule."""
        contents: list[ScopeContent] = []
        run: list[Declaration] = []
        for item in self._parse_items(opening):
            if isinstance(item, Declaration):
                run.append(item)
                continue
            if run:
                contents.append(self._bare_rule(run))
                run = []
            contents.append(item)
        if run:
            contents.append(self._bare_rule(run))
        return tuple(contents)

    @staticmethod
    def _bare_rule(declarations: list[Declaration]) -> StyleRule:
        return StyleRule(selectors=(), declarations=tuple(declarations), location=declarations[0].location)

    def _parse_items(self, opening: Token | None) -> list[Declaration | ScopeContent]:
        """Parse items up to the ``}`` matching *opening* (or EOF at top level).

        Declarations and nested rules are returned interleaved, in source order.
        """
        items: list[Declaration | ScopeContent] = []
        while True:
            token = self.peek()
            if token is None:
                if opening is not None:
                    raise ParseError("unterminated block", opening.location)
                break
            if token.is_punct("}"):
                if opening is None:
                    raise ParseError("unexpected '}'", token.location)
                self.next()
                break
            if token.is_punct(";"):
                self.next()
            elif token.is_punct("@"):
                items.append(self._parse_at_rule())
            elif not self._starts_rule():
                items.append(self._parse_declaration())
            elif self._runs_into_rule():
                items.append(self._parse_unterminated_declaration())
            else:
                items.append(self._parse_style_rule())
        return items

    def _starts_rule(self) -> bool:
        """Look ahead for a ``{`` before the next ``;`` or ``}``."""
        depth = 0
        index = 0
        while (token := self.peek(index)) is not None:
            if token.is_punct("(["):
                depth += 1
            elif token.is_punct(")]"):
                depth = max(depth - 1, 0)
            elif depth == 0:
                if token.is_punct("{"):
                    return True
                if token.is_punct(";}"):
                    return False
            index += 1
        return False

    def _runs_into_rule(self) -> bool:
        """True if a ``name: value`` declaration lacks its ``;`` before a rule.

        ``color: red .b {`` reads as a declaration because whitespace follows
        the colon; a selector such as ``a:hover {`` has none.
        """
        key, colon, value = self.peek(), self.peek(1), self.peek(2)
        return (
            key is not None
            and key.kind is TokenKind.IDENT
            and colon is not None
            and colon.is_punct(":")
            and value is not None
            and value.spaced
            and not value.is_punct("{")
        )

    # --- at-rules -------------------------------------------------------------

    def _parse_at_rule(self) -> Conditional:
        at = self.next()
        assert at is not None
        name = self.next()
        if name is None or name.kind is not TokenKind.IDENT or name.spaced:
            raise ParseError("expected an at-rule name after '@'", at.location)

        condition: list[Token] = []
        while True:
            token = self.peek()
            if token is None:
                raise ParseError(f"unexpected end of input in '@{name.text}'", at.location)
            if token.is_punct("{"):
                break
            if token.is_punct(";}"):
                raise ParseError(f"'@{name.text}' requires a block", token.location)
            condition.append(token)
            self.next()

        opening = self.next()
        assert opening is not None
        contents = self._parse_contents(opening)
        return Conditional(
            kind=AtRuleKind.from_name(name.text),
            name=name.text,
            condition=_fragments(condition),
            sheet=Sheet(contents),
            location=_span(at, opening),
        )

    # --- style rules ----------------------------------------------------------

    def _parse_style_rule(self) -> StyleRule:
        start = self.peek()
        assert start is not None
        selectors = self._parse_selectors()
        opening = self.next()
        assert opening is not None and opening.is_punct("{")
        items = self._parse_items(opening)
        return StyleRule(
            selectors=tuple(selectors),
            declarations=tuple(i for i in items if isinstance(i, Declaration)),
            nested=tuple(i for i in items if not isinstance(i, Declaration)),
            location=start.location,
        )

    def _parse_selectors(self) -> list[Selector]:
        """Parse a comma-separated selector list, leaving ``{`` unconsumed."""
        groups: list[list[Token]] = [[]]
        depth = 0
        while True:
            token = self.peek()
            if token is None:
                raise ParseError("unexpected end of input in selector", self._eof_location())
            if depth == 0 and token.is_punct("{"):
                break
            if token.is_punct("(["):
                depth += 1
            elif token.is_punct(")]"):
                if depth == 0:
                    raise ParseError(f"unexpected '{token.text}' in selector", token.location)
                depth -= 1
            if depth == 0 and token.is_punct(","):
                if not groups[-1]:
                    raise ParseError("empty selector in selector list", token.location)
                groups.append([])
            else:
                groups[-1].append(token)
            self.next()

        if not groups[-1]:
            brace = self.peek()
            assert brace is not None
            message = "expected a selector before '{'" if len(groups) == 1 else "empty selector in selector list"
            raise ParseError(message, brace.location)
        return [self._parse_selector(group) for group in groups]

    def _parse_selector(self, tokens: list[Token]) -> Selector:
        fragments: list[SelectorFragment] = []

        def push(fragment: SelectorFragment, spaced: bool) -> None:
            # Whitespace between two compounds is a descendant combinator.
            if spaced and fragments and not isinstance(fragments[-1], Combinator):
                fragments.append(Combinator(" "))
            fragments.append(fragment)

        index = 0
        while index < len(tokens):
            token = tokens[index]
            spaced = index > 0 and token.spaced
            if token.is_punct(_COMBINATORS):
                if fragments and isinstance(fragments[-1], Combinator):
                    if not fragments[-1].is_descendant:
                        raise ParseError("consecutive combinators in selector", token.location)
                    fragments.pop()
                fragments.append(Combinator(token.text))
                index += 1
            elif token.is_punct("&"):
                push(NestingMarker(), spaced)
                index += 1
            elif token.kind is TokenKind.PLACEHOLDER:
                push(Placeholder(token.value, token.location), spaced)
                index += 1
            else:
                end = self._simple_selector_end(tokens, index)
                push(Literal(_join(tokens[index:end])), spaced)
                index = end

        if fragments and isinstance(fragments[-1], Combinator):
            raise ParseError("selector ends with a combinator", tokens[-1].location)
        return Selector(tuple(fragments))

    def _simple_selector_end(self, tokens: list[Token], index: int) -> int:
        """Index one past the simple selector starting at *index*."""
        token = tokens[index]
        if token.is_punct("(["):
            return self._matching(tokens, index) + 1
        if token.is_punct(".#"):
            name = tokens[index + 1] if index + 1 < len(tokens) else None
            if name is None or name.spaced or name.kind not in (TokenKind.IDENT, TokenKind.NUMBER):
                raise ParseError(f"expected a name after '{token.text}'", token.location)
            return index + 2
        if token.is_punct(":"):
            end = index + 1
            if end < len(tokens) and tokens[end].is_punct(":") and not tokens[end].spaced:
                end += 1
            if end >= len(tokens) or tokens[end].kind is not TokenKind.IDENT or tokens[end].spaced:
                raise ParseError("expected a pseudo-class name after ':'", token.location)
            end += 1
            if end < len(tokens) and tokens[end].is_punct("(") and not tokens[end].spaced:
                end = self._matching(tokens, end) + 1
            return end
        return index + 1

    def _matching(self, tokens: list[Token], index: int) -> int:
        """Index of the bracket closing the one at *index*."""
        stack = [_CLOSERS[tokens[index].text]]
        for position in range(index + 1, len(tokens)):
            token = tokens[position]
            if token.is_punct("(["):
                stack.append(_CLOSERS[token.text])
            elif token.is_punct(")]"):
                if token.text != stack.pop():
                    raise ParseError("mismatched bracket in selector", token.location)
                if not stack:
                    return position
        raise ParseError(f"unclosed '{tokens[index].text}' in selector", tokens[index].location)

    # --- declarations ---------------------------------------------------------

    def _parse_declaration(self) -> Declaration:
        key = self.next()
        assert key is not None
        tokens: list[Token] = []
        while (token := self.peek()) is not None and not token.is_punct(";}"):
            tokens.append(token)
            self.next()

        value = tokens[1:]
        split = None
        if tokens and tokens[0].is_punct(":"):
            split = self._missing_terminator(value)
        if split is not None:
            # Resume at the property that follows the missing ';', which is
            # still ahead of any terminator left in the stream.
            self.reconsume(value[split:])
            value = value[:split]
            location = _span(key, value[-1])
            return self._dangling(key, [tokens[0], *value], location, f"missing ';' after property '{key.text}'")

        if token is not None and token.is_punct(";"):
            self.next()
        location = _span(key, tokens[-1] if tokens else key)
        if key.kind not in (TokenKind.IDENT, TokenKind.PLACEHOLDER):
            return self._dangling(key, tokens, location, f"expected a property name, found '{key.text}'")
        if not tokens or not tokens[0].is_punct(":"):
            return self._dangling(key, tokens, location, f"expected ':' after property '{key.text}'")
        if not value:
            return self._dangling(key, tokens, location, f"empty value for property '{key.text}'")
        return Declaration(key=_fragments([key])[0], value=_fragments(value), location=location)

    def _parse_unterminated_declaration(self) -> DanglingDeclaration:
        """Split ``name: value selector {`` into a dangling declaration and a rule.

        The rule is taken to start at the last whitespace-separated compound
        before ``{`` (or before the first ``,`` of a selector list), together
        with any combinator right in front of it.
        """
        key = self.next()
        assert key is not None
        tokens: list[Token] = []
        depths: list[int] = []
        depth = 0
        while (token := self.peek()) is not None and not (depth == 0 and token.is_punct("{")):
            if token.is_punct(")]"):
                depth = max(depth - 1, 0)
            tokens.append(token)
            depths.append(depth)
            if token.is_punct("(["):
                depth += 1
            self.next()

        end = next(
            (i for i, t in enumerate(tokens) if depths[i] == 0 and t.is_punct(",")),
            len(tokens),
        )
        cut = next((i for i in range(end - 1, 1, -1) if depths[i] == 0 and tokens[i].spaced), 2)
        while cut > 2 and tokens[cut - 1].is_punct(_COMBINATORS):
            cut -= 1
        split = self._missing_terminator(tokens[1:cut])
        if split is not None:
            cut = split + 1

        value = tokens[1:cut]
        self.reconsume(tokens[cut:])
        return self._dangling(
            key, [tokens[0], *value], _span(key, value[-1]), f"missing ';' after property '{key.text}'"
        )

    @staticmethod
    def _missing_terminator(value: list[Token]) -> int | None:
        """Index of the property name if *value* runs into ``name:``."""
        depth = 0
        for index, token in enumerate(value):
            if token.is_punct("(["):
                depth += 1
            elif token.is_punct(")]"):
                depth = max(depth - 1, 0)
            elif depth == 0 and token.is_punct(":") and index > 0:
                name = value[index - 1]
                if name.kind is TokenKind.IDENT and name.spaced and index > 1:
                    return index - 1
        return None

    def _dangling(
        self, key: Token, tokens: list[Token], location: Location, reason: str
    ) -> DanglingDeclaration:
        logger.debug("recovered from malformed declaration at %s: %s", location, reason)
        value = tokens[1:] if tokens and tokens[0].is_punct(":") else tokens
        return DanglingDeclaration(
            key=Literal(key.text),
            value=_fragments(value),
            location=location,
            reason=reason,
        )


def parse_sheet(source: str) -> Sheet:
    """Parse a style source string into a :class:`Sheet`.

    Raises:
        TokenError: if a lexical unit is malformed.
        ParseError: if the source violates the grammar.
    """
    return Parser(source).parse()
