"""Recursive-descent parser for regular expressions over a finite alphabet.

Grammar::

    expression := sequence ('|' sequence)*
    sequence   := quantified*                  # empty sequence matches ε
    quantified := primary ('*' | '+' | '?' | '{m}' | '{m,}' | '{m,n}')*
    primary    := '(' expression ')' | '[' class ']' | '.' | '\\' char | char

There are no anchors, lookarounds or capture semantics: a group only groups.
"""

from typing import List, Optional

from nfalab.exceptions import PatternSyntaxError
from nfalab.parser.ast import Alternate, Charset, Concat, Node, Quantifier


class RegexParser:
    """Parser for one pattern string.

    Example:
        >>> RegexParser("a|b*").parse()
        Alternate([Charset(['a']), Quantifier(Charset(['b']), {0,∞})])
    """

    SEQUENCE_TERMINATORS = "|)"
    QUANTIFIERS = "*+?{"

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.pos = 0

    def parse(self) -> Node:
        """Parse the whole pattern.

        Raises:
            PatternSyntaxError: On malformed input, with the offending position.
        """
        node = self._parse_expression()
        if not self._eof():
            raise PatternSyntaxError(f"Unexpected token {self._peek()!r}", self.pos)
        return node

    def _parse_expression(self) -> Node:
        options = [self._parse_sequence()]
        while self._peek() == "|":
            self._next()
            options.append(self._parse_sequence())
        if len(options) == 1:
            return options[0]
        return Alternate(options)

    def _parse_sequence(self) -> Node:
        parts: List[Node] = []
        while not self._eof() and self._peek() not in self.SEQUENCE_TERMINATORS:
            parts.append(self._parse_quantified())
        if len(parts) == 1:
            return parts[0]
        return Concat(parts)

    def _parse_quantified(self) -> Node:
        node = self._parse_primary()
        while not self._eof():
            ch = self._peek()
            if ch == "*":
                self._next()
                node = Quantifier(node, 0, None)
            elif ch == "+":
                self._next()
                node = Quantifier(node, 1, None)
            elif ch == "?":
                self._next()
                node = Quantifier(node, 0, 1)
            elif ch == "{":
                node = self._parse_brace_quantifier(node)
            else:
                break
        return node

    def _parse_brace_quantifier(self, node: Node) -> Quantifier:
        start = self.pos
        self._expect("{")

        minimum = self._parse_number()
        if minimum is None:
            raise PatternSyntaxError("Expected number after '{'", start)

        maximum: Optional[int] = minimum
        if self._peek() == ",":
            self._next()
            if self._peek() == "}":
                maximum = None
            else:
                maximum = self._parse_number()
                if maximum is None:
                    raise PatternSyntaxError("Expected number or '}' after ','", self.pos)
                if maximum < minimum:
                    raise PatternSyntaxError(
                        f"Invalid quantifier: max ({maximum}) < min ({minimum})", start
                    )

        self._expect("}")
        return Quantifier(node, minimum, maximum)

    def _parse_number(self) -> Optional[int]:
        start = self.pos
        while not self._eof() and self._peek().isdigit():
            self.pos += 1
        if self.pos == start:
            return None
        return int(self.pattern[start : self.pos])

    def _parse_primary(self) -> Node:
        ch = self._peek()
        if ch is None:
            raise PatternSyntaxError("Unexpected end of pattern", self.pos)
        if ch == "(":
            self._next()
            expr = self._parse_expression()
            if self._peek() != ")":
                raise PatternSyntaxError("Unclosed group", self.pos)
            self._next()
            return expr
        if ch == "[":
            return self._parse_char_class()
        if ch == ".":
            self._next()
            return Charset([], negated=True)
        if ch == "\\":
            return Charset([self._parse_escape()])
        if ch in self.QUANTIFIERS or ch in self.SEQUENCE_TERMINATORS:
            raise PatternSyntaxError(f"Unexpected token {ch!r}", self.pos)
        self._next()
        return Charset([ch])

    def _parse_escape(self) -> str:
        self._expect("\\")
        if self._eof():
            raise PatternSyntaxError("Dangling backslash", self.pos - 1)
        return self._next()

    def _parse_class_char(self) -> str:
        if self._peek() == "\\":
            return self._parse_escape()
        return self._next()

    def _parse_char_class(self) -> Charset:
        start = self.pos
        self._expect("[")
        negated = self._peek() == "^"
        if negated:
            self._next()

        chars: List[str] = []
        while not self._eof() and self._peek() != "]":
            first = self._parse_class_char()
            # A '-' right before ']' is literal.
            if self._peek() == "-" and self._peek(1) not in ("]", None):
                self._next()
                last = self._parse_class_char()
                if ord(last) < ord(first):
                    raise PatternSyntaxError("Invalid character range in class", start)
                candidates = [chr(c) for c in range(ord(first), ord(last) + 1)]
            else:
                candidates = [first]
            for ch in candidates:
                if ch not in chars:
                    chars.append(ch)

        if self._eof():
            raise PatternSyntaxError("Unclosed character class", start)
        self._expect("]")
        if not chars:
            raise PatternSyntaxError("Empty character class", start)
        return Charset(chars, negated)

    def _expect(self, ch: str) -> None:
        if self._peek() != ch:
            raise PatternSyntaxError(f"Expected {ch!r}", self.pos)
        self.pos += 1

    def _peek(self, offset: int = 0) -> Optional[str]:
        index = self.pos + offset
        if index >= len(self.pattern):
            return None
        return self.pattern[index]

    def _next(self) -> str:
        ch = self.pattern[self.pos]
        self.pos += 1
        return ch

    def _eof(self) -> bool:
        return self.pos >= len(self.pattern)


def parse(pattern: str) -> Node:
    """Convenience function to parse a regex pattern.

    Args:
        pattern: The pattern source.

    Returns:
        The root AST node.
    """
    return RegexParser(pattern).parse()
