"""AST node definitions for regular expressions over a finite alphabet."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, List, Optional


class Node(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def children(self) -> "List[Node]":
        """Return child nodes."""
        ...

    @abstractmethod
    def __repr__(self) -> str:
        ...

    def walk(self) -> "Iterator[Node]":
        """Yield this node and all descendants."""
        yield self
        for child in self.children():
            yield from child.walk()


@dataclass
class Charset(Node):
    """A set of characters matching a single symbol.

    ``Charset([], negated=True)`` matches any symbol of the alphabet; it is
    what ``.`` parses to.

    Attributes:
        chars: Characters in the set, in source order.
        negated: Whether the set is complemented against the alphabet.
    """

    chars: List[str] = field(default_factory=list)
    negated: bool = False

    def matches(self, symbol: str) -> bool:
        return (symbol in self.chars) != self.negated

    def children(self) -> "List[Node]":
        return []

    def __repr__(self) -> str:
        if self.negated:
            return f"Charset({self.chars!r}, negated=True)"
        return f"Charset({self.chars!r})"


@dataclass
class Concat(Node):
    """Concatenation. An empty ``parts`` list matches the empty string.

    Attributes:
        parts: Nodes in sequence.
    """

    parts: "List[Node]" = field(default_factory=list)

    def children(self) -> "List[Node]":
        return self.parts

    def __repr__(self) -> str:
        return f"Concat({self.parts!r})"


@dataclass
class Alternate(Node):
    """Alternation (|) between options.

    Attributes:
        options: Alternative patterns, in source order.
    """

    options: "List[Node]"

    def children(self) -> "List[Node]":
        return self.options

    def __repr__(self) -> str:
        return f"Alternate({self.options!r})"


@dataclass
class Quantifier(Node):
    """Repetition ``{min,max}``; ``*``, ``+`` and ``?`` are special cases.

    Attributes:
        child: The pattern to repeat.
        min: Minimum repetitions.
        max: Maximum repetitions (None for unbounded).
    """

    child: "Node"
    min: int = 0
    max: Optional[int] = None

    @property
    def unbounded(self) -> bool:
        return self.max is None

    def children(self) -> "List[Node]":
        return [self.child]

    def __repr__(self) -> str:
        max_str = str(self.max) if self.max is not None else "∞"
        return f"Quantifier({self.child!r}, {{{self.min},{max_str}}})"
