"""Thompson construction from a regex AST to an NFA.

Each node becomes a fragment with one entry and one exit state, glued to
its neighbours with epsilon edges. The finished automaton has its epsilon
edges eliminated before it is returned.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence

from nfalab.automaton.nfa import NFA
from nfalab.parser.ast import Alternate, Charset, Concat, Node, Quantifier
from nfalab.parser.parser import parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    """Entry and exit state of a partially built automaton."""

    start: int
    accept: int


class RegexToNFABuilder:
    """Compiles a regex AST into an NFA over a fixed alphabet.

    Characters outside the alphabet can never be matched; they are dropped
    from their charset with a warning.

    Args:
        symbols: The alphabet.
    """

    def __init__(self, symbols: Sequence[Any]):
        self.symbols = list(symbols)
        self.nfa = NFA(self.symbols)

    def build(self, ast: Node) -> NFA:
        """Build the automaton for ``ast``.

        A builder builds once; create a new one per pattern.
        """
        fragment = self._build_node(ast)
        self.nfa.add_start(fragment.start)
        self.nfa.add_accept(fragment.accept)
        logger.debug(
            "Thompson construction: %d states, %d epsilon edges",
            self.nfa.num_states(),
            len(self.nfa.epsilon_transitions),
        )
        self.nfa.enforce_epsilon_transitions()
        return self.nfa

    def _build_node(self, node: Node) -> Fragment:
        if isinstance(node, Charset):
            return self._build_charset(node)
        if isinstance(node, Concat):
            return self._build_concat(node.parts)
        if isinstance(node, Alternate):
            return self._build_alternate(node.options)
        if isinstance(node, Quantifier):
            return self._build_quantifier(node.child, node.min, node.max)
        raise TypeError(f"Unsupported AST node: {type(node).__name__}")

    def _build_empty(self) -> Fragment:
        state = self.nfa.add_state()
        return Fragment(state, state)

    def _build_charset(self, node: Charset) -> Fragment:
        start = self.nfa.add_state()
        accept = self.nfa.add_state()

        if node.negated:
            indices = [i for i, s in enumerate(self.symbols) if s not in node.chars]
        else:
            indices = []
            for ch in node.chars:
                index = self.nfa.symbol_index(ch)
                if index is None:
                    logger.warning("Regex character %r is not in the alphabet", ch)
                else:
                    indices.append(index)

        for index in indices:
            self.nfa.add_transition(start, accept, index)
        return Fragment(start, accept)

    def _build_concat(self, parts: List[Node]) -> Fragment:
        if not parts:
            return self._build_empty()
        first = self._build_node(parts[0])
        accept = first.accept
        for part in parts[1:]:
            following = self._build_node(part)
            self.nfa.add_epsilon_transition(accept, following.start)
            accept = following.accept
        return Fragment(first.start, accept)

    def _build_alternate(self, options: List[Node]) -> Fragment:
        start = self.nfa.add_state()
        accept = self.nfa.add_state()
        for option in options:
            fragment = self._build_node(option)
            self.nfa.add_epsilon_transition(start, fragment.start)
            self.nfa.add_epsilon_transition(fragment.accept, accept)
        return Fragment(start, accept)

    def _build_quantifier(self, child: Node, minimum: int, maximum: Any) -> Fragment:
        result = self._build_empty() if minimum == 0 else self._build_node(child)

        for _ in range(1, minimum):
            following = self._build_node(child)
            self.nfa.add_epsilon_transition(result.accept, following.start)
            result = Fragment(result.start, following.accept)

        if maximum is None:
            # Optional loop hanging off the accept state.
            inner = self._build_node(child)
            self.nfa.add_epsilon_transition(result.accept, inner.start)
            self.nfa.add_epsilon_transition(inner.accept, inner.start)
            self.nfa.add_epsilon_transition(inner.accept, result.accept)
        else:
            for _ in range(minimum, maximum):
                inner = self._build_node(child)
                self.nfa.add_epsilon_transition(result.accept, inner.start)
                self.nfa.add_epsilon_transition(result.accept, inner.accept)
                result = Fragment(result.start, inner.accept)

        return result


def compile_regex(pattern: str, symbols: Sequence[Any]) -> NFA:
    """Parse ``pattern`` and compile it to an epsilon-free NFA over ``symbols``.

    Raises:
        PatternSyntaxError: If the pattern is malformed.
    """
    return RegexToNFABuilder(symbols).build(parse(pattern))
