"""Epsilon edges and their closures.

An automaton starts with a mutable ``EpsilonGraph``. The first closure query
freezes the graph (closures are cached and must stay valid). Elimination
folds the closures into ordinary transitions and replaces the graph with a
sealed empty one, keeping the folded edges in an ``EliminatedEpsilons``
record so that views can still display them.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Set, Tuple

from nfalab.exceptions import PreconditionViolation


class EpsilonGraph:
    """Epsilon edges of an automaton with memoized closures."""

    def __init__(self, sealed: bool = False) -> None:
        self._edges: Dict[int, Set[int]] = {}
        self._closures: Dict[int, FrozenSet[int]] = {}
        self._sealed = sealed

    @property
    def frozen(self) -> bool:
        """Whether edges can no longer be added."""
        return self._sealed or bool(self._closures)

    @property
    def sealed(self) -> bool:
        """Whether this graph replaced an eliminated one."""
        return self._sealed

    def add_edge(self, from_state: int, to_state: int) -> bool:
        """Add an epsilon edge, returning whether it is new.

        Raises:
            PreconditionViolation: If closures were already computed or the
                automaton's epsilon transitions were eliminated.
        """
        if self._sealed:
            raise PreconditionViolation(
                "Cannot add epsilon transitions after they have been eliminated"
            )
        if self._closures:
            raise PreconditionViolation(
                "Cannot add epsilon transitions after epsilon closures were computed"
            )
        targets = self._edges.setdefault(from_state, set())
        if to_state in targets:
            return False
        targets.add(to_state)
        return True

    def targets(self, state: int) -> List[int]:
        return sorted(self._edges.get(state, ()))

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield every ``(from, to)`` edge in id order."""
        for from_state in sorted(self._edges):
            for to_state in sorted(self._edges[from_state]):
                yield from_state, to_state

    def __len__(self) -> int:
        return sum(len(t) for t in self._edges.values())

    def __bool__(self) -> bool:
        return any(self._edges.values())

    def closure(self, state: int) -> FrozenSet[int]:
        """States reachable from ``state`` through zero or more epsilon edges."""
        cached = self._closures.get(state)
        if cached is not None:
            return cached

        closure = {state}
        stack = [state]
        while stack:
            current = stack.pop()
            known = self._closures.get(current)
            if known is not None:
                closure |= known
                continue
            for target in self._edges.get(current, ()):
                if target not in closure:
                    closure.add(target)
                    stack.append(target)

        result = frozenset(closure)
        self._closures[state] = result
        return result

    def closure_of_set(self, states: Set[int]) -> Set[int]:
        result: Set[int] = set()
        for state in states:
            result |= self.closure(state)
        return result

    def copy(self) -> "EpsilonGraph":
        clone = EpsilonGraph(sealed=self._sealed)
        clone._edges = {k: set(v) for k, v in self._edges.items()}
        clone._closures = dict(self._closures)
        return clone

    def snapshot(self) -> Dict[int, FrozenSet[int]]:
        return {k: frozenset(v) for k, v in self._edges.items() if v}


@dataclass(frozen=True)
class EliminatedEpsilons:
    """Read-only record of an automaton before its epsilon edges were folded.

    Attributes:
        edges: The epsilon edges that were eliminated.
        transitions: Per-state transition tables before folding.
        start_states: Start states before closure expansion.
        accept_states: Accept states before closure propagation.
    """

    edges: Dict[int, FrozenSet[int]] = field(default_factory=dict)
    transitions: Tuple[Dict[int, FrozenSet[int]], ...] = ()
    start_states: FrozenSet[int] = frozenset()
    accept_states: FrozenSet[int] = frozenset()
