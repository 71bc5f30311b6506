"""Read-only view of an NFA through a state transformation.

A view pairs an automaton with a ``StateTransformation`` and answers every
query in terms of canonical states: merged source sets, transitions re-keyed
to canonical targets, live/dead classification and aggregate statistics.
Views never modify the automaton; pipeline stages create new views instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from nfalab.automaton.nfa import NFA, ResolvedSource, RunResult, StateInfo, TraceStep, step_symbols
from nfalab.automaton.transformation import DELETED, StateTransformation


@dataclass(frozen=True)
class ViewStats:
    """Counts over the canonical states of a view."""

    total: int
    start: int
    accept: int
    live: int
    dead: int


class NFAView:
    """An NFA seen through a transformation.

    Args:
        nfa: The automaton (shared, never mutated).
        transform: Remap from the automaton's ids to canonical ids.
        show_epsilon_transitions: View the automaton as it was before epsilon
            elimination, with its epsilon edges visible.
        layout_state: Opaque renderer state carried along with the view.
    """

    def __init__(
        self,
        nfa: NFA,
        transform: Optional[StateTransformation] = None,
        show_epsilon_transitions: bool = False,
        layout_state: Any = None,
    ):
        if transform is None:
            transform = StateTransformation.identity(nfa.num_states())
        if len(transform) != nfa.num_states():
            raise ValueError(
                f"Transformation covers {len(transform)} states, automaton has {nfa.num_states()}"
            )
        self.nfa = nfa
        self.transform = transform
        self.show_epsilon_transitions = show_epsilon_transitions
        self.layout_state = layout_state

        self._source = nfa.epsilon_source() if show_epsilon_transitions else nfa
        self.merged_sources: Dict[int, List[int]] = transform.groups()
        self._dead_states = self._source.get_dead_states()
        self._tables: Dict[int, Dict[int, Set[int]]] = {}

    # ------------------------------------------------------------------
    # Per-state queries
    # ------------------------------------------------------------------

    def get_state_id_prefix(self) -> str:
        """Display prefix for state ids: ``q'`` for subset-constructed automata."""
        return "q'" if self.nfa.parent_nfa is not None else "q"

    def get_source_state_id_prefix(self) -> str:
        """Display prefix for ids of the states behind this view."""
        return "q"

    def _sources(self, state: int) -> List[int]:
        return self.merged_sources.get(state, [state])

    def is_start(self, state: int) -> bool:
        """Whether any state merged into ``state`` is a start state."""
        return any(self._source.is_start(s) for s in self._sources(state))

    def is_accepting(self, state: int) -> bool:
        """Whether any state merged into ``state`` accepts."""
        return any(self._source.is_accepting(s) for s in self._sources(state))

    def is_dead(self, state: int) -> bool:
        """Whether every state merged into ``state`` is dead."""
        return all(self._dead_states.is_deleted(s) for s in self._sources(state))

    def is_canonical(self, state: int) -> bool:
        """Whether ``state`` survives the transformation as itself."""
        return self.transform.is_canonical(state)

    def get_canonical(self, state: int) -> int:
        """Canonical state ``state`` maps to, or -1 if it is deleted."""
        return self.transform.get_canonical(state)

    def is_merged_state(self, state: int) -> bool:
        """Whether more than one source state was merged into ``state``."""
        sources = self.merged_sources.get(state)
        return sources is not None and len(sources) > 1

    def canonical_states(self) -> List[int]:
        """Canonical state ids in ascending order."""
        return sorted(self.merged_sources)

    def symbol_targets(self, state: int) -> Dict[int, Set[int]]:
        """Canonical targets of a canonical state keyed by symbol index.

        The result is cached per state and shared between calls; do not
        modify it.
        """
        table = self._tables.get(state)
        if table is None:
            table = {}
            for source in self._sources(state):
                for symbol_index, targets in self._source.symbol_targets(source).items():
                    for target in targets:
                        canonical = self.transform.remap[target]
                        if canonical != DELETED:
                            table.setdefault(symbol_index, set()).add(canonical)
            self._tables[state] = table
        return table

    def get_transitions_from(self, state: int) -> Dict[int, List[Any]]:
        """Canonical target -> symbols (alphabet order) leaving a state.

        Transitions of every state merged into ``state`` are included;
        transitions into deleted states are dropped.
        """
        by_target: Dict[int, List[int]] = {}
        table = self.symbol_targets(state)
        for symbol_index in sorted(table):
            for target in table[symbol_index]:
                by_target.setdefault(target, []).append(symbol_index)
        symbols = self.nfa.symbols
        return {
            target: [symbols[i] for i in by_target[target]] for target in sorted(by_target)
        }

    def get_epsilon_transitions_from(self, state: int) -> Set[int]:
        """Canonical targets of epsilon edges leaving a state."""
        targets: Set[int] = set()
        for source in self._sources(state):
            for target in self._source.epsilon_transitions.targets(source):
                canonical = self.transform.remap[target]
                if canonical != DELETED:
                    targets.add(canonical)
        return targets

    def get_resolved_sources(self, state: int) -> List[ResolvedSource]:
        """Source states behind a canonical state, traced to the root automaton."""
        return self.nfa.resolve_sources(self.merged_sources.get(state, []))

    def get_state_info(self) -> List[StateInfo]:
        """Flags of every canonical state."""
        return [
            StateInfo(
                id=state,
                is_start=self.is_start(state),
                is_accept=self.is_accepting(state),
                is_dead=self.is_dead(state),
            )
            for state in self.canonical_states()
        ]

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def get_stats(self) -> ViewStats:
        """Counts of canonical, start, accepting, live and dead states."""
        total = start = accept = dead = 0
        for state in self.canonical_states():
            total += 1
            if self.is_start(state):
                start += 1
            if self.is_accepting(state):
                accept += 1
            if self.is_dead(state):
                dead += 1
        return ViewStats(total=total, start=start, accept=accept, live=total - dead, dead=dead)

    def has_epsilon_transitions(self) -> bool:
        return self._source.has_epsilon_transitions()

    def is_deterministic(self) -> bool:
        """At most one start state and one transition per state and symbol."""
        if self.has_epsilon_transitions():
            return False

        seen_start = False
        for state in self.canonical_states():
            if self.is_start(state):
                if seen_start:
                    return False
                seen_start = True
            for targets in self.symbol_targets(state).values():
                if len(targets) > 1:
                    return False
        return True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _closure(self, states: Set[int]) -> Set[int]:
        if not self.has_epsilon_transitions():
            return states
        closure = set(states)
        stack = list(states)
        while stack:
            state = stack.pop()
            for target in self.get_epsilon_transitions_from(state):
                if target not in closure:
                    closure.add(target)
                    stack.append(target)
        return closure

    def run(self, input_sequence: Iterable[Any]) -> RunResult:
        """Simulate the canonical automaton; see ``NFA.run``."""
        starts = {s for s in self.canonical_states() if self.is_start(s)}
        current = self._closure(starts)
        trace = [TraceStep(step=0, input=None, states=sorted(current))]

        for i, step in enumerate(input_sequence):
            indices = [
                index
                for index in (self.nfa.symbol_index(s) for s in step_symbols(step))
                if index is not None
            ]
            next_states: Set[int] = set()
            for state in current:
                table = self.symbol_targets(state)
                for index in indices:
                    next_states |= table.get(index, set())
            current = self._closure(next_states)
            trace.append(TraceStep(step=i + 1, input=step, states=sorted(current)))
            if not current:
                break

        accepted = any(self.is_accepting(state) for state in current)
        return RunResult(accepted=accepted, trace=trace)

    def matches(self, input_sequence: Iterable[Any]) -> bool:
        """Whether the view accepts ``input_sequence``."""
        return self.run(input_sequence).accepted

    def __repr__(self) -> str:
        return (
            f"NFAView({self.nfa!r}, canonical={len(self.merged_sources)}, "
            f"show_epsilon_transitions={self.show_epsilon_transitions})"
        )
