"""NFA store: states, symbol-indexed transitions, epsilon edges and analyses."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from nfalab.automaton.epsilon import EliminatedEpsilons, EpsilonGraph
from nfalab.automaton.transformation import DELETED, StateTransformation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single labelled edge."""

    from_state: int
    to_state: int
    symbol: Any


@dataclass(frozen=True)
class TransitionGroup:
    """All symbols leading from one state to the same target.

    Attributes:
        to: Target state id.
        symbols: Symbols in alphabet order.
    """

    to: int
    symbols: List[Any]


@dataclass(frozen=True)
class StateInfo:
    """Per-state flags for inspection and rendering."""

    id: int
    is_start: bool
    is_accept: bool
    is_dead: bool = False


@dataclass(frozen=True)
class TraceStep:
    """Active state set after ``step`` input steps.

    Attributes:
        step: Number of input steps consumed.
        input: The input step that was consumed (None for step 0).
        states: Active state ids, sorted.
    """

    step: int
    input: Any
    states: List[int]


@dataclass(frozen=True)
class RunResult:
    """Outcome of simulating an input sequence."""

    accepted: bool
    trace: List[TraceStep] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedSource:
    """A source state of the base automaton with its label."""

    id: int
    label: str


def step_symbols(step: Any) -> List[Any]:
    """Symbols considered simultaneously active in one input step.

    A list, tuple, set or frozenset holds several symbols; any other value is
    a single symbol.
    """
    if isinstance(step, (list, tuple, set, frozenset)):
        return list(step)
    return [step]


class NFA:
    """Non-deterministic finite automaton over a fixed, ordered alphabet.

    States are dense integer ids assigned in creation order. Transitions are
    stored per state, keyed by the symbol's index in ``symbols``. Epsilon
    edges live in an ``EpsilonGraph`` until they are eliminated.

    Attributes:
        symbols: The alphabet; a symbol's position is its index.
        start_states: Ids of start states.
        accept_states: Ids of accepting states.
        state_labels: Display label for each state.
        epsilon_transitions: Epsilon edges not yet eliminated.
        eliminated_epsilons: Record of the automaton before elimination, if
            it ever had epsilon edges.
        parent_nfa: The automaton this one was derived from by subset
            construction, if any.
    """

    def __init__(self, symbols: Sequence[Any]) -> None:
        self.symbols: List[Any] = list(symbols)
        self._symbol_to_index: Dict[Any, int] = {}
        for index, symbol in enumerate(self.symbols):
            if symbol in self._symbol_to_index:
                raise ValueError(f"Duplicate symbol {symbol!r} in alphabet")
            self._symbol_to_index[symbol] = index

        self._transitions: List[Dict[int, Set[int]]] = []
        self.start_states: Set[int] = set()
        self.accept_states: Set[int] = set()
        self.state_labels: List[str] = []
        self.epsilon_transitions = EpsilonGraph()
        self.eliminated_epsilons: Optional[EliminatedEpsilons] = None
        self.parent_nfa: Optional["NFA"] = None

        self._dead_states: Optional[StateTransformation] = None
        self._epsilon_source: Optional["NFA"] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_state(self, label: str = "", accepting: bool = False) -> int:
        """Add a state and return its id."""
        state_id = len(self._transitions)
        self._transitions.append({})
        self.state_labels.append(label)
        if accepting:
            self.accept_states.add(state_id)
        self._dead_states = None
        return state_id

    def add_start(self, state: int) -> bool:
        """Mark a state as a start state, returning whether it is new."""
        self._check_state(state)
        if state in self.start_states:
            return False
        self.start_states.add(state)
        self._dead_states = None
        return True

    def add_accept(self, state: int) -> bool:
        """Mark a state as accepting, returning whether it is new."""
        self._check_state(state)
        if state in self.accept_states:
            return False
        self.accept_states.add(state)
        self._dead_states = None
        return True

    def add_transition(self, from_state: int, to_state: int, symbol_index: int) -> bool:
        """Add ``from_state --symbols[symbol_index]--> to_state``.

        Returns:
            Whether the transition is new.
        """
        self._check_state(from_state)
        self._check_state(to_state)
        if not 0 <= symbol_index < len(self.symbols):
            raise IndexError(f"Symbol index {symbol_index} out of range")
        targets = self._transitions[from_state].setdefault(symbol_index, set())
        if to_state in targets:
            return False
        targets.add(to_state)
        self._dead_states = None
        return True

    def add_epsilon_transition(self, from_state: int, to_state: int) -> bool:
        """Add an epsilon edge, returning whether it is new.

        Raises:
            PreconditionViolation: If closures were already computed or the
                epsilon edges were eliminated.
        """
        self._check_state(from_state)
        self._check_state(to_state)
        added = self.epsilon_transitions.add_edge(from_state, to_state)
        if added:
            self._dead_states = None
        return added

    def _check_state(self, state: int) -> None:
        if not 0 <= state < len(self._transitions):
            raise IndexError(f"State {state} does not exist")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def num_states(self) -> int:
        """Number of states, which is also the next id to be assigned."""
        return len(self._transitions)

    def symbol_index(self, symbol: Any) -> Optional[int]:
        """Index of a symbol in the alphabet, or None if it is not in it."""
        try:
            return self._symbol_to_index.get(symbol)
        except TypeError:
            return None

    def is_start(self, state: int) -> bool:
        """Whether ``state`` is a start state."""
        return state in self.start_states

    def is_accepting(self, state: int) -> bool:
        """Whether ``state`` is an accepting state."""
        return state in self.accept_states

    def has_epsilon_transitions(self) -> bool:
        """Whether epsilon edges remain to be eliminated."""
        return bool(self.epsilon_transitions)

    def get_transitions(self, state: int, symbol_index: int) -> List[int]:
        """Targets of ``state`` on one symbol, sorted."""
        return sorted(self._transitions[state].get(symbol_index, ()))

    def symbol_targets(self, state: int) -> Dict[int, List[int]]:
        """Targets of ``state`` keyed by symbol index."""
        table = self._transitions[state]
        return {index: sorted(table[index]) for index in sorted(table) if table[index]}

    def get_transitions_from(self, state: int) -> List[TransitionGroup]:
        """Outgoing transitions of a state grouped by target."""
        by_target: Dict[int, List[int]] = {}
        for symbol_index in sorted(self._transitions[state]):
            for target in self._transitions[state][symbol_index]:
                by_target.setdefault(target, []).append(symbol_index)
        return [
            TransitionGroup(to=target, symbols=[self.symbols[i] for i in by_target[target]])
            for target in sorted(by_target)
        ]

    def get_all_transitions(self) -> List[Transition]:
        """Every transition, ordered by source, symbol index and target."""
        transitions = []
        for from_state, table in enumerate(self._transitions):
            for symbol_index in sorted(table):
                for to_state in sorted(table[symbol_index]):
                    transitions.append(
                        Transition(from_state, to_state, self.symbols[symbol_index])
                    )
        return transitions

    def get_state_info(self) -> List[StateInfo]:
        """Flags of every state, including whether it is dead."""
        dead = self.get_dead_states()
        return [
            StateInfo(
                id=state,
                is_start=self.is_start(state),
                is_accept=self.is_accepting(state),
                is_dead=dead.is_deleted(state),
            )
            for state in range(self.num_states())
        ]

    # ------------------------------------------------------------------
    # Epsilon closures and elimination
    # ------------------------------------------------------------------

    def epsilon_closure(self, state: int) -> Set[int]:
        """States reachable from ``state`` via epsilon edges, itself included.

        Computing a closure freezes the epsilon edges of this automaton.
        """
        self._check_state(state)
        return set(self.epsilon_transitions.closure(state))

    def enforce_epsilon_transitions(self) -> None:
        """Fold epsilon edges into start states, transitions and accept states.

        Start states are expanded to their closures, every transition also
        reaches the closure of its target, and a state accepts when anything
        in its closure accepts. The epsilon edges are then cleared and no new
        ones can be added. Calling this again is a no-op.
        """
        graph = self.epsilon_transitions
        if graph.sealed:
            return

        if graph:
            self.eliminated_epsilons = EliminatedEpsilons(
                edges=graph.snapshot(),
                transitions=tuple(
                    {i: frozenset(t) for i, t in table.items()}
                    for table in self._transitions
                ),
                start_states=frozenset(self.start_states),
                accept_states=frozenset(self.accept_states),
            )

            for state in list(self.start_states):
                self.start_states |= graph.closure(state)

            for table in self._transitions:
                for symbol_index, targets in table.items():
                    expanded: Set[int] = set()
                    for target in targets:
                        expanded |= graph.closure(target)
                    targets |= expanded

            accepting = set(self.accept_states)
            for state in range(self.num_states()):
                if graph.closure(state) & accepting:
                    self.accept_states.add(state)

            logger.debug(
                "Eliminated %d epsilon edges over %d states",
                len(graph),
                self.num_states(),
            )

        self.epsilon_transitions = EpsilonGraph(sealed=True)
        self._dead_states = None

    def epsilon_source(self) -> "NFA":
        """The automaton as it was before epsilon elimination.

        Returns ``self`` when there was nothing to eliminate. The result is a
        separate automaton and is cached.
        """
        record = self.eliminated_epsilons
        if record is None:
            return self
        if self._epsilon_source is None:
            raw = NFA(self.symbols)
            for state in range(self.num_states()):
                raw.add_state(self.state_labels[state])
            for state, table in enumerate(record.transitions):
                for symbol_index, targets in table.items():
                    for target in targets:
                        raw.add_transition(state, target, symbol_index)
            for from_state in sorted(record.edges):
                for to_state in sorted(record.edges[from_state]):
                    raw.add_epsilon_transition(from_state, to_state)
            raw.start_states = set(record.start_states)
            raw.accept_states = set(record.accept_states)
            raw.parent_nfa = self.parent_nfa
            self._epsilon_source = raw
        return self._epsilon_source

    def _closure_fn(self) -> Callable[[Set[int]], Set[int]]:
        graph = self.epsilon_transitions
        if graph:
            return graph.closure_of_set
        return set

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def run(self, input_sequence: Iterable[Any]) -> RunResult:
        """Simulate the automaton on a sequence of input steps.

        Each step is a symbol or a collection of symbols that are active at
        the same time. The trace records the active state set after every
        step and stops early once that set is empty.
        """
        closure = self._closure_fn()
        current = closure(set(self.start_states))
        trace = [TraceStep(step=0, input=None, states=sorted(current))]

        for i, step in enumerate(input_sequence):
            indices = [
                index
                for index in (self.symbol_index(s) for s in step_symbols(step))
                if index is not None
            ]
            next_states: Set[int] = set()
            for state in current:
                table = self._transitions[state]
                for index in indices:
                    next_states |= table.get(index, set())
            current = closure(next_states)
            trace.append(TraceStep(step=i + 1, input=step, states=sorted(current)))
            if not current:
                break

        accepted = any(state in self.accept_states for state in current)
        return RunResult(accepted=accepted, trace=trace)

    def matches(self, input_sequence: Iterable[Any]) -> bool:
        """Whether the automaton accepts ``input_sequence``."""
        return self.run(input_sequence).accepted

    # ------------------------------------------------------------------
    # Derived automata
    # ------------------------------------------------------------------

    def clone(self) -> "NFA":
        """Deep copy of every table (the parent reference is shared)."""
        copy = NFA(self.symbols)
        copy._transitions = [
            {i: set(t) for i, t in table.items()} for table in self._transitions
        ]
        copy.start_states = set(self.start_states)
        copy.accept_states = set(self.accept_states)
        copy.state_labels = list(self.state_labels)
        copy.epsilon_transitions = self.epsilon_transitions.copy()
        copy.eliminated_epsilons = self.eliminated_epsilons
        copy.parent_nfa = self.parent_nfa
        return copy

    def reverse(self) -> "NFA":
        """Automaton with every edge reversed and start/accept roles swapped."""
        reversed_nfa = NFA(self.symbols)
        for label in self.state_labels:
            reversed_nfa.add_state(label)
        for from_state, table in enumerate(self._transitions):
            for symbol_index, targets in table.items():
                for to_state in targets:
                    reversed_nfa.add_transition(to_state, from_state, symbol_index)
        for from_state, to_state in self.epsilon_transitions.edges():
            reversed_nfa.add_epsilon_transition(to_state, from_state)
        reversed_nfa.start_states = set(self.accept_states)
        reversed_nfa.accept_states = set(self.start_states)
        return reversed_nfa

    def apply_transformation(self, transform: StateTransformation) -> "NFA":
        """Materialize the canonical states of a transformation.

        Canonical states are renumbered densely in id order. Each keeps the
        union of its sources' transitions, start and accept flags.
        """
        if len(transform) != self.num_states():
            raise ValueError(
                f"Transformation covers {len(transform)} states, automaton has {self.num_states()}"
            )
        if not transform.is_valid():
            raise ValueError(f"{transform!r} maps to non-canonical states")

        canonical = transform.canonical_states()
        new_id = {state: i for i, state in enumerate(canonical)}

        result = NFA(self.symbols)
        for state in canonical:
            result.add_state(self.state_labels[state])

        for state, table in enumerate(self._transitions):
            source = transform.remap[state]
            if source == DELETED:
                continue
            from_id = new_id[source]
            if state in self.start_states:
                result.add_start(from_id)
            if state in self.accept_states:
                result.add_accept(from_id)
            for symbol_index, targets in table.items():
                for target in targets:
                    mapped = transform.remap[target]
                    if mapped != DELETED:
                        result.add_transition(from_id, new_id[mapped], symbol_index)

        for from_state, to_state in self.epsilon_transitions.edges():
            a, b = transform.remap[from_state], transform.remap[to_state]
            if a != DELETED and b != DELETED and a != b:
                result.add_epsilon_transition(new_id[a], new_id[b])

        return result

    # ------------------------------------------------------------------
    # Reachability and dead states
    # ------------------------------------------------------------------

    def get_reachable_states(self) -> Set[int]:
        """States reachable from a start state via transitions or epsilon edges."""
        reachable = set(self.start_states)
        queue = deque(sorted(self.start_states))
        while queue:
            state = queue.popleft()
            successors: Set[int] = set(self.epsilon_transitions.targets(state))
            for targets in self._transitions[state].values():
                successors |= targets
            for target in successors:
                if target not in reachable:
                    reachable.add(target)
                    queue.append(target)
        return reachable

    def get_dead_states(self) -> StateTransformation:
        """Deletion transformation over states that cannot reach an accept state.

        Computed on the reversed automaton and cached until the next edit.
        """
        if self._dead_states is None:
            live = self.reverse().get_reachable_states()
            dead = set(range(self.num_states())) - live
            self._dead_states = StateTransformation.deletion(self.num_states(), dead)
        return self._dead_states

    def get_equivalent_state_remap(
        self, existing: Optional[StateTransformation] = None
    ) -> StateTransformation:
        """Merge behaviourally identical states on top of ``existing``."""
        from nfalab.automaton.minimize import equivalent_state_remap

        return equivalent_state_remap(self, existing)

    # ------------------------------------------------------------------
    # Trace-back
    # ------------------------------------------------------------------

    def resolve_sources(self, states: Iterable[int]) -> List[ResolvedSource]:
        """Decode states back to the ids of the root automaton.

        States of an automaton built by subset construction are labelled with
        their comma-joined member ids; those are followed up the parent chain.
        """
        ids = sorted(set(states))
        nfa = self
        while nfa.parent_nfa is not None:
            base: Set[int] = set()
            for state in ids:
                label = nfa.state_labels[state]
                base.update(int(part) for part in label.split(",") if part)
            ids = sorted(base)
            nfa = nfa.parent_nfa
        return [ResolvedSource(id=i, label=nfa.state_labels[i]) for i in ids]

    def __repr__(self) -> str:
        return (
            f"NFA(states={self.num_states()}, symbols={len(self.symbols)}, "
            f"start={sorted(self.start_states)}, accept={sorted(self.accept_states)})"
        )
