"""Build an NFA by exploring the state space of user-defined callables.

Starting from the start value(s), every discovered state is fed each symbol
of the alphabet; the resulting values become states (deduplicated by their
canonical encoding) and transitions. Exploration is breadth-first so ids
follow discovery order and identical definitions give identical automata.
"""

import copy
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence, Set

from nfalab.automaton.nfa import NFA
from nfalab.config import Config
from nfalab.exceptions import CallableFailure, InvalidStateValue, StateLimitExceeded
from nfalab.symbols import canonical_json, expand_symbol_class

logger = logging.getLogger(__name__)


class StateMachineDefinition(ABC):
    """The three callables (plus start value) an automaton is explored from.

    ``transition`` and ``epsilon`` return a successor value, a list of
    successor values, or None for no successor. Lists are reserved for
    "several states" and can never be a state themselves.
    """

    @property
    @abstractmethod
    def start_state(self) -> Any:
        """Start value, or a list of start values."""
        ...

    @abstractmethod
    def transition(self, state: Any, symbol: Any) -> Any:
        ...

    @abstractmethod
    def accept(self, state: Any) -> bool:
        ...

    def epsilon(self, state: Any) -> Any:
        """Epsilon successors of a state; none by default."""
        return None

    @property
    def has_epsilon(self) -> bool:
        return type(self).epsilon is not StateMachineDefinition.epsilon


@dataclass
class FunctionDefinition(StateMachineDefinition):
    """Definition assembled from plain functions.

    Example:
        >>> definition = FunctionDefinition(
        ...     start=0,
        ...     transition_fn=lambda s, d: (s * 10 + d) % 3,
        ...     accept_fn=lambda s: s == 0,
        ... )
    """

    start: Any
    transition_fn: Callable[[Any, Any], Any]
    accept_fn: Callable[[Any], bool]
    epsilon_fn: Optional[Callable[[Any], Any]] = None

    @property
    def start_state(self) -> Any:
        return self.start

    def transition(self, state: Any, symbol: Any) -> Any:
        return self.transition_fn(state, symbol)

    def accept(self, state: Any) -> bool:
        return self.accept_fn(state)

    def epsilon(self, state: Any) -> Any:
        if self.epsilon_fn is None:
            return None
        return self.epsilon_fn(state)

    @property
    def has_epsilon(self) -> bool:
        return self.epsilon_fn is not None


def _normalize(value: Any) -> List[Any]:
    """Successor values from a callable result."""
    if value is None:
        return []
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [value]


def _serialize_state(value: Any) -> str:
    if isinstance(value, list):
        raise InvalidStateValue(
            "State cannot be a list (lists are reserved for multiple states)"
        )
    try:
        return canonical_json(value)
    except (TypeError, ValueError) as e:
        raise InvalidStateValue(f"State {value!r} is not serializable: {e}") from e


def _user_symbol(symbol: Any) -> Any:
    if isinstance(symbol, str) and len(symbol) == 1 and "0" <= symbol <= "9":
        return int(symbol)
    return symbol


class NFABuilder:
    """Explores a ``StateMachineDefinition`` into an ``NFA``.

    Every user callable is called at most once per distinct input: transition
    once per (state, symbol), accept and epsilon once per state. Each call
    receives its own copy of the state value, so callables may mutate it.

    Args:
        definition: The state machine to explore.
        symbols: The alphabet. Defaults to ``config.symbol_class`` expanded.
        config: Limits and behaviour switches.
    """

    def __init__(
        self,
        definition: StateMachineDefinition,
        symbols: Optional[Sequence[Any]] = None,
        config: Config = None,
    ):
        self.definition = definition
        self.config = (config or Config.default()).validate()
        if symbols is None:
            symbols = expand_symbol_class(self.config.symbol_class)
        self.symbols = list(symbols)

    def build(self) -> NFA:
        """Explore the definition and return the automaton.

        Raises:
            StateLimitExceeded: Before a state beyond ``config.max_states``
                would be created.
            CallableFailure: If a user callable raises.
            InvalidStateValue: If a callable produces an unusable value.
        """
        nfa = NFA(self.symbols)
        definition = self.definition
        max_states = self.config.max_states
        has_epsilon = definition.has_epsilon

        state_ids: Dict[str, int] = {}
        values: Dict[int, Any] = {}

        def intern(value: Any) -> int:
            key = _serialize_state(value)
            existing = state_ids.get(key)
            if existing is not None:
                return existing
            if nfa.num_states() >= max_states:
                raise StateLimitExceeded(
                    max_states,
                    f"NFA exceeded maximum state limit ({max_states}). "
                    "Consider simplifying your state machine.",
                )
            state_id = nfa.add_state(key)
            state_ids[key] = state_id
            values[state_id] = copy.deepcopy(value)
            try:
                accepting = bool(definition.accept(copy.deepcopy(value)))
            except Exception as e:
                raise CallableFailure("accept", key, reason=str(e)) from e
            if accepting:
                nfa.add_accept(state_id)
            return state_id

        queue: Deque[int] = deque()
        for value in _normalize(definition.start_state):
            state_id = intern(value)
            nfa.add_start(state_id)
            queue.append(state_id)

        visited: Set[int] = set()
        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            value = values[current]
            label = nfa.state_labels[current]

            for symbol_index, symbol in enumerate(self.symbols):
                arg = _user_symbol(symbol) if self.config.coerce_digit_symbols else symbol
                try:
                    result = definition.transition(copy.deepcopy(value), arg)
                except Exception as e:
                    raise CallableFailure("transition", label, symbol, str(e)) from e
                for successor in _normalize(result):
                    target = intern(successor)
                    nfa.add_transition(current, target, symbol_index)
                    if target not in visited:
                        queue.append(target)

            if has_epsilon:
                try:
                    result = definition.epsilon(copy.deepcopy(value))
                except Exception as e:
                    raise CallableFailure("epsilon", label, reason=str(e)) from e
                for successor in _normalize(result):
                    target = intern(successor)
                    nfa.add_epsilon_transition(current, target)
                    if target not in visited:
                        queue.append(target)

        logger.debug(
            "Explored %d states (%d start, %d accepting, %d epsilon edges)",
            nfa.num_states(),
            len(nfa.start_states),
            len(nfa.accept_states),
            len(nfa.epsilon_transitions),
        )

        if self.config.enforce_epsilon:
            nfa.enforce_epsilon_transitions()
        return nfa


def build_nfa(
    definition: StateMachineDefinition,
    symbols: Optional[Sequence[Any]] = None,
    config: Config = None,
) -> NFA:
    """Convenience function to explore a definition into an NFA.

    Args:
        definition: The state machine to explore.
        symbols: Optional alphabet.
        config: Optional configuration.

    Returns:
        The explored (and, by default, epsilon-free) NFA.
    """
    return NFABuilder(definition, symbols, config).build()
