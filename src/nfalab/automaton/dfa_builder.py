"""Subset construction over the canonical states of a view.

Each DFA state is a set of canonical NFA states and is labelled with its
sorted member ids joined by commas, which is what ``NFA.resolve_sources``
decodes. Sets with no successors on a symbol get no transition, so the DFA
is partial and carries no empty "trap" state.
"""

import logging
from collections import deque
from typing import Deque, Dict, FrozenSet, List, Optional, Set

from nfalab.automaton.nfa import NFA
from nfalab.automaton.view import NFAView
from nfalab.config import Config
from nfalab.exceptions import PreconditionViolation, StateLimitExceeded

logger = logging.getLogger(__name__)


def subset_key(states: FrozenSet[int]) -> str:
    """Label of the DFA state standing for ``states``."""
    return ",".join(str(s) for s in sorted(states))


class DFABuilder:
    """Determinizes the view of an epsilon-free NFA.

    Args:
        view: View whose canonical states become the NFA side of the
            construction. Merged states contribute the union of their
            sources' transitions.
        max_states: Upper bound on DFA states. Defaults to
            ``config.dfa_max_states``; None means unbounded.
        config: Configuration supplying the default limit.
    """

    def __init__(
        self,
        view: NFAView,
        max_states: Optional[int] = None,
        config: Config = None,
    ):
        self.view = view
        self.config = (config or Config.default()).validate()
        if max_states is None:
            max_states = self.config.dfa_max_states
        if max_states is not None and max_states <= 0:
            raise ValueError(f"max_states must be positive, got {max_states}")
        self.max_states = max_states

    def build(self) -> NFA:
        """Run the construction.

        Returns:
            A deterministic automaton whose ``parent_nfa`` is the view's NFA.

        Raises:
            PreconditionViolation: If the view still has epsilon edges.
            StateLimitExceeded: Before a DFA state beyond ``max_states``
                would be created.
        """
        view = self.view
        if view.show_epsilon_transitions or view.has_epsilon_transitions():
            raise PreconditionViolation(
                "Subset construction needs an epsilon-free view; "
                "eliminate epsilon transitions first"
            )

        nfa = view.nfa
        symbols = nfa.symbols
        dfa = NFA(symbols)
        dfa.parent_nfa = nfa

        ids: Dict[FrozenSet[int], int] = {}
        queue: Deque[FrozenSet[int]] = deque()

        def intern(members: FrozenSet[int]) -> int:
            existing = ids.get(members)
            if existing is not None:
                return existing
            if self.max_states is not None and dfa.num_states() >= self.max_states:
                raise StateLimitExceeded(
                    self.max_states,
                    f"Subset construction exceeded max_states={self.max_states}",
                )
            state_id = dfa.add_state(subset_key(members))
            ids[members] = state_id
            if any(view.is_accepting(s) for s in members):
                dfa.add_accept(state_id)
            queue.append(members)
            return state_id

        start = frozenset(s for s in view.canonical_states() if view.is_start(s))
        dfa.add_start(intern(start))

        while queue:
            members = queue.popleft()
            from_id = ids[members]
            successors: List[Set[int]] = [set() for _ in symbols]
            for state in members:
                for symbol_index, targets in view.symbol_targets(state).items():
                    successors[symbol_index] |= targets
            for symbol_index, targets in enumerate(successors):
                if targets:
                    dfa.add_transition(from_id, intern(frozenset(targets)), symbol_index)

        logger.debug(
            "Subset construction: %d canonical NFA states -> %d DFA states",
            len(view.canonical_states()),
            dfa.num_states(),
        )
        return dfa


def build_dfa(
    view: NFAView, max_states: Optional[int] = None, config: Config = None
) -> NFA:
    """Convenience function for ``DFABuilder(view, ...).build()``."""
    return DFABuilder(view, max_states, config).build()
