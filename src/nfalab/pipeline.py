"""End-to-end analysis: eliminate epsilons, prune dead states, merge, determinize."""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from nfalab.automaton.builder import StateMachineDefinition, build_nfa
from nfalab.automaton.dfa_builder import build_dfa
from nfalab.automaton.nfa import NFA
from nfalab.automaton.regex_builder import compile_regex
from nfalab.automaton.transformation import StateTransformation
from nfalab.automaton.view import NFAView
from nfalab.config import Config

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Every stage of one pipeline run.

    Attributes:
        nfa: The analysed automaton (epsilon-free unless disabled in config).
        dead: Deletion of the states that cannot reach an accept state.
        merged: ``dead`` refined by merging equivalent states.
        raw_view: Identity view of ``nfa``.
        pruned_view: View with dead states removed.
        minimized_view: View with dead states removed and equivalents merged.
        dfa: Subset construction over ``minimized_view``, if requested.
    """

    nfa: NFA
    dead: StateTransformation
    merged: StateTransformation
    raw_view: NFAView
    pruned_view: NFAView
    minimized_view: NFAView
    dfa: Optional[NFA] = None

    @property
    def final_view(self) -> NFAView:
        """The most reduced view available."""
        if self.dfa is not None:
            return NFAView(self.dfa)
        return self.minimized_view


class AutomatonPipeline:
    """Runs an automaton through the analysis stages.

    Views at each stage share the automaton; only epsilon elimination
    (in place, first) and subset construction (a new automaton) build
    anything.
    """

    def __init__(self, config: Config = None):
        self.config = (config or Config.default()).validate()

    def run(self, nfa: NFA, to_dfa: bool = False) -> PipelineResult:
        """Analyse an automaton.

        Args:
            nfa: The automaton. Its epsilon edges are eliminated in place
                when ``config.enforce_epsilon`` is set.
            to_dfa: Also determinize the minimized view.

        Returns:
            The result of every stage.
        """
        if self.config.enforce_epsilon:
            nfa.enforce_epsilon_transitions()

        dead = nfa.get_dead_states()
        merged = nfa.get_equivalent_state_remap(dead)

        result = PipelineResult(
            nfa=nfa,
            dead=dead,
            merged=merged,
            raw_view=NFAView(nfa),
            pruned_view=NFAView(nfa, dead),
            minimized_view=NFAView(nfa, merged),
        )
        if to_dfa:
            result.dfa = build_dfa(result.minimized_view, config=self.config)

        logger.debug(
            "Pipeline: %d states, %d dead, %d after merging%s",
            nfa.num_states(),
            len(dead.get_deleted_states()),
            len(merged.canonical_states()),
            f", {result.dfa.num_states()} DFA states" if result.dfa is not None else "",
        )
        return result

    def run_definition(
        self,
        definition: StateMachineDefinition,
        symbols: Optional[Sequence[Any]] = None,
        to_dfa: bool = False,
    ) -> PipelineResult:
        """Explore a state machine definition, then analyse it."""
        return self.run(build_nfa(definition, symbols, self.config), to_dfa)

    def run_regex(
        self, pattern: str, symbols: Sequence[Any], to_dfa: bool = False
    ) -> PipelineResult:
        """Compile a regex over ``symbols``, then analyse it."""
        return self.run(compile_regex(pattern, symbols), to_dfa)


def analyze_nfa(nfa: NFA, to_dfa: bool = False, config: Config = None) -> PipelineResult:
    """Convenience function to analyse an automaton.

    Args:
        nfa: The automaton.
        to_dfa: Also determinize the minimized view.
        config: Optional configuration.

    Returns:
        The result of every stage.
    """
    pipeline = AutomatonPipeline(config)
    return pipeline.run(nfa, to_dfa)
