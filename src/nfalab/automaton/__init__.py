"""Automaton store, transformations, views and the algorithms over them."""

from nfalab.automaton.nfa import NFA, ResolvedSource, RunResult, StateInfo, Transition, TransitionGroup, TraceStep
from nfalab.automaton.transformation import DELETED, StateTransformation
from nfalab.automaton.epsilon import EliminatedEpsilons, EpsilonGraph
from nfalab.automaton.minimize import equivalent_state_remap
from nfalab.automaton.builder import FunctionDefinition, NFABuilder, StateMachineDefinition, build_nfa
from nfalab.automaton.view import NFAView, ViewStats
from nfalab.automaton.dfa_builder import DFABuilder, build_dfa
from nfalab.automaton.regex_builder import RegexToNFABuilder, compile_regex

__all__ = [
    "NFA",
    "Transition",
    "TransitionGroup",
    "StateInfo",
    "TraceStep",
    "RunResult",
    "ResolvedSource",
    "DELETED",
    "StateTransformation",
    "EpsilonGraph",
    "EliminatedEpsilons",
    "equivalent_state_remap",
    "StateMachineDefinition",
    "FunctionDefinition",
    "NFABuilder",
    "build_nfa",
    "NFAView",
    "ViewStats",
    "DFABuilder",
    "build_dfa",
    "RegexToNFABuilder",
    "compile_regex",
]
