"""
nfalab - Build, inspect and reduce finite automata in Python.

Automata are explored from three plain callables (transition, accept and an
optional epsilon relation) over a finite alphabet, or compiled from a regular
expression. They can then be pruned of dead states, merged down to
equivalence classes and determinized, all through read-only views.

Example usage:
    >>> from nfalab import FunctionDefinition, build_nfa
    >>> nfa = build_nfa(FunctionDefinition(
    ...     start=0,
    ...     transition_fn=lambda s, d: (s * 10 + d) % 3,
    ...     accept_fn=lambda s: s == 0,
    ... ))
    >>> nfa.matches("123")
    True

Regular expressions:
    >>> from nfalab import analyze_nfa, compile_regex
    >>> result = analyze_nfa(compile_regex("(a|b)*abb", "ab"), to_dfa=True)
    >>> result.dfa.matches("babb")
    True
"""

import logging

from nfalab.automaton.builder import FunctionDefinition, NFABuilder, StateMachineDefinition, build_nfa
from nfalab.automaton.dfa_builder import DFABuilder, build_dfa
from nfalab.automaton.nfa import NFA, RunResult, StateInfo, Transition, TraceStep
from nfalab.automaton.regex_builder import RegexToNFABuilder, compile_regex
from nfalab.automaton.transformation import StateTransformation
from nfalab.automaton.view import NFAView, ViewStats
from nfalab.config import Config
from nfalab.exceptions import (
    CallableFailure,
    InvalidStateValue,
    NfaLabError,
    PatternSyntaxError,
    PreconditionViolation,
    StateLimitExceeded,
)
from nfalab.parser.parser import RegexParser, parse
from nfalab.pipeline import AutomatonPipeline, PipelineResult, analyze_nfa
from nfalab.symbols import expand_symbol_class

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Construction
    "StateMachineDefinition",
    "FunctionDefinition",
    "NFABuilder",
    "build_nfa",
    "RegexParser",
    "parse",
    "RegexToNFABuilder",
    "compile_regex",
    "expand_symbol_class",
    # Automata and views
    "NFA",
    "Transition",
    "StateInfo",
    "TraceStep",
    "RunResult",
    "StateTransformation",
    "NFAView",
    "ViewStats",
    # Reduction
    "DFABuilder",
    "build_dfa",
    "AutomatonPipeline",
    "PipelineResult",
    "analyze_nfa",
    # Configuration
    "Config",
    # Exceptions
    "NfaLabError",
    "StateLimitExceeded",
    "CallableFailure",
    "InvalidStateValue",
    "PreconditionViolation",
    "PatternSyntaxError",
    # Version
    "__version__",
]
