"""Tests for subset construction."""

import pytest

from nfalab.automaton.dfa_builder import DFABuilder, build_dfa, subset_key
from nfalab.automaton.nfa import NFA
from nfalab.automaton.regex_builder import compile_regex
from nfalab.automaton.transformation import StateTransformation
from nfalab.automaton.view import NFAView
from nfalab.config import Config
from nfalab.exceptions import PreconditionViolation, StateLimitExceeded


def is_deterministic(dfa: NFA) -> bool:
    if len(dfa.start_states) > 1:
        return False
    return all(
        len(dfa.get_transitions(state, index)) <= 1
        for state in range(dfa.num_states())
        for index in range(len(dfa.symbols))
    )


def ends_with_ab() -> NFA:
    """0 loops on a/b, 0 -a-> 1 -b-> 2 (accepting)."""
    nfa = NFA(["a", "b"])
    for _ in range(3):
        nfa.add_state()
    nfa.add_start(0)
    nfa.add_accept(2)
    nfa.add_transition(0, 0, 0)
    nfa.add_transition(0, 0, 1)
    nfa.add_transition(0, 1, 0)
    nfa.add_transition(1, 2, 1)
    return nfa


class TestSubsetConstruction:
    """Test the construction itself."""

    def test_states_and_labels(self):
        dfa = build_dfa(NFAView(ends_with_ab()))
        assert dfa.state_labels == ["0", "0,1", "0,2"]
        assert dfa.start_states == {0}
        assert dfa.accept_states == {2}

    def test_transitions(self):
        dfa = build_dfa(NFAView(ends_with_ab()))
        assert dfa.get_transitions(0, 0) == [1]
        assert dfa.get_transitions(0, 1) == [0]
        assert dfa.get_transitions(1, 1) == [2]
        assert dfa.get_transitions(2, 0) == [1]
        assert is_deterministic(dfa)

    @pytest.mark.parametrize(
        "word,accepted",
        [("ab", True), ("aab", True), ("bab", True), ("", False), ("a", False), ("aba", False)],
    )
    def test_language(self, word, accepted):
        nfa = ends_with_ab()
        dfa = build_dfa(NFAView(nfa))
        assert dfa.matches(word) is accepted
        assert nfa.matches(word) is accepted

    def test_parent_and_sources(self):
        nfa = ends_with_ab()
        dfa = build_dfa(NFAView(nfa))
        assert dfa.parent_nfa is nfa
        assert [s.id for s in dfa.resolve_sources([2])] == [0, 2]
        assert NFAView(dfa).get_state_id_prefix() == "q'"

    def test_partial_dfa_has_no_trap_state(self):
        nfa = NFA(["a", "b"])
        nfa.add_state()
        nfa.add_state()
        nfa.add_start(0)
        nfa.add_accept(1)
        nfa.add_transition(0, 1, 0)
        dfa = build_dfa(NFAView(nfa))
        assert dfa.num_states() == 2
        assert dfa.get_transitions(0, 1) == []

    def test_uses_canonical_states_of_view(self):
        nfa = ends_with_ab()
        nfa.add_state()
        nfa.add_transition(0, 3, 1)
        view = NFAView(nfa, nfa.get_dead_states())
        dfa = build_dfa(view)
        assert dfa.state_labels == ["0", "0,1", "0,2"]

    def test_merged_view(self):
        nfa = NFA(["a"])
        for _ in range(3):
            nfa.add_state()
        nfa.add_start(0)
        nfa.add_accept(1)
        nfa.add_accept(2)
        nfa.add_transition(0, 1, 0)
        nfa.add_transition(0, 2, 0)
        view = NFAView(nfa, StateTransformation.merging(3, [[1, 2]]))
        dfa = build_dfa(view)
        assert dfa.state_labels == ["0", "1"]
        assert [s.id for s in dfa.resolve_sources([1])] == [1]

    def test_regex_chain_resolves_to_regex_states(self):
        nfa = compile_regex("ab", "ab")
        dfa = build_dfa(NFAView(nfa))
        assert dfa.parent_nfa is nfa
        assert dfa.matches("ab")
        for state in range(dfa.num_states()):
            assert all(s.id < nfa.num_states() for s in dfa.resolve_sources([state]))


class TestScenario:
    """Subset construction for (a|b)*abb."""

    @pytest.mark.parametrize(
        "word,accepted",
        [("abb", True), ("aabb", True), ("babb", True), ("ab", False), ("aab", False)],
    )
    def test_language(self, word, accepted):
        dfa = build_dfa(NFAView(compile_regex("(a|b)*abb", ["a", "b"])))
        assert dfa.matches(word) is accepted
        assert is_deterministic(dfa)


class TestErrors:
    """Test the builder's error contracts."""

    def test_state_limit(self):
        with pytest.raises(StateLimitExceeded, match="exceeded max_states=1"):
            build_dfa(NFAView(ends_with_ab()), max_states=1)

    def test_state_limit_from_config(self):
        with pytest.raises(StateLimitExceeded, match="exceeded max_states=2"):
            build_dfa(NFAView(ends_with_ab()), config=Config(dfa_max_states=2))

    def test_explicit_limit_overrides_config(self):
        dfa = build_dfa(NFAView(ends_with_ab()), max_states=3, config=Config(dfa_max_states=1))
        assert dfa.num_states() == 3

    def test_invalid_limit(self):
        with pytest.raises(ValueError, match="must be positive"):
            DFABuilder(NFAView(ends_with_ab()), max_states=0)

    def test_epsilon_view_rejected(self):
        nfa = NFA(["a"])
        nfa.add_state()
        nfa.add_state()
        nfa.add_epsilon_transition(0, 1)
        nfa.enforce_epsilon_transitions()
        with pytest.raises(PreconditionViolation, match="epsilon-free"):
            build_dfa(NFAView(nfa, show_epsilon_transitions=True))

    def test_uneliminated_epsilons_rejected(self):
        nfa = NFA(["a"])
        nfa.add_state()
        nfa.add_state()
        nfa.add_epsilon_transition(0, 1)
        with pytest.raises(PreconditionViolation):
            build_dfa(NFAView(nfa))


def test_subset_key():
    assert subset_key(frozenset({3, 0, 12})) == "0,3,12"
    assert subset_key(frozenset()) == ""
