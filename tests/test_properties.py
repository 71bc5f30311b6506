"""Property tests over small random automata.

Every property is checked exhaustively on all words up to a fixed length,
for automata drawn from seeded generators so that failures reproduce.
"""

import itertools
import random
from typing import Iterator, Set

import pytest

from nfalab.automaton.builder import FunctionDefinition, build_nfa
from nfalab.automaton.dfa_builder import build_dfa
from nfalab.automaton.nfa import NFA
from nfalab.automaton.view import NFAView

SYMBOLS = ["a", "b"]
MAX_WORD_LENGTH = 4
SEEDS = range(40)


def random_nfa(seed: int, epsilon: bool = True) -> NFA:
    rng = random.Random(seed)
    n = rng.randint(1, 6)
    nfa = NFA(SYMBOLS)
    for _ in range(n):
        nfa.add_state()
    for state in range(n):
        if rng.random() < 0.3:
            nfa.add_start(state)
        if rng.random() < 0.3:
            nfa.add_accept(state)
        for index in range(len(SYMBOLS)):
            for target in range(n):
                if rng.random() < 0.25:
                    nfa.add_transition(state, target, index)
        if epsilon:
            for target in range(n):
                if rng.random() < 0.15:
                    nfa.add_epsilon_transition(state, target)
    if not nfa.start_states:
        nfa.add_start(0)
    return nfa


def all_words() -> Iterator[str]:
    for length in range(MAX_WORD_LENGTH + 1):
        for letters in itertools.product(SYMBOLS, repeat=length):
            yield "".join(letters)


def can_reach_accept(nfa: NFA, state: int) -> bool:
    """Forward search over transitions and epsilon edges."""
    seen: Set[int] = {state}
    stack = [state]
    while stack:
        current = stack.pop()
        if nfa.is_accepting(current):
            return True
        successors = set(nfa.epsilon_transitions.targets(current))
        for targets in nfa.symbol_targets(current).values():
            successors.update(targets)
        for target in successors - seen:
            seen.add(target)
            stack.append(target)
    return False


def accepts_from(nfa: NFA, state: int, word: str) -> bool:
    probe = nfa.clone()
    probe.start_states = {state}
    return probe.matches(word)


@pytest.mark.parametrize("seed", SEEDS)
def test_dead_state_soundness(seed):
    nfa = random_nfa(seed)
    dead = nfa.get_dead_states()
    for state in range(nfa.num_states()):
        assert dead.is_deleted(state) == (not can_reach_accept(nfa, state)), state


@pytest.mark.parametrize("seed", SEEDS)
def test_epsilon_elimination_equivalence(seed):
    nfa = random_nfa(seed)
    before = nfa.clone()
    nfa.enforce_epsilon_transitions()
    raw_view = NFAView(nfa, show_epsilon_transitions=True)
    view = NFAView(nfa)
    for word in all_words():
        expected = before.matches(word)
        assert nfa.matches(word) == expected, word
        assert raw_view.matches(word) == expected, word
        assert view.matches(word) == expected, word


@pytest.mark.parametrize("seed", SEEDS)
def test_subset_construction_equivalence(seed):
    nfa = random_nfa(seed)
    nfa.enforce_epsilon_transitions()
    dfa = build_dfa(NFAView(nfa))
    assert len(dfa.start_states) == 1
    for state in range(dfa.num_states()):
        for index in range(len(SYMBOLS)):
            assert len(dfa.get_transitions(state, index)) <= 1
    for word in all_words():
        assert dfa.matches(word) == nfa.matches(word), word


@pytest.mark.parametrize("seed", SEEDS)
def test_subset_construction_over_minimized_view(seed):
    nfa = random_nfa(seed)
    nfa.enforce_epsilon_transitions()
    merged = nfa.get_equivalent_state_remap(nfa.get_dead_states())
    dfa = build_dfa(NFAView(nfa, merged))
    for word in all_words():
        assert dfa.matches(word) == nfa.matches(word), word


@pytest.mark.parametrize("seed", SEEDS)
def test_minimization_safety(seed):
    nfa = random_nfa(seed)
    nfa.enforce_epsilon_transitions()
    merged = nfa.get_equivalent_state_remap(nfa.get_dead_states())
    assert merged.is_valid()

    view = NFAView(nfa, merged)
    for word in all_words():
        assert view.matches(word) == nfa.matches(word), word

    for members in merged.groups().values():
        for p, q in itertools.combinations(members, 2):
            for word in all_words():
                assert accepts_from(nfa, p, word) == accepts_from(nfa, q, word), (p, q, word)


@pytest.mark.parametrize("seed", SEEDS)
def test_exploration_is_deterministic(seed):
    rng = random.Random(seed)
    modulus = rng.randint(2, 7)
    step = rng.randint(1, 5)

    def definition():
        return FunctionDefinition(
            start=0,
            transition_fn=lambda s, c: [(s + step) % modulus, (s * 2) % modulus] if c == "a" else s,
            accept_fn=lambda s: s == 0,
        )

    first = build_nfa(definition(), symbols=SYMBOLS)
    second = build_nfa(definition(), symbols=SYMBOLS)
    assert first.state_labels == second.state_labels
    assert first.get_all_transitions() == second.get_all_transitions()
