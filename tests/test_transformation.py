"""Tests for state transformations (deletion, merging, composition)."""

import random

import pytest

from nfalab.automaton.transformation import DELETED, StateTransformation


def random_transformation(rng: random.Random, n: int) -> StateTransformation:
    """A valid transformation with random deletions and merges."""
    remap = list(range(n))
    canonical = []
    for i in range(n):
        roll = rng.random()
        if roll < 0.2:
            remap[i] = DELETED
        elif roll < 0.5 and canonical:
            remap[i] = rng.choice(canonical)
        else:
            canonical.append(i)
    return StateTransformation(remap)


class TestConstruction:
    """Test the transformation constructors."""

    def test_identity(self):
        t = StateTransformation.identity(4)
        assert t.remap == (0, 1, 2, 3)
        assert len(t) == 4
        assert t.canonical_states() == [0, 1, 2, 3]

    def test_identity_empty(self):
        t = StateTransformation.identity(0)
        assert len(t) == 0
        assert t.is_valid()

    def test_deletion(self):
        t = StateTransformation.deletion(4, {1, 3})
        assert t.remap == (0, DELETED, 2, DELETED)
        assert t.get_deleted_states() == {1, 3}
        assert t.get_active_states() == [0, 2]

    def test_merging_uses_smallest_member(self):
        t = StateTransformation.merging(5, [[4, 2], [1, 3]])
        assert t.remap == (0, 1, 2, 1, 2)
        assert t.groups() == {0: [0], 1: [1, 3], 2: [2, 4]}

    def test_remap_is_stored_as_tuple(self):
        t = StateTransformation([0, 0, 2])
        assert isinstance(t.remap, tuple)

    @pytest.mark.parametrize("remap", [[0, 5], [-2, 1], [3]])
    def test_out_of_range_rejected(self, remap):
        with pytest.raises(ValueError, match="out of range"):
            StateTransformation(remap)

    def test_equality(self):
        assert StateTransformation([0, 0, -1]) == StateTransformation((0, 0, -1))
        assert StateTransformation([0, 1]) != StateTransformation([0, 0])


class TestQueries:
    """Test per-state queries."""

    def test_canonical_queries(self):
        t = StateTransformation([0, 0, DELETED, 3])
        assert t.get_canonical(1) == 0
        assert t.get_canonical(2) == DELETED
        assert t.is_canonical(0)
        assert not t.is_canonical(1)
        assert t.is_deleted(2)
        assert not t.is_deleted(3)
        assert t.canonical_states() == [0, 3]

    def test_validity(self):
        assert StateTransformation([0, 0, 2]).is_valid()
        assert not StateTransformation([1, 0]).is_valid()
        assert not StateTransformation([0, 2, 1]).is_valid()

    def test_repr(self):
        assert repr(StateTransformation([0, -1])) == "StateTransformation([0, -1])"


class TestCompose:
    """Test composition of transformations."""

    def test_identity_is_neutral(self):
        t = StateTransformation([0, 0, DELETED, 3])
        identity = StateTransformation.identity(4)
        assert t.compose(identity) == t
        assert identity.compose(t) == t

    def test_deletion_in_first_propagates(self):
        first = StateTransformation.deletion(3, {1})
        second = StateTransformation.merging(3, [[0, 2]])
        assert first.compose(second).remap == (0, DELETED, 0)

    def test_deletion_in_second_propagates(self):
        first = StateTransformation.merging(3, [[0, 1]])
        second = StateTransformation.deletion(3, {0})
        assert first.compose(second).remap == (DELETED, DELETED, 2)

    def test_merges_collapse_groups(self):
        first = StateTransformation.merging(4, [[0, 1], [2, 3]])
        second = StateTransformation.merging(4, [[0, 2]])
        assert first.compose(second).remap == (0, 0, 0, 0)

    def test_merge_over_canonical_states_stays_valid(self):
        rng = random.Random(7)
        for _ in range(20):
            n = rng.randint(1, 8)
            first = random_transformation(rng, n)
            canonical = first.canonical_states()
            rng.shuffle(canonical)
            cut = rng.randint(0, len(canonical))
            second = StateTransformation.merging(n, [canonical[:cut], canonical[cut:]])
            assert first.compose(second).is_valid()

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="Cannot compose"):
            StateTransformation.identity(2).compose(StateTransformation.identity(3))

    @pytest.mark.parametrize("seed", range(20))
    def test_associativity(self, seed):
        rng = random.Random(seed)
        n = rng.randint(1, 8)
        t1, t2, t3 = (random_transformation(rng, n) for _ in range(3))
        left = t1.compose(t2).compose(t3)
        right = t1.compose(t2.compose(t3))
        assert left.remap == right.remap

    @pytest.mark.parametrize("seed", range(10))
    def test_deletion_anywhere_deletes_composite(self, seed):
        rng = random.Random(seed)
        n = rng.randint(2, 8)
        t1, t2, t3 = (random_transformation(rng, n) for _ in range(3))
        composite = t1.compose(t2).compose(t3)
        for state in range(n):
            first = t1.remap[state]
            if first == DELETED:
                assert composite.is_deleted(state)
                continue
            second = t2.remap[first]
            if second == DELETED or t3.remap[second] == DELETED:
                assert composite.is_deleted(state)
