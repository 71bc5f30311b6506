"""State transformations: deletion and merging of automaton states as remaps."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

DELETED = -1


@dataclass(frozen=True)
class StateTransformation:
    """Remap from an automaton's state ids to canonical ids.

    ``remap[i] == -1`` means state ``i`` is deleted. Otherwise ``remap[i]`` is
    the canonical state ``i`` is merged into; canonical states map to
    themselves.

    Attributes:
        remap: Canonical id (or -1) for every state of the automaton.
    """

    remap: Tuple[int, ...]

    def __init__(self, remap: Iterable[int]) -> None:
        values = tuple(int(v) for v in remap)
        n = len(values)
        for i, v in enumerate(values):
            if v < DELETED or v >= n:
                raise ValueError(f"remap[{i}] = {v} is out of range for {n} states")
        object.__setattr__(self, "remap", values)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, n: int) -> "StateTransformation":
        """Transformation that keeps every one of ``n`` states as is."""
        return cls(range(n))

    @classmethod
    def deletion(cls, n: int, deleted: Iterable[int]) -> "StateTransformation":
        """Transformation that deletes the given states and keeps the rest."""
        deleted_set = set(deleted)
        return cls(DELETED if i in deleted_set else i for i in range(n))

    @classmethod
    def merging(
        cls, n: int, groups: Iterable[Iterable[int]]
    ) -> "StateTransformation":
        """Transformation merging each group into its smallest member."""
        remap = list(range(n))
        for group in groups:
            members = sorted(set(group))
            if not members:
                continue
            for state in members:
                remap[state] = members[0]
        return cls(remap)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.remap)

    def get_canonical(self, state: int) -> int:
        """Canonical id for a state, or -1 if it is deleted."""
        return self.remap[state]

    def is_deleted(self, state: int) -> bool:
        """Whether the state is removed by this transformation."""
        return self.remap[state] == DELETED

    def is_canonical(self, state: int) -> bool:
        """Whether the state maps to itself."""
        return self.remap[state] == state

    def get_deleted_states(self) -> Set[int]:
        return {i for i, v in enumerate(self.remap) if v == DELETED}

    def get_active_states(self) -> List[int]:
        """States that are not deleted, in id order."""
        return [i for i, v in enumerate(self.remap) if v != DELETED]

    def canonical_states(self) -> List[int]:
        """States that map to themselves, in id order."""
        return [i for i, v in enumerate(self.remap) if v == i]

    def groups(self) -> Dict[int, List[int]]:
        """Map each canonical state to the states merged into it."""
        result: Dict[int, List[int]] = {}
        for i, v in enumerate(self.remap):
            if v != DELETED:
                result.setdefault(v, []).append(i)
        return result

    def is_valid(self) -> bool:
        """Check that every canonical value is a fixed point."""
        return all(v == DELETED or self.remap[v] == v for v in self.remap)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(self, other: "StateTransformation") -> "StateTransformation":
        """Apply ``self`` and then ``other``.

        A deletion in either transformation deletes the state in the result.
        Merges made by ``other`` collapse the groups formed by ``self``. The
        result is valid when ``other`` only merges states that are canonical
        in ``self``.

        Raises:
            ValueError: If the transformations cover different state counts.
        """
        if len(other) != len(self):
            raise ValueError(
                f"Cannot compose transformations of {len(self)} and {len(other)} states"
            )
        return StateTransformation(
            DELETED if v == DELETED else other.remap[v] for v in self.remap
        )

    def __repr__(self) -> str:
        return f"StateTransformation({list(self.remap)!r})"

