"""Equivalence minimization by partition refinement.

States are split by acceptance first. Each round, a state's signature is its
current block plus the set of ``(symbol, block of target)`` pairs it can
take; states sharing a signature stay together. Rounds repeat until the
number of blocks stops growing, which takes at most one round per state.
The coarsest stable partition merges exactly the states that simulate each
other step for step, so acceptance of every input is preserved.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from nfalab.automaton.transformation import DELETED, StateTransformation

if TYPE_CHECKING:
    from nfalab.automaton.nfa import NFA

logger = logging.getLogger(__name__)

# Symbol index used for epsilon edges in signatures.
EPSILON_INDEX = -1

Signature = Tuple[int, Tuple[Tuple[int, int], ...]]


def _canonical_edges(
    nfa: "NFA", transform: StateTransformation, sources: List[int]
) -> Set[Tuple[int, int]]:
    """``(symbol index, canonical target)`` pairs leaving a merged group."""
    edges: Set[Tuple[int, int]] = set()
    for state in sources:
        for symbol_index, targets in nfa.symbol_targets(state).items():
            for target in targets:
                canonical = transform.remap[target]
                if canonical != DELETED:
                    edges.add((symbol_index, canonical))
        for target in nfa.epsilon_transitions.targets(state):
            canonical = transform.remap[target]
            if canonical != DELETED:
                edges.add((EPSILON_INDEX, canonical))
    return edges


def equivalent_state_remap(
    nfa: "NFA", existing: Optional[StateTransformation] = None
) -> StateTransformation:
    """Compute a transformation merging behaviourally identical states.

    Args:
        nfa: The automaton.
        existing: Transformation to refine (e.g. a dead-state deletion).
            Its deletions are kept, and merges are computed between its
            canonical states.

    Returns:
        A transformation equal to ``existing`` followed by the merge.
    """
    n = nfa.num_states()
    if existing is None:
        existing = StateTransformation.identity(n)
    if len(existing) != n:
        raise ValueError(
            f"Transformation covers {len(existing)} states, automaton has {n}"
        )

    groups = existing.groups()
    canonical = sorted(groups)
    edges = {c: _canonical_edges(nfa, existing, groups[c]) for c in canonical}
    block: Dict[int, int] = {
        c: 0 if any(nfa.is_accepting(s) for s in groups[c]) else 1 for c in canonical
    }
    num_blocks = len(set(block.values()))

    rounds = 0
    while True:
        rounds += 1
        signatures: Dict[Signature, int] = {}
        refined: Dict[int, int] = {}
        for c in canonical:
            moves = tuple(sorted({(symbol, block[t]) for symbol, t in edges[c]}))
            signature = (block[c], moves)
            refined[c] = signatures.setdefault(signature, len(signatures))
        block = refined
        if len(signatures) == num_blocks:
            break
        num_blocks = len(signatures)

    representative: Dict[int, int] = {}
    for c in canonical:
        representative.setdefault(block[c], c)

    remap = [
        DELETED if v == DELETED else representative[block[v]] for v in existing.remap
    ]
    logger.debug(
        "Equivalence merge: %d canonical states -> %d blocks in %d rounds",
        len(canonical),
        num_blocks,
        rounds,
    )
    return StateTransformation(remap)
