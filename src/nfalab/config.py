"""Configuration for automaton construction."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_STATES = 1000


@dataclass
class Config:
    """Limits and behaviour switches shared by the builders.

    Attributes:
        max_states: Maximum number of states exploration may create.
        dfa_max_states: Maximum number of DFA states subset construction may
            create (None for unbounded).
        symbol_class: Compact character class used as the alphabet when no
            explicit symbols are given.
        coerce_digit_symbols: Pass single decimal digit symbols to user
            callables as integers.
        enforce_epsilon: Fold epsilon transitions into the automaton before
            the exploration builder returns it.
    """

    max_states: int = DEFAULT_MAX_STATES
    dfa_max_states: Optional[int] = None
    symbol_class: str = "0-9"
    coerce_digit_symbols: bool = True
    enforce_epsilon: bool = True

    @classmethod
    def default(cls) -> "Config":
        """Return the default configuration."""
        return cls()

    def validate(self) -> "Config":
        if self.max_states <= 0:
            raise ValueError(f"max_states must be positive, got {self.max_states}")
        if self.dfa_max_states is not None and self.dfa_max_states <= 0:
            raise ValueError(
                f"dfa_max_states must be positive, got {self.dfa_max_states}"
            )
        return self
