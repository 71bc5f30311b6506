"""Custom exceptions for nfalab."""

from typing import Any, Optional


class NfaLabError(Exception):
    """Base exception for all nfalab errors."""

    pass


class StateLimitExceeded(NfaLabError):
    """Raised when exploration or subset construction exceeds its state ceiling."""

    def __init__(self, limit: int, message: str = "") -> None:
        self.limit = limit
        super().__init__(message or f"State limit exceeded ({limit})")


class CallableFailure(NfaLabError):
    """Raised when a user-supplied transition, accept or epsilon callable fails.

    Attributes:
        function: Name of the failing callable.
        state: Canonical encoding of the state the callable was given.
        symbol: The symbol passed to a transition callable, if any.
    """

    def __init__(
        self, function: str, state: str, symbol: Any = None, reason: str = ""
    ) -> None:
        self.function = function
        self.state = state
        self.symbol = symbol
        if function == "transition":
            where = f"({state}, {symbol!r})"
        else:
            where = state
        super().__init__(
            f"{function.capitalize()} function raised for {where}: {reason}"
        )


class InvalidStateValue(NfaLabError):
    """Raised when a value cannot be used as an automaton state."""

    pass


class PreconditionViolation(NfaLabError):
    """Raised when an operation is applied to an automaton in the wrong phase."""

    pass


class PatternSyntaxError(NfaLabError):
    """Raised when a regex pattern or symbol class cannot be parsed."""

    def __init__(self, message: str, position: Optional[int] = -1) -> None:
        self.position = -1 if position is None else position
        super().__init__(message)

    def __str__(self) -> str:
        if self.position >= 0:
            return f"{super().__str__()} at position {self.position}"
        return super().__str__()
