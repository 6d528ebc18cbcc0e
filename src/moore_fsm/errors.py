"""
Error kinds raised by the Moore machine engine.

Every error derives from FSMError, itself a ValueError, so callers that only
care about "bad configuration or bad input" can catch one type while callers
that need to tell the cases apart can catch the specific class.
"""

from typing import Any, Hashable


class FSMError(ValueError):
    """Base class for all Moore machine errors."""


class InvalidStateError(FSMError):
    """A referenced state is not in the declared state set."""

    def __init__(self, state: Any):
        super().__init__(f"Invalid state: {state}")
        self.state = state


class InvalidSymbolError(FSMError):
    """A referenced symbol is not in the declared alphabet."""

    def __init__(self, symbol: Any):
        super().__init__(f"Invalid input symbol: {symbol}")
        self.symbol = symbol


class NoTransitionDefinedError(FSMError):
    """Raised while processing when (state, symbol) has no transition."""

    def __init__(self, state: str, symbol: str):
        super().__init__(
            f"No transition defined for state {state} with input {symbol}"
        )
        self.state = state
        self.symbol = symbol


class ConflictingDefinitionError(FSMError):
    """A configuration defines the same transition key or output state twice."""

    def __init__(self, kind: str, key: Hashable):
        super().__init__(f"Conflicting {kind} definition for {key}")
        self.kind = kind
        self.key = key


class InvalidOutputError(FSMError):
    """A configured output value cannot be told apart from "no output"."""

    def __init__(self, state: str):
        super().__init__(f"Output for state {state} must not be None")
        self.state = state
