"""
Moore machine engine.

A Moore machine is a finite state automaton whose output depends only on the
current state, not on the input. The engine validates a declarative
configuration once, builds its lookup tables and can then be driven in two
ways over the same transition table:

- pure queries that take an explicit state (``step_from``, ``is_accepting``,
  ``output`` with a state argument, ``trace``)
- a stateful view around ``current_state`` (``advance``, ``process``,
  ``reset`` and the no-argument forms of ``is_accepting`` / ``output``)
"""

from __future__ import annotations

import json
import logging
from collections import deque
from typing import Any, Dict, Generic, Hashable, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar, Union

from .config import FSMConfig, ProcessResult, Trace, Transition, as_config
from .errors import (
    ConflictingDefinitionError,
    InvalidOutputError,
    InvalidStateError,
    InvalidSymbolError,
    NoTransitionDefinedError,
)

logger = logging.getLogger(__name__)

O = TypeVar("O")


class FiniteStateMachine(Generic[O]):
    """
    Deterministic Moore machine with a caller-chosen output type.

    States, alphabet, accepting states, transitions and outputs are fixed at
    construction and only read afterwards. ``current_state`` is the single
    mutable field; an instance shared between threads needs external locking
    around the stateful methods.

    Attributes:
        initial_state: Starting state
        current_state: State the machine is positioned at
    """

    def __init__(self, config: FSMConfig[O]):
        """
        Build and validate a machine.

        Args:
            config: Machine description

        Raises:
            InvalidStateError: initial, accepting, output or transition state undeclared
            InvalidSymbolError: transition symbol undeclared
            ConflictingDefinitionError: duplicate transition key or output state
            InvalidOutputError: output value is None
        """
        # dicts double as insertion-ordered sets
        self._states: Dict[str, None] = dict.fromkeys(config.states)
        self._alphabet: Dict[str, None] = dict.fromkeys(config.alphabet)
        self._accepting: Dict[str, None] = dict.fromkeys(config.accepting_states)
        self._initial_state = config.initial_state
        self._transitions: Dict[Tuple[str, str], str] = {}
        self._outputs: Dict[str, O] = {}

        self._validate_states(config)
        self._build_transition_table(config.transitions)
        self._build_output_table(config.outputs)

        self._max_symbol_len = max((len(s) for s in self._alphabet), default=0)
        self._current_state = self._initial_state

        logger.debug(
            "Built FSM with %d states, %d symbols, %d transitions, %d outputs",
            len(self._states), len(self._alphabet),
            len(self._transitions), len(self._outputs),
        )

    def _validate_states(self, config: FSMConfig[O]) -> None:
        if not self.is_valid_state(self._initial_state):
            raise InvalidStateError(self._initial_state)

        for state in config.accepting_states:
            if not self.is_valid_state(state):
                raise InvalidStateError(state)

    def _build_transition_table(self, transitions: Iterable[Transition]) -> None:
        for from_state, symbol, to_state in transitions:
            if not self.is_valid_state(from_state):
                raise InvalidStateError(from_state)
            if not self.is_valid_state(to_state):
                raise InvalidStateError(to_state)
            if not self.is_valid_symbol(symbol):
                raise InvalidSymbolError(symbol)

            key = (from_state, symbol)
            if key in self._transitions:
                raise ConflictingDefinitionError("transition", key)
            self._transitions[key] = to_state

    def _build_output_table(self, outputs: Iterable[Tuple[str, O]]) -> None:
        for state, value in outputs:
            if not self.is_valid_state(state):
                raise InvalidStateError(state)
            if state in self._outputs:
                raise ConflictingDefinitionError("output", state)
            if value is None:
                raise InvalidOutputError(state)
            self._outputs[state] = value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FiniteStateMachine":
        """Create a machine from the mapping form of its configuration."""
        return cls(FSMConfig.from_dict(data))

    @classmethod
    def from_structure(cls, structure: Union[str, Mapping[str, Any], FSMConfig]) -> "FiniteStateMachine":
        """Rebuild a machine from any form ``export_structure`` produces."""
        if isinstance(structure, str):
            structure = json.loads(structure)
        return cls(as_config(structure))

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def is_valid_state(self, state: Hashable) -> bool:
        """Check if a state is declared."""
        try:
            return state in self._states
        except TypeError:
            return False

    def is_valid_symbol(self, symbol: Hashable) -> bool:
        """Check if a symbol is in the alphabet."""
        try:
            return symbol in self._alphabet
        except TypeError:
            return False

    def _require_state(self, state: str) -> str:
        if not self.is_valid_state(state):
            raise InvalidStateError(state)
        return state

    def _require_symbol(self, symbol: str) -> str:
        if not self.is_valid_symbol(symbol):
            raise InvalidSymbolError(symbol)
        return symbol

    # ------------------------------------------------------------------
    # Pure queries
    # ------------------------------------------------------------------

    def step_from(self, state: str, symbol: str) -> Optional[str]:
        """
        Look up the destination of a transition without moving the machine.

        Args:
            state: Source state
            symbol: Input symbol

        Returns:
            Destination state, or None if no transition is defined

        Raises:
            InvalidStateError: if the state is undeclared
            InvalidSymbolError: if the symbol is undeclared
        """
        self._require_state(state)
        self._require_symbol(symbol)
        return self._transitions.get((state, symbol))

    def is_accepting(self, state: Optional[str] = None) -> bool:
        """
        Check whether a state (default: the current state) is accepting.

        Raises:
            InvalidStateError: if an explicit state is undeclared
        """
        if state is None:
            state = self._current_state
        else:
            self._require_state(state)
        return state in self._accepting

    def output(self, state: Optional[str] = None) -> Optional[O]:
        """
        Output of a state (default: the current state), or None if it has none.

        Raises:
            InvalidStateError: if an explicit state is undeclared
        """
        if state is None:
            state = self._current_state
        else:
            self._require_state(state)
        return self._outputs.get(state)

    def has_output(self, state: Optional[str] = None) -> bool:
        """Check whether a state (default: the current state) has an output."""
        if state is None:
            state = self._current_state
        else:
            self._require_state(state)
        return state in self._outputs

    # ------------------------------------------------------------------
    # Stateful driving
    # ------------------------------------------------------------------

    @property
    def current_state(self) -> str:
        return self._current_state

    @property
    def initial_state(self) -> str:
        return self._initial_state

    def advance(self, symbol: str) -> Optional[str]:
        """
        Move the machine along one symbol.

        Returns:
            The new current state, or None if no transition is defined (the
            current state is then left unchanged)

        Raises:
            InvalidSymbolError: if the symbol is undeclared
        """
        self._require_symbol(symbol)
        next_state = self._transitions.get((self._current_state, symbol))
        if next_state is not None:
            self._current_state = next_state
        return next_state

    def reset(self) -> None:
        """Put the machine back at its initial state."""
        self._current_state = self._initial_state

    def process(self, symbols: Union[str, Iterable[str]]) -> ProcessResult[O]:
        """
        Run a whole input through the machine, starting from the initial state.

        A ``str`` input is split into alphabet symbols with ``tokenize``; any
        other iterable is consumed one element per symbol. On error the
        machine stays at the last state it reached.

        Args:
            symbols: Input string or sequence of symbols

        Returns:
            ProcessResult with acceptance, output and final state

        Raises:
            InvalidSymbolError: if a symbol is not in the alphabet
            NoTransitionDefinedError: if a step has no transition
        """
        self.reset()
        for symbol in self._symbols(symbols):
            if self.advance(symbol) is None:
                raise NoTransitionDefinedError(self._current_state, symbol)

        result = ProcessResult(
            accepted=self.is_accepting(),
            output=self.output(),
            final_state=self._current_state,
        )
        logger.debug("Processed input, final state %s (accepted=%s)",
                     result.final_state, result.accepted)
        return result

    def trace(self, symbols: Union[str, Iterable[str]]) -> Trace[O]:
        """
        Run an input from the initial state and record the trajectory.

        Unlike ``process`` this does not touch ``current_state``.

        Returns:
            Trace with consumed symbols, visited states and their outputs

        Raises:
            InvalidSymbolError: if a symbol is not in the alphabet
            NoTransitionDefinedError: if a step has no transition
        """
        consumed = []
        states = [self._initial_state]
        state = self._initial_state

        for symbol in self._symbols(symbols):
            next_state = self.step_from(state, symbol)
            if next_state is None:
                raise NoTransitionDefinedError(state, symbol)
            consumed.append(symbol)
            states.append(next_state)
            state = next_state

        return Trace(
            symbols=tuple(consumed),
            states=tuple(states),
            outputs=tuple(self._outputs.get(s) for s in states),
        )

    def _symbols(self, symbols: Union[str, Iterable[str]]) -> Iterator[str]:
        if isinstance(symbols, str):
            return self.tokenize(symbols)
        return iter(symbols)

    def tokenize(self, text: str) -> Iterator[str]:
        """
        Split text into alphabet symbols.

        Among all complete splits, the one taking the shortest possible
        symbol at each position is chosen, so one-character symbols win
        whenever the rest of the text still splits (``"ab"`` over
        ``{a, b, ab}`` reads as ``a``, ``b``). Longer symbols are used only
        where a shorter choice would leave an unsplittable remainder.

        When no complete split exists, the symbols of the longest splittable
        prefix are yielded first and the error comes after them.

        Raises:
            InvalidSymbolError: naming the first character no symbol covers,
                or the character where the longest splittable prefix ends
        """
        matches = [self._symbols_at(text, pos) for pos in range(len(text))]

        split = self._split(matches, len(text))
        if split is not None:
            yield from split
            return

        reachable = [False] * (len(text) + 1)
        reachable[0] = True
        covered = [False] * len(text)
        for pos, symbols in enumerate(matches):
            for symbol in symbols:
                covered[pos:pos + len(symbol)] = [True] * len(symbol)
                if reachable[pos]:
                    reachable[pos + len(symbol)] = True

        furthest = max(pos for pos, ok in enumerate(reachable) if ok)
        yield from self._split(matches, furthest)
        bad = covered.index(False) if not all(covered) else furthest
        raise InvalidSymbolError(text[bad])

    def _symbols_at(self, text: str, pos: int) -> List[str]:
        """Alphabet symbols starting at ``pos``, shortest first."""
        longest = min(self._max_symbol_len, len(text) - pos)
        return [
            text[pos:pos + n] for n in range(1, longest + 1)
            if text[pos:pos + n] in self._alphabet
        ]

    @staticmethod
    def _split(matches: List[List[str]], end: int) -> Optional[List[str]]:
        """Shortest-first split of the first ``end`` characters, or None."""
        # splittable[pos]: text[pos:end] splits into symbols
        splittable = [False] * (end + 1)
        splittable[end] = True
        for pos in range(end - 1, -1, -1):
            splittable[pos] = any(
                pos + len(s) <= end and splittable[pos + len(s)] for s in matches[pos]
            )
        if not splittable[0]:
            return None

        split = []
        pos = 0
        while pos < end:
            symbol = next(
                s for s in matches[pos] if pos + len(s) <= end and splittable[pos + len(s)]
            )
            split.append(symbol)
            pos += len(symbol)
        return split

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def states(self) -> Tuple[str, ...]:
        return tuple(self._states)

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return tuple(self._alphabet)

    @property
    def accepting_states(self) -> Tuple[str, ...]:
        return tuple(self._accepting)

    @property
    def transitions(self) -> Dict[Tuple[str, str], str]:
        return dict(self._transitions)

    @property
    def outputs(self) -> Dict[str, O]:
        return dict(self._outputs)

    def reachable_states(self, start: Optional[str] = None) -> List[str]:
        """
        States reachable from ``start`` (default: the initial state),
        including ``start`` itself, in declaration order.
        """
        start = self._initial_state if start is None else self._require_state(start)

        successors: Dict[str, List[str]] = {}
        for (from_state, _), to_state in self._transitions.items():
            successors.setdefault(from_state, []).append(to_state)

        seen = {start}
        queue = deque([start])
        while queue:
            for next_state in successors.get(queue.popleft(), []):
                if next_state not in seen:
                    seen.add(next_state)
                    queue.append(next_state)

        return [s for s in self._states if s in seen]

    def to_config(self) -> FSMConfig[O]:
        """Rebuild the configuration record, in declaration order."""
        return FSMConfig(
            states=list(self._states),
            alphabet=list(self._alphabet),
            initial_state=self._initial_state,
            accepting_states=list(self._accepting),
            transitions=[(s, a, t) for (s, a), t in self._transitions.items()],
            outputs=list(self._outputs.items()),
        )

    def export_structure(self, format: str = "json") -> Union[str, FSMConfig[O], Dict[str, Any]]:
        """
        Return the structure of the machine.

        Args:
            format: 'json' for JSON text, 'object' for an FSMConfig,
                'dict' for the JSON-compatible mapping

        Returns:
            The structure in the requested format
        """
        if format == "object":
            return self.to_config()
        if format == "dict":
            return self.to_config().to_dict()
        if format == "json":
            return json.dumps(self.to_config().to_dict(), indent=2)
        raise ValueError(f"Unsupported format: {format}")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(states={len(self._states)}, "
            f"alphabet={len(self._alphabet)}, current_state={self._current_state!r})"
        )
