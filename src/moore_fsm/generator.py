"""
Random Moore machine generator.

Machines are built in two steps:
1. a random spanning tree from the initial state, so every state is
   reachable from ``q0``
2. the rest of the transition table is filled in, either completely (a total
   DFA) or with a random non-empty subset of symbols per state

States are labelled ``q0..``, symbols ``a..`` and outputs ``out_0..``.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import FSMConfig
from .moore_machine import FiniteStateMachine

logger = logging.getLogger(__name__)

MAX_SYMBOLS = len(string.ascii_lowercase)


@dataclass
class GeneratorConfig:
    """Configuration object for the Moore machine generator."""
    num_states: int = 5
    num_symbols: int = 3
    output_alphabet_size: int = 3
    num_accepting: int = 1
    complete: bool = True
    seed: Optional[int] = None


class MooreMachineGenerator:
    """Generator for random connected Moore machines."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        config = config or GeneratorConfig()

        if config.num_states < 1:
            raise ValueError("num_states must be at least 1")
        if not (1 <= config.num_symbols <= MAX_SYMBOLS):
            raise ValueError(f"num_symbols must be between 1 and {MAX_SYMBOLS}")
        if config.output_alphabet_size < 1:
            raise ValueError("output_alphabet_size must be at least 1")
        if not (0 <= config.num_accepting <= config.num_states):
            raise ValueError("num_accepting must be between 0 and num_states")

        self.config = config
        self.np_rng = np.random.RandomState(config.seed)
        self.states = [f"q{i}" for i in range(config.num_states)]
        self.symbols = list(string.ascii_lowercase[:config.num_symbols])

    def generate_config(self) -> FSMConfig[str]:
        """
        Generate a random machine description.

        Returns:
            FSMConfig whose initial state is ``q0``
        """
        table: Dict[str, Dict[str, str]] = {state: {} for state in self.states}

        # Step 1: spanning tree, each new state hangs off an already connected one
        connected = [self.states[0]]
        remaining = self.states[1:]
        while remaining:
            dst = remaining.pop(self.np_rng.randint(len(remaining)))
            candidates = [s for s in connected if len(table[s]) < len(self.symbols)]
            src = candidates[self.np_rng.randint(len(candidates))]
            table[src][self._sample_unused_symbol(table[src])] = dst
            connected.append(dst)

        # Step 2: fill in the remaining (state, symbol) pairs
        for state in self.states:
            unused = [a for a in self.symbols if a not in table[state]]
            if self.config.complete:
                chosen = unused
            else:
                # every state keeps at least one outgoing transition
                low = 0 if table[state] else 1
                count = self.np_rng.randint(low, len(unused) + 1)
                picked = self.np_rng.choice(len(unused), count, replace=False) if count else []
                chosen = [unused[i] for i in sorted(picked)]
            for symbol in chosen:
                table[state][symbol] = self.states[self.np_rng.randint(len(self.states))]

        transitions: List[Tuple[str, str, str]] = [
            (state, symbol, table[state][symbol])
            for state in self.states
            for symbol in self.symbols
            if symbol in table[state]
        ]

        output_symbols = [f"out_{i}" for i in range(self.config.output_alphabet_size)]
        outputs = [
            (state, output_symbols[self.np_rng.randint(len(output_symbols))])
            for state in self.states
        ]

        accepting_idx = sorted(
            self.np_rng.choice(len(self.states), self.config.num_accepting, replace=False)
        )

        logger.debug("Generated machine with %d states and %d transitions",
                     len(self.states), len(transitions))

        return FSMConfig(
            states=list(self.states),
            alphabet=list(self.symbols),
            initial_state=self.states[0],
            accepting_states=[self.states[i] for i in accepting_idx],
            transitions=transitions,
            outputs=outputs,
        )

    def generate(self) -> FiniteStateMachine[str]:
        """Generate a random Moore machine."""
        return FiniteStateMachine(self.generate_config())

    def generate_batch(self, batch_size: int) -> List[FiniteStateMachine[str]]:
        """Generate a batch of random Moore machines."""
        return [self.generate() for _ in range(batch_size)]

    def _sample_unused_symbol(self, state_transitions: Dict[str, str]) -> str:
        """Sample a symbol with no transition yet from the given state."""
        available = [a for a in self.symbols if a not in state_transitions]
        if not available:
            raise ValueError("Symbol alphabet exhausted. Increase num_symbols.")
        return available[self.np_rng.randint(len(available))]
