"""
Utility functions for Moore machine sequences and inspection.
"""

from typing import List, Optional

import numpy as np

from .moore_machine import FiniteStateMachine


def generate_random_sequence(machine: FiniteStateMachine,
                             length: int,
                             seed: Optional[int] = None) -> List[str]:
    """
    Generate a random symbol sequence the machine can process.

    The sequence is a random walk from the initial state that only picks
    symbols with a defined transition, so ``machine.process`` never raises
    NoTransitionDefinedError on it. The walk stops early at a state with no
    outgoing transitions.

    Args:
        machine: Moore machine to walk
        length: Maximum number of symbols
        seed: Random seed for reproducibility

    Returns:
        List of symbols
    """
    rng = np.random.RandomState(seed)
    transitions = machine.transitions

    sequence = []
    state = machine.initial_state
    for _ in range(length):
        options = [a for a in machine.alphabet if (state, a) in transitions]
        if not options:
            break
        symbol = options[rng.randint(len(options))]
        sequence.append(symbol)
        state = transitions[(state, symbol)]

    return sequence


def find_absorbing_states(machine: FiniteStateMachine) -> List[str]:
    """
    Find absorbing states: every symbol has a transition and all of them
    lead back to the state itself. A machine with an empty alphabet has none.
    """
    if not machine.alphabet:
        return []

    transitions = machine.transitions
    return [
        state for state in machine.states
        if all(transitions.get((state, a)) == state for a in machine.alphabet)
    ]


def format_machine(machine: FiniteStateMachine) -> str:
    """Render a machine as a readable transition table."""
    absorbing = set(find_absorbing_states(machine))
    transitions = machine.transitions

    lines = [
        "=" * 60,
        "Moore Machine",
        "=" * 60,
        f"Initial state: {machine.initial_state}",
        f"Accepting states: {', '.join(machine.accepting_states) or '-'}",
        "",
        "Format: State [output] -> {Symbol: NextState, ...}",
        "-" * 60,
    ]

    for state in machine.states:
        markers = []
        if state in machine.accepting_states:
            markers.append("ACCEPTING")
        if state in absorbing:
            markers.append("ABSORBING")
        suffix = f" [{', '.join(markers)}]" if markers else ""
        output = machine.output(state) if machine.has_output(state) else "-"
        lines.append(f"\nState {state} [{output}]{suffix}:")
        for symbol in machine.alphabet:
            next_state = transitions.get((state, symbol))
            if next_state is not None:
                lines.append(f"    {symbol} -> {next_state}")

    return "\n".join(lines)
