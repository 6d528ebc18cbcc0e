"""
Configuration records for Moore machines and helpers for reading and writing
them as YAML or JSON files.

The mapping form uses the JSON field names of the configuration record
(camelCase: ``initialState``, ``acceptingStates``). snake_case keys are
accepted as well when reading, since YAML files are often written that way.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

import yaml

logger = logging.getLogger(__name__)

O = TypeVar("O")

Transition = Tuple[str, str, str]


@dataclass
class FSMConfig(Generic[O]):
    """
    Declarative description of a Moore machine.

    Attributes:
        states: State labels
        alphabet: Input symbols
        initial_state: Starting state
        accepting_states: States that accept
        transitions: (from_state, symbol, to_state) triples
        outputs: (state, output) pairs
    """

    states: List[str]
    alphabet: List[str]
    initial_state: str
    accepting_states: List[str] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)
    outputs: List[Tuple[str, O]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible mapping form."""
        return {
            "states": list(self.states),
            "alphabet": list(self.alphabet),
            "initialState": self.initial_state,
            "acceptingStates": list(self.accepting_states),
            "transitions": [list(t) for t in self.transitions],
            "outputs": [[state, value] for state, value in self.outputs],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FSMConfig":
        """
        Create a config from its mapping form.

        State and symbol labels are coerced to ``str`` so that a YAML file
        writing ``alphabet: [0, 1]`` behaves like ``["0", "1"]``.

        Raises:
            KeyError: if ``states``, ``alphabet`` or the initial state is missing
        """
        transitions = []
        for entry in _lookup(data, "transitions", "transitions", []):
            from_state, symbol, to_state = entry
            transitions.append((str(from_state), str(symbol), str(to_state)))

        outputs = []
        for entry in _lookup(data, "outputs", "outputs", []):
            state, value = entry
            outputs.append((str(state), value))

        return cls(
            states=[str(s) for s in _lookup(data, "states", "states")],
            alphabet=[str(a) for a in _lookup(data, "alphabet", "alphabet")],
            initial_state=str(_lookup(data, "initialState", "initial_state")),
            accepting_states=[
                str(s) for s in _lookup(data, "acceptingStates", "accepting_states", [])
            ],
            transitions=transitions,
            outputs=outputs,
        )


_MISSING = object()


def _lookup(data: Mapping[str, Any], camel: str, snake: str, default: Any = _MISSING) -> Any:
    if camel in data:
        return data[camel]
    if snake in data:
        return data[snake]
    if default is _MISSING:
        raise KeyError(camel)
    return default


@dataclass(frozen=True)
class ProcessResult(Generic[O]):
    """Outcome of running a whole symbol sequence through a machine."""

    accepted: bool
    output: Optional[O]
    final_state: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "output": self.output,
            "finalState": self.final_state,
        }


@dataclass(frozen=True)
class Trace(Generic[O]):
    """
    State and output trajectory of a run.

    ``states`` starts with the initial state, so it is one longer than the
    consumed symbol sequence. ``outputs[i]`` is the output of ``states[i]``
    (None where the state has no output).
    """

    symbols: Tuple[str, ...]
    states: Tuple[str, ...]
    outputs: Tuple[Optional[O], ...]


def _infer_format(filepath: Path, format: str) -> str:
    if format != 'auto':
        return format
    ext = filepath.suffix.lower()
    if ext in ['.yaml', '.yml']:
        return 'yaml'
    if ext == '.json':
        return 'json'
    raise ValueError(f"Cannot infer format from extension: {ext}")


def load_config(filepath: Union[str, Path], format: str = 'auto') -> FSMConfig:
    """
    Load a machine configuration from file.

    Args:
        filepath: Path to a YAML or JSON file
        format: 'yaml', 'json' or 'auto' (inferred from the extension)

    Returns:
        Parsed FSMConfig
    """
    filepath = Path(filepath)
    format = _infer_format(filepath, format)

    if format == 'yaml':
        with open(filepath, 'r') as f:
            data = yaml.safe_load(f)
    elif format == 'json':
        with open(filepath, 'r') as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported format: {format}")

    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {filepath} does not contain a mapping")

    logger.debug("Loaded %s config from %s", format, filepath)
    return FSMConfig.from_dict(data)


def save_config(config: Union[FSMConfig, Mapping[str, Any]],
                filepath: Union[str, Path],
                format: str = 'auto') -> None:
    """
    Save a machine configuration to file, creating parent directories.

    Args:
        config: FSMConfig or its mapping form
        filepath: Destination path
        format: 'yaml', 'json' or 'auto' (inferred from the extension)
    """
    filepath = Path(filepath)
    format = _infer_format(filepath, format)
    data = config.to_dict() if isinstance(config, FSMConfig) else dict(config)

    filepath.parent.mkdir(parents=True, exist_ok=True)

    if format == 'yaml':
        with open(filepath, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False)
    elif format == 'json':
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.debug("Saved %s config to %s", format, filepath)


def as_config(data: Union[FSMConfig, Mapping[str, Any]]) -> FSMConfig:
    """Accept either an FSMConfig or its mapping form."""
    if isinstance(data, FSMConfig):
        return data
    if isinstance(data, Mapping):
        return FSMConfig.from_dict(data)
    raise TypeError(f"Cannot build FSMConfig from {type(data).__name__}")
