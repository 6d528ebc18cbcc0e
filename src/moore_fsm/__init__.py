"""
Moore machine engine.

This package provides a validated, deterministic Moore machine that can be
driven symbol by symbol or over whole inputs, plus configuration file I/O,
random machine generation and sequence utilities.
"""

from .config import FSMConfig, ProcessResult, Trace, load_config, save_config
from .errors import (
    ConflictingDefinitionError,
    FSMError,
    InvalidOutputError,
    InvalidStateError,
    InvalidSymbolError,
    NoTransitionDefinedError,
)
from .generator import GeneratorConfig, MooreMachineGenerator
from .moore_machine import FiniteStateMachine

__version__ = "0.1.0"

__all__ = [
    "FiniteStateMachine",
    "FSMConfig",
    "ProcessResult",
    "Trace",
    "load_config",
    "save_config",
    "GeneratorConfig",
    "MooreMachineGenerator",
    "FSMError",
    "InvalidStateError",
    "InvalidSymbolError",
    "NoTransitionDefinedError",
    "ConflictingDefinitionError",
    "InvalidOutputError",
]
