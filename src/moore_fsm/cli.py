"""
Command line front end for Moore machines.

    moore-fsm run configs/traffic_light.yaml NextNextNext
    moore-fsm run configs/binary.yaml 0,0,1 --symbols
    moore-fsm export configs/traffic_light.yaml --format yaml
    moore-fsm generate --states 5 --symbols 3 --seed 42 --output machine.yaml
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import yaml

from .config import load_config, save_config
from .errors import FSMError
from .fsm_utils import format_machine
from .generator import GeneratorConfig, MooreMachineGenerator
from .moore_machine import FiniteStateMachine

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file) if log_file else logging.NullHandler()
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="moore-fsm", description="Run and inspect Moore machines")
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    run = subparsers.add_parser('run', help='Process an input and print the result')
    run.add_argument('config', type=str, help='Path to YAML or JSON machine config')
    run.add_argument('input', type=str, help='Input string')
    run.add_argument('--symbols', action='store_true',
                     help='Treat input as a comma-separated list of symbols')

    export = subparsers.add_parser('export', help='Print the machine structure')
    export.add_argument('config', type=str, help='Path to YAML or JSON machine config')
    export.add_argument('--format', type=str, default='json', choices=['json', 'yaml'],
                        help='Output format')

    generate = subparsers.add_parser('generate', help='Generate a random machine')
    generate.add_argument('--states', type=int, default=5, help='Number of states')
    generate.add_argument('--symbols', type=int, default=3, help='Alphabet size')
    generate.add_argument('--outputs', type=int, default=3, help='Output alphabet size')
    generate.add_argument('--accepting', type=int, default=1, help='Number of accepting states')
    generate.add_argument('--partial', action='store_true',
                          help='Leave some transitions undefined')
    generate.add_argument('--seed', type=int, default=None, help='Random seed')
    generate.add_argument('--output', type=str, default=None,
                          help='Write the config here (.yaml/.json) instead of printing a table')

    return parser


def _run(args) -> int:
    machine = FiniteStateMachine(load_config(args.config))
    if args.symbols:
        symbols = args.input.split(',') if args.input else []
    else:
        symbols = args.input

    result = machine.process(symbols)
    logger.info("Input %r ended in %s", args.input, result.final_state)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def _export(args) -> int:
    machine = FiniteStateMachine(load_config(args.config))
    if args.format == 'yaml':
        print(yaml.safe_dump(machine.export_structure('dict'), sort_keys=False), end='')
    else:
        print(machine.export_structure('json'))
    return 0


def _generate(args) -> int:
    generator = MooreMachineGenerator(GeneratorConfig(
        num_states=args.states,
        num_symbols=args.symbols,
        output_alphabet_size=args.outputs,
        num_accepting=args.accepting,
        complete=not args.partial,
        seed=args.seed,
    ))
    config = generator.generate_config()

    if args.output:
        save_config(config, args.output)
        logger.info("Saved generated machine to %s", args.output)
    else:
        print(format_machine(FiniteStateMachine(config)))
    return 0


COMMANDS = {
    'run': _run,
    'export': _export,
    'generate': _generate,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        return COMMANDS[args.command](args)
    except FSMError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 2
    except (OSError, yaml.YAMLError, ValueError, KeyError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
