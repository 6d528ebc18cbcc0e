"""
Tests for the moore-fsm command line front end.
"""

import json
import logging
from pathlib import Path

import pytest
import yaml

from moore_fsm import load_config
from moore_fsm.cli import main

CONFIG_DIR = Path(__file__).parent.parent / "configs"
TRAFFIC_LIGHT = str(CONFIG_DIR / "traffic_light.yaml")
BINARY = str(CONFIG_DIR / "binary_00.json")


@pytest.fixture(autouse=True)
def root_logger():
    """Restore the root logger after main() reconfigures it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestRun:
    """The run subcommand."""

    def test_run_string(self, capsys):
        assert main(["run", TRAFFIC_LIGHT, "NextNextNext"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result == {"accepted": True, "output": "Stop", "finalState": "Red"}

    def test_run_symbol_list(self, capsys):
        assert main(["run", BINARY, "0,0,1", "--symbols"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["finalState"] == "C"

    def test_run_empty_symbol_list(self, capsys):
        assert main(["run", BINARY, "", "--symbols"]) == 0
        assert json.loads(capsys.readouterr().out)["finalState"] == "A"

    def test_run_invalid_symbol(self, capsys):
        assert main(["run", BINARY, "002"]) == 2
        assert capsys.readouterr().out == ""

    def test_run_missing_config(self, tmp_path):
        assert main(["run", str(tmp_path / "missing.yaml"), "0"]) == 1

    def test_run_invalid_config(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("states: [A]\nalphabet: [x]\ninitialState: B\n")
        assert main(["run", str(path), "x"]) == 2


class TestExport:
    """The export subcommand."""

    def test_export_json(self, capsys):
        assert main(["export", BINARY]) == 0
        structure = json.loads(capsys.readouterr().out)
        with open(BINARY) as f:
            assert structure == json.load(f)

    def test_export_yaml(self, capsys):
        assert main(["export", TRAFFIC_LIGHT, "--format", "yaml"]) == 0
        structure = yaml.safe_load(capsys.readouterr().out)
        assert structure["initialState"] == "Red"
        assert ["Yellow", "Prepare to stop"] in structure["outputs"]


class TestGenerate:
    """The generate subcommand."""

    def test_generate_table(self, capsys):
        assert main(["generate", "--states", "3", "--symbols", "2", "--seed", "0"]) == 0
        out = capsys.readouterr().out
        assert "Initial state: q0" in out
        assert "State q2" in out

    def test_generate_to_file(self, tmp_path):
        path = tmp_path / "generated.yaml"
        assert main(["generate", "--states", "4", "--partial", "--seed", "1",
                     "--output", str(path)]) == 0
        config = load_config(path)
        assert config.states == ["q0", "q1", "q2", "q3"]

    def test_generate_invalid_parameters(self):
        assert main(["generate", "--symbols", "0"]) == 1


class TestLogging:
    """Logging options."""

    def test_repeated_runs_apply_logging_options(self, tmp_path, root_logger):
        log_file = tmp_path / "run.log"
        assert main(["--log-level", "ERROR", "run", BINARY, "001"]) == 0
        assert root_logger.level == logging.ERROR

        assert main(["--log-level", "INFO", "--log-file", str(log_file), "run", BINARY, "001"]) == 0
        assert root_logger.level == logging.INFO
        assert "ended in C" in log_file.read_text()


class TestParser:
    """Argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])


if __name__ == "__main__":
    pytest.main([__file__])
