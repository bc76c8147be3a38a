"""
Test suite for the command-line runner.
"""

import json

from pasim.cli import build_parser, main
from pasim.utilities.lattice_io import save_lattice


class TestCommandLine:
    """Test the command-line entry point."""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.fodo_cells == 4
        assert args.steps == 1000
        assert args.lattice is None

    def test_run_fodo(self, tmp_path):
        figure = tmp_path / "overview.png"
        assert main(["--steps", "5", "--particles", "20", "--integrator", "RK4",
                     "--plot", str(figure)]) == 0
        assert figure.exists()

    def test_run_with_files(self, tmp_path, fodo_lattice):
        lattice_path = tmp_path / "line.json"
        save_lattice(fodo_lattice, lattice_path)
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"simulation": {"particleCount": 10, "timeStep": 1e-10}}))
        assert main(["--config", str(config_path), "--lattice", str(lattice_path), "--steps", "3"]) == 0

    def test_zero_length_quadrupole_returns_error(self, tmp_path):
        lattice_path = tmp_path / "line.json"
        lattice_path.write_text(json.dumps({"components": [{"name": "Q1", "type": "quadrupole", "length": 0.0}]}))
        assert main(["--lattice", str(lattice_path), "--steps", "1"]) == 1

    def test_bad_config_returns_error(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{broken")
        assert main(["--config", str(config_path)]) == 1
