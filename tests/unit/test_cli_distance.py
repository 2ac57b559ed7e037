"""Tests for the distance and simulate CLI commands."""
from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest
from typer.testing import CliRunner

from phylojoin import __version__
from phylojoin.cli.main import app
from phylojoin.core.parsers import AlignmentParser, DistanceMatrixParser
from tests.utils.assertions import CLIAssertions

runner = CliRunner()


class TestDistanceCompute:
    """Test Jukes-Cantor matrix output."""

    def test_text_to_file(self, alignment_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "matrix.txt"
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_output_contains(result, "Distance matrix written")
        matrix = DistanceMatrixParser(output).parse()
        assert matrix.names == ("Org1", "Org2", "Org3", "Org4")
        assert matrix.get("Org1", "Org2") == 0.2326

    def test_stdout(self, alignment_file: Path) -> None:
        result = runner.invoke(app, ["distance", "compute", "-a", str(alignment_file)])
        CLIAssertions.assert_success(result)
        lines = result.stdout.splitlines()
        assert len(lines) == 4
        assert lines[0] == "      Org1   0.0000   0.2326   0.4408   0.6735"

    def test_csv(self, alignment_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "matrix.csv"
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        df = pl.read_csv(output)
        assert df.columns == ["taxon", "Org1", "Org2", "Org3", "Org4"]

    def test_parquet_by_format_option(self, alignment_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "matrix.bin"
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-o", str(output), "-f", "parquet",
        ])
        CLIAssertions.assert_success(result)
        assert pl.read_parquet(output).height == 4

    def test_undefined_pairs_reported(self, tmp_path: Path) -> None:
        path = tmp_path / "gappy.phy"
        path.write_text("3 4\nA ----\nB ACGT\nC ACGA\n")
        output = tmp_path / "matrix.txt"
        result = runner.invoke(app, ["distance", "compute", "-a", str(path), "-o", str(output)])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_output_contains(result, "no defined distance")
        assert output.read_text().splitlines()[0].split() == ["A", "0.0000", "N/A", "N/A"]

    def test_decimals_from_config(self, alignment_file: Path, config_file: Path) -> None:
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-c", str(config_file),
        ])
        CLIAssertions.assert_success(result)
        assert result.stdout.splitlines()[0].split()[2] == "0.233"

    def test_binary_format_needs_output(self, alignment_file: Path) -> None:
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-f", "csv",
        ])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "requires --output")

    def test_unknown_format(self, alignment_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file),
            "-o", str(tmp_path / "m.x"), "-f", "xlsx",
        ])
        CLIAssertions.assert_failure(result)

    def test_missing_alignment(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["distance", "compute", "-a", str(tmp_path / "none.phy")])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "not found")

    def test_malformed_alignment(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.phy"
        path.write_text("3 4\nA ACGT\n")
        result = runner.invoke(app, ["distance", "compute", "-a", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "Malformed alignment")

    def test_undecodable_alignment(self, tmp_path: Path) -> None:
        path = tmp_path / "seqs.phy"
        path.write_bytes(b"2 4\nA ACGT\nB AC\xffT\n")
        result = runner.invoke(app, ["distance", "compute", "-a", str(path)])
        CLIAssertions.assert_failure(result)
        assert isinstance(result.exception, SystemExit)
        CLIAssertions.assert_output_contains(result, "Malformed alignment")

    def test_unreadable_alignment(
        self, alignment_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def deny(path: Path) -> bytes:
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr(Path, "read_bytes", deny)
        result = runner.invoke(app, ["distance", "compute", "-a", str(alignment_file)])
        CLIAssertions.assert_failure(result)
        assert isinstance(result.exception, SystemExit)
        CLIAssertions.assert_output_contains(result, "Permission denied")


class TestSimulateSequences:
    """Test synthetic alignment output."""

    def test_to_file(self, tmp_path: Path) -> None:
        output = tmp_path / "seqs" / "sim.phy"
        result = runner.invoke(app, [
            "simulate", "sequences", "-n", "5", "-m", "30", "--seed", "7", "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        aln = AlignmentParser(output).parse()
        assert aln.names == ["Org1", "Org2", "Org3", "Org4", "Org5"]
        assert aln.length == 30

    def test_stdout_is_reproducible(self) -> None:
        args = ["simulate", "sequences", "-n", "3", "-m", "12", "-s", "1",
                "--gap-prob", "0.1", "--ambiguous-prob", "0.1"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        CLIAssertions.assert_success(first)
        assert first.stdout == second.stdout
        assert first.stdout.splitlines()[0] == "3 12"

    @pytest.mark.parametrize(
        "extra",
        [
            ["-n", "0", "-m", "10"],
            ["-n", "3", "-m", "10", "--gap-prob", "1.5"],
            ["-n", "3", "-m", "10", "--gap-prob", "0.7", "--ambiguous-prob", "0.7"],
        ],
    )
    def test_invalid_parameters(self, extra: list[str]) -> None:
        result = runner.invoke(app, ["simulate", "sequences", *extra])
        CLIAssertions.assert_failure(result)


class TestMainApp:
    """Test top-level options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_output_contains(result, f"phylojoin version {__version__}")

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        CLIAssertions.assert_output_contains(result, "tree")
