"""Tests for the tree CLI command."""
from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from phylojoin.cli.main import app
from phylojoin.models.alignment import Alignment
from tests.utils.assertions import CLIAssertions, NewickAssertions

runner = CliRunner()

ADDITIVE_NJ = "((A:2.000000,B:3.000000):3.000000,(C:4.000000,D:5.000000):3.000000);"


@pytest.fixture()
def ultrametric_file(tmp_path: Path) -> Path:
    path = tmp_path / "ultrametric.txt"
    path.write_text(
        "A 0 2 8 8\n"
        "B 2 0 8 8\n"
        "C 8 8 0 4\n"
        "D 8 8 4 0\n"
    )
    return path


@pytest.fixture()
def simulated_file(tmp_path: Path, simulated_alignment: Alignment) -> Path:
    path = tmp_path / "simulated.phy"
    path.write_text(simulated_alignment.to_phylip())
    return path


class TestTreeBuild:
    """Test tree build from a distance matrix."""

    def test_nj_to_file(self, additive_matrix_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build",
            "--matrix", str(additive_matrix_file),
            "--method", "nj",
            "--output", str(output),
        ])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_file_created(result, output)
        assert output.read_text() == ADDITIVE_NJ + "\n"
        CLIAssertions.assert_output_contains(result, "Tree built successfully")

    def test_upgma_to_file(self, ultrametric_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build",
            "-d", str(ultrametric_file),
            "-m", "upgma",
            "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        assert output.read_text().strip() == (
            "((A:1.000000,B:1.000000):3.000000,(C:2.000000,D:2.000000):2.000000);"
        )

    def test_stdout_is_only_the_tree(self, additive_matrix_file: Path) -> None:
        """Without --output the Newick string is the whole of stdout."""
        result = runner.invoke(app, ["tree", "build", "-d", str(additive_matrix_file)])
        CLIAssertions.assert_success(result)
        assert result.stdout == ADDITIVE_NJ + "\n"

    def test_unknown_distances_accepted(self, matrix_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build", "-d", str(matrix_file), "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        NewickAssertions.assert_valid_newick(output.read_text().strip(), ["A", "B", "C", "D"])
        CLIAssertions.assert_output_contains(result, "unknown distances")

    def test_method_from_config(
        self, ultrametric_file: Path, config_file: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build", "-d", str(ultrametric_file), "-c", str(config_file), "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_output_contains(result, "upgma")
        assert output.read_text().startswith("((A:1.000000,B:1.000000):3.000000")

    def test_method_option_overrides_config(
        self, additive_matrix_file: Path, config_file: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file),
            "-c", str(config_file), "-m", "nj", "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        assert output.read_text().strip() == ADDITIVE_NJ

    def test_verbose_shows_merges(self, additive_matrix_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file),
            "-o", str(tmp_path / "tree.nwk"), "--verbose",
        ])
        CLIAssertions.assert_success(result)
        CLIAssertions.assert_output_contains(result, "NJ merges")
        CLIAssertions.assert_output_contains(result, "(final)")

    def test_quiet(self, additive_matrix_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file), "-o", str(output), "--quiet",
        ])
        CLIAssertions.assert_success(result)
        assert result.output == ""
        assert output.exists()

    def test_missing_matrix_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "tree", "build", "-d", str(tmp_path / "missing.txt"),
        ])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "not found")

    def test_single_taxon_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "one.txt"
        path.write_text("A 0\n")
        result = runner.invoke(app, ["tree", "build", "-d", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "Too few taxa")

    def test_ragged_matrix_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "ragged.txt"
        path.write_text("A 0 1 2\nB 1 0\nC 2 2 0\n")
        result = runner.invoke(app, ["tree", "build", "-d", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "line 2")

    def test_non_numeric_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.txt"
        path.write_text("A 0 x\nB 1 0\n")
        result = runner.invoke(app, ["tree", "build", "-d", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "Malformed distance matrix")

    def test_undecodable_matrix(self, tmp_path: Path) -> None:
        path = tmp_path / "matrix.txt"
        path.write_bytes(b"A 0 1\nB\xff 1 0\n")
        result = runner.invoke(app, ["tree", "build", "-d", str(path)])
        CLIAssertions.assert_failure(result)
        assert isinstance(result.exception, SystemExit)
        CLIAssertions.assert_output_contains(result, "Malformed distance matrix")

    def test_parquet_matrix_from_distance_compute(
        self, alignment_file: Path, tmp_path: Path
    ) -> None:
        parquet = tmp_path / "matrix.parquet"
        result = runner.invoke(app, [
            "distance", "compute", "-a", str(alignment_file), "-o", str(parquet),
        ])
        CLIAssertions.assert_success(result)

        result = runner.invoke(app, ["tree", "build", "-d", str(parquet), "-m", "upgma"])
        CLIAssertions.assert_success(result)
        NewickAssertions.assert_valid_newick(
            result.stdout.strip(), ["Org1", "Org2", "Org3", "Org4"]
        )

    def test_max_taxa(self, additive_matrix_file: Path) -> None:
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file), "--max-taxa", "3",
        ])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "above the limit")

    def test_invalid_method(self, additive_matrix_file: Path) -> None:
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file), "-m", "wpgma",
        ])
        assert result.exit_code != 0

    def test_invalid_config(self, additive_matrix_file: Path, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("clustering:\n  method: single\n")
        result = runner.invoke(app, [
            "tree", "build", "-d", str(additive_matrix_file), "-c", str(config),
        ])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "Error loading configuration")


class TestTreeInfer:
    """Test tree inference straight from sequences."""

    @pytest.mark.parametrize("method", ["nj", "upgma"])
    def test_infer(
        self, simulated_file: Path, simulated_alignment: Alignment, tmp_path: Path, method: str
    ) -> None:
        output = tmp_path / "tree.nwk"
        result = runner.invoke(app, [
            "tree", "infer", "-a", str(simulated_file), "-m", method, "-o", str(output),
        ])
        CLIAssertions.assert_success(result)
        newick = output.read_text().strip()
        NewickAssertions.assert_valid_newick(newick, simulated_alignment.names)

    def test_matrix_output(self, simulated_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "tree.nwk"
        matrix_output = tmp_path / "matrix.txt"
        result = runner.invoke(app, [
            "tree", "infer", "-a", str(simulated_file),
            "-o", str(output), "--matrix-output", str(matrix_output),
        ])
        CLIAssertions.assert_success(result)
        lines = matrix_output.read_text().splitlines()
        assert len(lines) == 8
        assert lines[0].split()[0] == "Org1"

    def test_stdout(self, simulated_file: Path, simulated_alignment: Alignment) -> None:
        result = runner.invoke(app, ["tree", "infer", "-a", str(simulated_file)])
        CLIAssertions.assert_success(result)
        NewickAssertions.assert_valid_newick(result.stdout.strip(), simulated_alignment.names)

    def test_fasta_input(self, fasta_file: Path) -> None:
        result = runner.invoke(app, ["tree", "infer", "-a", str(fasta_file), "-m", "upgma"])
        CLIAssertions.assert_success(result)
        NewickAssertions.assert_valid_newick(result.stdout.strip(), ["Org1", "Org2", "Org3"])

    def test_unaligned_input(self, tmp_path: Path) -> None:
        path = tmp_path / "ragged.fasta"
        path.write_text(">A\nACGT\n>B\nACG\n")
        result = runner.invoke(app, ["tree", "infer", "-a", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "not aligned")

    def test_single_sequence(self, tmp_path: Path) -> None:
        path = tmp_path / "one.phy"
        path.write_text("1 4\nA ACGT\n")
        result = runner.invoke(app, ["tree", "infer", "-a", str(path)])
        CLIAssertions.assert_failure(result)
        CLIAssertions.assert_output_contains(result, "Too few taxa")
