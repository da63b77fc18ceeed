"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import encode, with_block
from snapcompare.cli import EXIT_ERROR, EXIT_MATCH, EXIT_MISMATCH, cli
from snapcompare.models.options import ComparisonOptions


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def images(tmp_path: Path, gray_image):
    expected = tmp_path / "expected.png"
    same = tmp_path / "same.png"
    changed = tmp_path / "changed.png"
    expected.write_bytes(encode(gray_image))
    same.write_bytes(encode(gray_image))
    changed.write_bytes(encode(with_block(gray_image, (10, 10, 29, 29))))
    return expected, same, changed


class TestCompareCommand:
    """Tests for `snapcompare compare`."""

    def test_match(self, runner, images):
        expected, same, _ = images
        result = runner.invoke(cli, ["compare", str(same), str(expected)])
        assert result.exit_code == EXIT_MATCH
        assert "Match" in result.output

    def test_mismatch_writes_outputs(self, runner, images, tmp_path):
        expected, _, changed = images
        diff_path = tmp_path / "out" / "diff.png"
        json_path = tmp_path / "out" / "verdict.json"
        result = runner.invoke(
            cli,
            [
                "compare", str(changed), str(expected),
                "--diff-output", str(diff_path),
                "--json-output", str(json_path),
            ],
        )
        assert result.exit_code == EXIT_MISMATCH
        assert "400 pixels" in result.output
        assert diff_path.read_bytes().startswith(b"\x89PNG")
        report = json.loads(json_path.read_text())
        assert report["has_diff"] is True
        assert report["diff_path"] == str(diff_path)

    def test_flag_overrides(self, runner, images):
        expected, _, changed = images
        result = runner.invoke(cli, ["compare", str(changed), str(expected), "--max-diff-pixels", "400"])
        assert result.exit_code == EXIT_MATCH

    def test_config_file(self, runner, images, tmp_path):
        expected, _, changed = images
        config = tmp_path / "opts.json"
        ComparisonOptions(maxDiffPixelRatio=0.05).save(config)
        result = runner.invoke(cli, ["compare", str(changed), str(expected), "-c", str(config)])
        assert result.exit_code == EXIT_MATCH

    def test_unknown_comparator(self, runner, images):
        expected, same, _ = images
        result = runner.invoke(cli, ["compare", str(same), str(expected), "--comparator", "bogus"])
        assert result.exit_code == EXIT_ERROR
        assert "bogus" in result.output

    def test_invalid_threshold(self, runner, images):
        expected, same, _ = images
        result = runner.invoke(cli, ["compare", str(same), str(expected), "--threshold", "2"])
        assert result.exit_code == EXIT_ERROR

    def test_malformed_config(self, runner, images, tmp_path):
        expected, same, _ = images
        config = tmp_path / "broken.json"
        config.write_text('{"threshold": ')
        result = runner.invoke(cli, ["compare", str(same), str(expected), "-c", str(config)])
        assert result.exit_code == EXIT_ERROR

    def test_text_files(self, runner, tmp_path):
        expected = tmp_path / "expected.txt"
        actual = tmp_path / "actual.txt"
        expected.write_text("hello world\n")
        actual.write_text("hello there\n")
        result = runner.invoke(cli, ["compare", str(actual), str(expected)])
        assert result.exit_code == EXIT_MISMATCH
        assert "hello" in result.output

    def test_text_file_with_invalid_utf8(self, runner, tmp_path):
        expected = tmp_path / "expected.txt"
        actual = tmp_path / "actual.txt"
        expected.write_text("hello\n")
        actual.write_bytes(b"hel\xfflo\n")
        result = runner.invoke(cli, ["compare", str(actual), str(expected)])
        assert result.exit_code == EXIT_MISMATCH

    def test_binary_fallback(self, runner, tmp_path):
        expected = tmp_path / "expected.bin"
        actual = tmp_path / "actual.bin"
        expected.write_bytes(b"\x00\x01")
        actual.write_bytes(b"\x00\x02")
        result = runner.invoke(cli, ["compare", str(actual), str(expected), "-t", "application/octet-stream"])
        assert result.exit_code == EXIT_MISMATCH
        assert "Buffers differ" in result.output


class TestInitCommand:
    """Tests for `snapcompare init`."""

    def test_creates_default_options(self, runner, tmp_path):
        path = tmp_path / "snapcompare.json"
        result = runner.invoke(cli, ["init", "--output", str(path)])
        assert result.exit_code == 0
        assert ComparisonOptions.load(path) == ComparisonOptions()

    def test_declines_overwrite(self, runner, temp_options_file):
        before = temp_options_file.read_text()
        result = runner.invoke(cli, ["init", "--output", str(temp_options_file)], input="n\n")
        assert result.exit_code == 0
        assert temp_options_file.read_text() == before
