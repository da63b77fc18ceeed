"""CLI entry point for snapcompare."""

from __future__ import annotations

import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from snapcompare.comparators.registry import TEXT_CONTENT_TYPE, get_comparator
from snapcompare.errors import SnapCompareError
from snapcompare.models.options import ComparatorAlgorithm, ComparisonOptions
from snapcompare.models.verdict import Mismatch
from snapcompare.reporter.json_report import write_json_verdict

console = Console()

EXIT_MATCH = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build_options(config: Optional[str], overrides: dict) -> ComparisonOptions:
    base = ComparisonOptions.load(config) if config else ComparisonOptions()
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ComparisonOptions.merge(data)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Compare test artifacts against recorded baselines."""
    setup_logging(verbose)


@cli.command()
@click.argument("actual", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("expected", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--content-type", "-t", default=None, help="Content type (guessed from EXPECTED if omitted)")
@click.option("--threshold", type=float, default=None, help="Per-pixel color tolerance (0..1)")
@click.option("--max-diff-pixels", type=int, default=None, help="Allowed number of differing pixels")
@click.option("--max-diff-pixel-ratio", type=float, default=None, help="Allowed share of differing pixels (0..1)")
@click.option(
    "--comparator",
    default=None,
    help=f"Pixel-diff algorithm: {', '.join(a.value for a in ComparatorAlgorithm)}",
)
@click.option("--config", "-c", default=None, help="Options file path")
@click.option("--diff-output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Where to write the diff image")
@click.option("--json-output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Where to write the JSON verdict")
def compare(
    actual: Path,
    expected: Path,
    content_type: Optional[str],
    threshold: Optional[float],
    max_diff_pixels: Optional[int],
    max_diff_pixel_ratio: Optional[float],
    comparator: Optional[str],
    config: Optional[str],
    diff_output: Optional[Path],
    json_output: Optional[Path],
) -> None:
    """Compare ACTUAL against the EXPECTED baseline."""
    if content_type is None:
        content_type, _ = mimetypes.guess_type(expected.name)

    try:
        options = _build_options(
            config,
            {
                "threshold": threshold,
                "max_diff_pixels": max_diff_pixels,
                "max_diff_pixel_ratio": max_diff_pixel_ratio,
                "comparator_algorithm": comparator,
            },
        )
    except (FileNotFoundError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(EXIT_ERROR)

    actual_value = (
        actual.read_text(encoding="utf-8", errors="replace") if content_type == TEXT_CONTENT_TYPE else actual.read_bytes()
    )
    try:
        verdict = get_comparator(content_type)(actual_value, expected.read_bytes(), options)
    except SnapCompareError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(EXIT_ERROR)

    written_diff = None
    if isinstance(verdict, Mismatch) and verdict.diff is not None and diff_output:
        diff_output.parent.mkdir(parents=True, exist_ok=True)
        diff_output.write_bytes(verdict.diff)
        written_diff = diff_output
    if json_output:
        write_json_verdict(verdict, json_output, written_diff)

    if verdict.matched:
        console.print("[green]Match[/green]")
        sys.exit(EXIT_MATCH)

    console.print("[red]Mismatch[/red]")
    console.print(Text.from_ansi(verdict.message))
    if written_diff:
        console.print(f"  Diff image: [blue]{written_diff}[/blue]")
    sys.exit(EXIT_MISMATCH)


@cli.command()
@click.option("--output", "-o", default="snapcompare.json", help="Options file to create")
def init(output: str) -> None:
    """Create a default options file."""
    path = Path(output)
    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    ComparisonOptions().save(path)
    console.print(f"[green]Created {path}[/green]")
    console.print("\nCompare an artifact with:")
    console.print(f"  [blue]snapcompare compare actual.png expected.png -c {path}[/blue]")


if __name__ == "__main__":
    cli()
