from __future__ import annotations

from pathlib import Path

import click
import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..config import AppConfig, dump_config, resolve_config, with_format
from ..core import FormatService
from ..logging import BatchSummary, RunLogger, configure_logging
from ..models import FormatOutcome, OutcomeStatus
from ..settings import get_settings
from ..transport import DaemonClient
from ..versions import parse_target_versions

console = Console(soft_wrap=True)

app = typer.Typer(help="black: The uncompromising code formatter, via a local blackd daemon", add_completion=False)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"blackd-client {__version__}")
        raise typer.Exit()


def _load_config(path: Path | None) -> AppConfig:
    try:
        return resolve_config(get_settings(), path)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Invalid configuration[/red]: {escape(str(exc))}")
        raise typer.Exit(2) from exc


def print_outcome(outcome: FormatOutcome) -> None:
    path = escape(str(outcome.path))
    if outcome.status is OutcomeStatus.REWRITTEN:
        if outcome.diff is not None:
            console.print(outcome.diff, markup=False, highlight=False, emoji=False, end="")
            console.print(f"[yellow]Would reformat[/yellow] {path}")
        else:
            console.print(f"[green]Successfully reformatted[/green] {path}")
    elif outcome.status is OutcomeStatus.UNCHANGED:
        console.print(f"{path} already well formatted, good job.")
    elif outcome.status is OutcomeStatus.SKIPPED:
        console.print(f"[dim]Skipped {path}: file does not exist[/dim]")
    else:
        console.print(f"[red]{escape(outcome.reason or 'unknown error')}[/red]")


@app.command()
def main(
    src: list[Path] | None = typer.Argument(None, help="The source file(s) to be formatted", show_default=False),
    host: str | None = typer.Option(None, "--host", "-h", help="Address of the blackd daemon [default: localhost]"),
    port: int | None = typer.Option(None, "--port", "-p", min=1, max=65535, help="Port blackd listens on [default: 45484]"),
    line_length: int | None = typer.Option(
        None, "--line-length", "-l", min=1, max=255, help="How many characters per line to allow [default: 88]"
    ),
    target_version: str | None = typer.Option(
        None, "--target-version", "-t", help="Comma separated Python versions blackd's output should support"
    ),
    skip_string_normalization: bool = typer.Option(
        False, "--skip-string-normalization", "-S", help="Don't normalize string quotes or prefixes"
    ),
    skip_magic_trailing_comma: bool = typer.Option(
        False, "--skip-magic-trailing-comma", "-C", help="Don't use trailing commas as a reason to split lines"
    ),
    fast: bool = typer.Option(False, "--fast", help="Skip temporary sanity checks"),
    safe: bool = typer.Option(False, "--safe", help="Perform temporary sanity checks (the default)"),
    diff: bool = typer.Option(False, "--diff", help="Print a diff instead of rewriting the source files"),
    config: Path | None = typer.Option(None, "--config", help="Path to a config.toml"),
    connect_timeout: float | None = typer.Option(
        None, "--connect-timeout", click_type=click.FloatRange(min=0.0, min_open=True), help="Connect timeout in seconds"
    ),
    read_timeout: float | None = typer.Option(
        None, "--read-timeout", click_type=click.FloatRange(min=0.0, min_open=True), help="Read timeout in seconds"
    ),
    log_file: Path | None = typer.Option(None, "--log-file", help="Append a JSON line per processed file"),
    show_config: bool = typer.Option(False, "--show-config", help="Print the resolved configuration and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and writes to stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    cfg = _load_config(config)
    if host is not None:
        cfg.daemon.host = host
    if port is not None:
        cfg.daemon.port = port
    if connect_timeout is not None:
        cfg.daemon.connect_timeout_s = connect_timeout
    if read_timeout is not None:
        cfg.daemon.read_timeout_s = read_timeout
    if log_file is not None:
        cfg.runtime.log_file = log_file
    fmt = cfg.format
    cfg = with_format(
        cfg,
        line_length=line_length if line_length is not None else fmt.line_length,
        target_versions=parse_target_versions(target_version) if target_version is not None else fmt.target_versions,
        skip_string_normalization=skip_string_normalization or fmt.skip_string_normalization,
        skip_magic_trailing_comma=skip_magic_trailing_comma or fmt.skip_magic_trailing_comma,
        fast=fast or fmt.fast,
        safe=safe or fmt.safe,
        diff=diff or fmt.diff,
    )

    if show_config:
        console.print(dump_config(cfg), markup=False, highlight=False)
        raise typer.Exit()

    if not src:
        console.print("\nError: No target source file(s) specified!\n")
        return

    configure_logging(verbose)
    run_logger = RunLogger(cfg.runtime.log_file) if cfg.runtime.log_file else None
    with DaemonClient(
        cfg.daemon.host,
        cfg.daemon.port,
        connect_timeout_s=cfg.daemon.connect_timeout_s,
        read_timeout_s=cfg.daemon.read_timeout_s,
    ) as client:
        service = FormatService(cfg.format, client, run_logger=run_logger)
        console.print()
        result = service.format_files(src, on_outcome=print_outcome)

    summary = BatchSummary(reformatted=result.reformatted, left_unchanged=result.left_unchanged)
    console.print(summary.render())


if __name__ == "__main__":
    app()
