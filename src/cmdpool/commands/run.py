"""Run command implementation."""

import contextlib
from pathlib import Path
from typing import Annotated

import typer

from ..config import CmdpoolConfig, ConfigError, load_config
from ..constants import EXIT_PROCESS_FAILED, EXIT_USAGE
from ..core import (
    FileLockBackend,
    LoggingProgressSink,
    ProcessPool,
    RichProgressSink,
    identity_rewrite,
    locked,
)
from ..output import get_output_context


def read_commands(path: Path) -> list[str]:
    """Read commands from a file, one per line.

    Blank lines and lines starting with ``#`` are skipped.
    """
    commands = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            commands.append(line)
    return commands


def build_pool(commands: list[str], config: CmdpoolConfig) -> ProcessPool:
    """Create a pool configured from the effective settings."""
    if config.rewrite.raw:
        pool = ProcessPool(commands, rewrite=identity_rewrite)
    else:
        pool = ProcessPool(
            commands,
            binary=config.rewrite.binary,
            sub_path=config.rewrite.sub_path,
        )
    return (
        pool.set_limit(config.pool.limit)
        .continue_on_error(config.pool.continue_on_error)
        .set_poll_interval(config.pool.poll_interval)
    )


def run(
    commands: Annotated[
        list[str] | None,
        typer.Argument(help="Commands to run (quote each one)"),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Read commands from file, one per line"),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Max processes running at once"),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop scheduling at the first failure"),
    ] = False,
    raw: Annotated[
        bool | None,
        typer.Option(
            "--raw/--rewrite",
            help="Run commands as given, or prefix them with binary and sub-path",
        ),
    ] = None,
    binary: Annotated[
        str | None,
        typer.Option("--binary", help="Executable to prefix commands with"),
    ] = None,
    sub_path: Annotated[
        str | None,
        typer.Option("--sub-path", help="Entry point placed after the binary"),
    ] = None,
    lock_name: Annotated[
        str | None,
        typer.Option("--lock", help="Refuse to start if this lock is held"),
    ] = None,
    lock_suffix: Annotated[
        str | None,
        typer.Option("--lock-suffix", help="Suffix appended to the lock name"),
    ] = None,
    lock_dir: Annotated[
        Path | None,
        typer.Option("--lock-dir", help="Directory for lock files"),
    ] = None,
    wait_on_abort: Annotated[
        bool | None,
        typer.Option(
            "--wait-on-abort/--no-wait-on-abort",
            help="After a fail-fast stop, wait for processes still running",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config file"),
    ] = None,
) -> None:
    """Run commands in parallel with a concurrency limit."""
    ctx = get_output_context()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_USAGE) from None

    # CLI flags override the config file
    if limit is not None:
        config.pool.limit = limit
    if fail_fast:
        config.pool.continue_on_error = False
    if wait_on_abort is not None:
        config.pool.wait_on_abort = wait_on_abort
    if raw is not None:
        config.rewrite.raw = raw
    if binary is not None:
        config.rewrite.binary = binary
    if sub_path is not None:
        config.rewrite.sub_path = sub_path
    if lock_name is not None:
        config.lock.name = lock_name
    if lock_suffix is not None:
        config.lock.suffix = lock_suffix
    if lock_dir is not None:
        config.lock.dir = lock_dir

    all_commands = list(commands or [])
    if file is not None:
        if not file.is_file():
            ctx.error(f"Command file not found: {file}")
            raise typer.Exit(EXIT_USAGE)
        try:
            all_commands.extend(read_commands(file))
        except (OSError, UnicodeDecodeError) as e:
            ctx.error(f"Cannot read command file {file}: {e}")
            raise typer.Exit(EXIT_USAGE) from None
    if not all_commands:
        ctx.error("No commands given")
        raise typer.Exit(EXIT_USAGE)

    if config.lock.name:
        guard = locked(
            config.lock.name, config.lock.suffix, FileLockBackend(config.lock.dir)
        )
    else:
        guard = contextlib.nullcontext()

    with guard:
        pool = build_pool(all_commands, config)
        if ctx.json_mode:
            pool.set_progress_sink(LoggingProgressSink())
        else:
            pool.set_progress_sink(RichProgressSink(ctx.console))
        pool.run()
        if pool.aborted and config.pool.wait_on_abort:
            pool.wait_active()

    if not ctx.report(pool.summary()):
        raise typer.Exit(EXIT_PROCESS_FAILED)
