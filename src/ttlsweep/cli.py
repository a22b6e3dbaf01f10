# src/ttlsweep/cli.py
"""ttlsweep Command Line Interface.

Entry point for the ttlsweep CLI tool.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from ttlsweep import __version__
from ttlsweep.core.config import TtlSweepSettings, load_settings

__all__ = ["app"]

app = typer.Typer(
    name="ttlsweep",
    help="ttlsweep: background TTL expiry sweeper.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ttlsweep version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence checked in _load_dotenv for a better message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging (overrides settings).",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (overrides settings).",
    ),
) -> None:
    """ttlsweep: background TTL expiry sweeper."""
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings: str) -> TtlSweepSettings:
    """Load settings, exiting with code 1 and a readable message on failure."""
    try:
        return load_settings(Path(settings).expanduser())
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _configure_logging(ctx: typer.Context, config: TtlSweepSettings) -> None:
    """Configure logging from settings, with CLI flags taking precedence."""
    from ttlsweep.core.logging import configure_logging

    overrides: dict[str, Any] = ctx.obj or {}
    level = "DEBUG" if overrides.get("verbose") else config.logging.level
    json_output = bool(overrides.get("json_logs")) or config.logging.json_output
    configure_logging(json_output=json_output, level=level)


@contextmanager
def _open_stores(config: TtlSweepSettings) -> Iterator[tuple[Any, Any]]:
    """Open the configured blob and metadata stores.

    Yields:
        (blob_store, metadata_store)
    """
    from ttlsweep.core.blob_store import FilesystemBlobStore
    from ttlsweep.core.metadata import MetadataDB, SQLMetadataStore

    try:
        db = MetadataDB.from_url(config.metadata_store.url)
    except Exception as e:
        typer.echo(f"Error connecting to metadata database: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        blob_store = FilesystemBlobStore(config.blob_store.base_path.expanduser())
        yield blob_store, SQLMetadataStore(db)
    finally:
        db.close()


_SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


@app.command()
def run(
    ctx: typer.Context,
    settings: str = _SETTINGS_OPTION,
) -> None:
    """Run the sweeper in the foreground until interrupted.

    Stops on Ctrl-C or SIGTERM, letting in-flight sweep cycles finish.
    """
    from ttlsweep.core.retention import Sweeper, SweeperState

    config = _load_settings_or_exit(settings)
    _configure_logging(ctx, config)

    with _open_stores(config) as (blob_store, metadata_store):
        sweeper = Sweeper(config.sweeper, blob_store, metadata_store)
        sweeper.start()

        if sweeper.state is SweeperState.DISABLED:
            typer.echo("Sweeper disabled (sweeper.ttl_seconds is 0).")
            return

        shutdown = threading.Event()

        def _request_shutdown(signum: int, frame: object) -> None:
            shutdown.set()

        previous_handler = signal.signal(signal.SIGTERM, _request_shutdown)
        typer.echo(f"Sweeping every {config.sweeper.interval_seconds:g}s with {config.sweeper.workers} worker(s). Press Ctrl-C to stop.")
        try:
            while not shutdown.wait(1.0):
                pass
        except KeyboardInterrupt:
            typer.echo("Interrupted, stopping sweeper...")
        finally:
            sweeper.stop()
            signal.signal(signal.SIGTERM, previous_handler)


@app.command()
def sweep(
    ctx: typer.Context,
    settings: str = _SETTINGS_OPTION,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show the batch that would be deleted without deleting.",
    ),
) -> None:
    """Run a single sweep cycle now."""
    from ttlsweep.core.clock import DEFAULT_CLOCK
    from ttlsweep.core.retention import ExpiryQuery, Sweeper, cutoff_for

    config = _load_settings_or_exit(settings)
    _configure_logging(ctx, config)

    if config.sweeper.disabled:
        typer.echo("Sweeper disabled (sweeper.ttl_seconds is 0). Nothing to do.")
        return

    with _open_stores(config) as (blob_store, metadata_store):
        if dry_run:
            cutoff = cutoff_for(DEFAULT_CLOCK.now(), config.sweeper.ttl)
            query = ExpiryQuery(metadata_store, batch_size=config.sweeper.batch_size)
            expired = query.find_expired(cutoff)
            if not expired:
                typer.echo(f"No records created before {cutoff.isoformat()}.")
                return
            typer.echo(f"Would delete {len(expired)} record(s) created before {cutoff.isoformat()}:")
            for record in expired:
                typer.echo(f"  {record.record_id} (blob {record.blob_id[:16]}...)")
            return

        result = Sweeper(config.sweeper, blob_store, metadata_store).run_once()

    if result is None:
        return
    if result.query_failed:
        typer.echo("Sweep aborted: expiry query failed (see logs).", err=True)
        raise typer.Exit(1)
    typer.echo(f"Sweep completed in {result.duration_seconds:.2f}s:")
    typer.echo(f"  Cutoff: {result.cutoff.isoformat()}")
    typer.echo(f"  Records processed: {result.found_count}")


@app.command()
def status(
    ctx: typer.Context,
    settings: str = _SETTINGS_OPTION,
) -> None:
    """Show the record count and expired backlog."""
    from ttlsweep.core.clock import DEFAULT_CLOCK
    from ttlsweep.core.retention import cutoff_for

    config = _load_settings_or_exit(settings)
    _configure_logging(ctx, config)

    with _open_stores(config) as (_, metadata_store):
        total = metadata_store.count_records()
        typer.echo(f"Records: {total}")
        if config.sweeper.disabled:
            typer.echo("Sweeper disabled (sweeper.ttl_seconds is 0).")
            return
        cutoff = cutoff_for(DEFAULT_CLOCK.now(), config.sweeper.ttl)
        expired = metadata_store.count_expired(cutoff)
        typer.echo(f"Expired (created before {cutoff.isoformat()}): {expired}")
