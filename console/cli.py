"""CLI interface for the scorebook record store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from console.config import ScorebookConfig, apply_env_overrides, load_config
from console.shell import RecordShell, by_id, ranked
from records import Record
from store import RecordStore, StoreResult

app = typer.Typer(help="Scorebook record store CLI")

logger = logging.getLogger(__name__)

DATA_FILE_OPTION = typer.Option(None, "--data-file", "-f", help="Backing data file")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to YAML config")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _resolve_config(
    config_path: Optional[str], data_file: Optional[str], verbose: bool
) -> ScorebookConfig:
    try:
        config = load_config(config_path) if config_path else ScorebookConfig()
    except FileNotFoundError as e:
        typer.secho(f"❌ Config file not found: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.secho(f"❌ Invalid config: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    config = apply_env_overrides(config)
    if data_file:
        config = config.model_copy(update={"data_file": data_file})

    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")
    return config


def _open_store(config: ScorebookConfig) -> RecordStore:
    return RecordStore(
        config.data_file,
        load_timeout_s=config.load_timeout_s,
        show_progress=config.show_progress,
    )


def _load_or_exit(store: RecordStore) -> None:
    result = store.load()
    if not result:
        typer.secho(f"❌ {result.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    if result.value is not None and not result.value.completed:
        # One-shot commands need the full contents before touching the file.
        store.wait_for_load()


def _fail(result: StoreResult[object]) -> None:
    prefix = "Validation failed: " if result.is_validation_error else ""
    typer.secho(f"❌ {prefix}{result.error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _save_or_exit(store: RecordStore) -> None:
    result = store.save()
    if not result:
        _fail(result)


@app.command()
def shell(
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Start the interactive menu."""
    config = _resolve_config(config_path, data_file, verbose)
    typer.echo(f"Starting scorebook on {config.data_file}...")
    with _open_store(config) as store:
        saved = RecordShell(store).run()
    if not saved:
        raise typer.Exit(1)


@app.command("list")
def list_records(
    by_score: bool = typer.Option(False, "--by-score", help="Sort by score, high to low"),
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List all records."""
    config = _resolve_config(config_path, data_file, verbose)
    with _open_store(config) as store:
        _load_or_exit(store)
        records = store.list_all()

    if not records:
        typer.secho("No records found.", fg=typer.colors.YELLOW)
        return

    ordered = ranked(records) if by_score else by_id(records)
    typer.echo(f"{'ID':>6}  {'NAME':<30} {'SCORE':>6}")
    for record in ordered:
        typer.echo(f"{record.id:>6}  {record.name:<30} {record.score:>6.2f}")


@app.command()
def show(
    record_id: int = typer.Argument(..., help="Record ID"),
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show a single record."""
    config = _resolve_config(config_path, data_file, verbose)
    with _open_store(config) as store:
        _load_or_exit(store)
        result = store.find_by_id(record_id)
    if not result or result.value is None:
        _fail(result)
        return
    typer.echo(result.value.describe())


@app.command()
def add(
    record_id: int = typer.Argument(..., help="Record ID (positive)"),
    name: str = typer.Argument(..., help="Record name"),
    score: float = typer.Argument(..., help="Score between 0 and 100"),
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Add a record and save."""
    config = _resolve_config(config_path, data_file, verbose)
    with _open_store(config) as store:
        _load_or_exit(store)
        result = store.add(Record(id=record_id, name=name, score=score))
        if not result or result.value is None:
            _fail(result)
            return
        _save_or_exit(store)
    typer.secho(f"✅ Record added: {result.value.describe()}", fg=typer.colors.GREEN)


@app.command()
def update(
    record_id: int = typer.Argument(..., help="Record ID"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    score: Optional[float] = typer.Option(None, "--score", help="New score"),
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Replace a record's fields and save. Omitted fields keep their value."""
    config = _resolve_config(config_path, data_file, verbose)
    with _open_store(config) as store:
        _load_or_exit(store)
        found = store.find_by_id(record_id)
        if not found or found.value is None:
            _fail(found)
            return
        existing = found.value
        replacement = Record(
            id=existing.id,
            name=existing.name if name is None else name,
            score=existing.score if score is None else score,
        )
        result = store.update(replacement)
        if not result or result.value is None:
            _fail(result)
            return
        _save_or_exit(store)
    typer.secho(f"✅ Record updated: {result.value.describe()}", fg=typer.colors.GREEN)


@app.command()
def remove(
    record_id: int = typer.Argument(..., help="Record ID"),
    data_file: Optional[str] = DATA_FILE_OPTION,
    config_path: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Delete a record and save."""
    config = _resolve_config(config_path, data_file, verbose)
    with _open_store(config) as store:
        _load_or_exit(store)
        result = store.delete(record_id)
        if not result:
            _fail(result)
        _save_or_exit(store)
    typer.secho(f"✅ Record deleted: ID={record_id}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
