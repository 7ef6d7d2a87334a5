"""Command line interface for erlindex."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from erlindex.config import CONFIG_FILENAME, AppConfig, load_config
from erlindex.errors import ConfigError, NotFoundError
from erlindex.index.indexer import Indexer
from erlindex.index.paths import RootPaths
from erlindex.index.storage import DocumentStore, MemoryDocumentStore, SQLiteDocumentStore
from erlindex.utils.uri import uri_from_path


console = Console()
app = typer.Typer(help="erlindex - source indexing for Erlang projects")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_config(root: Path, config_file: Path | None, db: Path | None) -> AppConfig:
    root_uri = uri_from_path(root)
    if config_file is None and (root / CONFIG_FILENAME).is_file():
        config_file = root / CONFIG_FILENAME
    try:
        if config_file is not None:
            config = load_config(config_file, root_uri=root_uri)
        else:
            config = AppConfig(root_uri=root_uri)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if db is not None:
        config.db_path = db
    return config


def _open_store(config: AppConfig) -> DocumentStore:
    resolved_db = config.resolve_db_path(Path.cwd())
    if resolved_db is None:
        return MemoryDocumentStore()
    _ensure_db_parent(resolved_db)
    return SQLiteDocumentStore(resolved_db)


@app.command()
def index(
    root: Path = typer.Argument(..., help="Project root directory.", resolve_path=True),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index the application sources of a project."""
    _setup_logging(verbose)
    config = _build_config(root, config_file, db)
    store = _open_store(config)
    indexer = Indexer(config, store)

    console.print(f"Indexing [bold]{root}[/bold]...")
    results = indexer.initialize()
    if not results:
        console.print("[yellow]No source directories found.[/yellow]")
        store.close()
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Directory")
    table.add_column("Succeeded")
    table.add_column("Failed")
    table.add_column("Time (s)")
    for result in results:
        table.add_row(
            str(result.directory),
            str(result.succeeded),
            str(result.failed),
            f"{result.elapsed:.3f}",
        )
    console.print(table)

    succeeded = sum(result.succeeded for result in results)
    failed = sum(result.failed for result in results)
    console.print(f"Succeeded: {succeeded}, failed: {failed}")
    store.close()


@app.command()
def find(
    filename: str = typer.Argument(..., help="Bare file name, e.g. lists.erl"),
    root: Path = typer.Argument(..., help="Project root directory.", resolve_path=True),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Locate a file in the app, deps and runtime paths and index it."""
    _setup_logging(verbose)
    config = _build_config(root, config_file, db)
    store = _open_store(config)
    indexer = Indexer(config, store)
    try:
        uri = indexer.find_and_index_file(filename)
    except NotFoundError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(code=1)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="FILENAME") from exc
    finally:
        store.close()
    console.print(uri)


@app.command()
def paths(
    root: Path = typer.Argument(..., help="Project root directory.", resolve_path=True),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Show the directories each root-path set resolves to."""
    config = _build_config(root, config_file, None)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Directory")
    for category, directories in RootPaths(config).by_category().items():
        for directory in directories:
            table.add_row(category, str(directory))
    console.print(table)


@app.command()
def prune(
    db: Path = typer.Option(..., "--db", help="SQLite database path"),
) -> None:
    """Remove documents whose files no longer exist on disk."""
    if not db.exists():
        console.print("[yellow]Database not found, nothing to prune.[/yellow]")
        return

    store = SQLiteDocumentStore(db)
    removed = store.remove_missing_files()
    console.print(f"Removed {removed} orphaned documents.")
    store.close()
