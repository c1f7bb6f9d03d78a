import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import JsonValue, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from rulegraph._builder import ExpressionError, build_store
from rulegraph._edges import build_edges
from rulegraph._model import NodeStore
from rulegraph._projection import project_store
from rulegraph._session import EditorSession
from rulegraph._snapshot import dump_store, load_store
from rulegraph._validate import validate_store

from .config import ConfigError, RulegraphConfig, get_config
from .operations import OperationError, apply_operation, parse_operation
from .render import render_edge_table, render_operator_table, render_store_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

FileArgument = Annotated[Path, typer.Argument(help="Path to a JSON expression file")]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Rulegraph CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    return typer.Exit(code=1)


def _load_config() -> RulegraphConfig:
    try:
        return get_config()
    except ConfigError as e:
        raise _fail(str(e)) from e


def _read_expression(path: Path) -> JsonValue:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read {path}: {e.strerror or e}"
        raise _fail(msg) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in {path}: {e}"
        raise _fail(msg) from e


def _load_store(path: Path, config: RulegraphConfig) -> NodeStore:
    expression = _read_expression(path)
    try:
        return build_store(expression, inline_literals=config.inline_literals, registry=config.registry())
    except (ExpressionError, ConfigError) as e:
        raise _fail(str(e)) from e


def _print_expression(expression: JsonValue) -> None:
    out_console.print_json(data=expression)


@app.command()
def project(file: FileArgument) -> None:
    """Parse an expression and print its canonical form."""
    store = _load_store(file, _load_config())
    _print_expression(project_store(store))


@app.command()
def tree(file: FileArgument) -> None:
    """Print the node tree of an expression."""
    store = _load_store(file, _load_config())
    render_store_tree(store, out_console)


@app.command()
def edges(file: FileArgument) -> None:
    """Print the layout edges of an expression."""
    store = _load_store(file, _load_config())
    render_edge_table(build_edges(store), store, out_console)


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to a JSON expression file or store snapshot")],
    *,
    snapshot: Annotated[
        bool,
        typer.Option("--snapshot", help="Read FILE as a store snapshot instead of an expression"),
    ] = False,
) -> None:
    """Check the structural invariants of a store."""
    config = _load_config()
    if snapshot:
        try:
            store = load_store(file.read_bytes())
        except OSError as e:
            msg = f"Cannot read {file}: {e.strerror or e}"
            raise _fail(msg) from e
        except ValidationError as e:
            msg = f"Invalid snapshot {file}: {e.error_count()} error(s)"
            raise _fail(msg) from e
    else:
        store = _load_store(file, config)

    try:
        registry = config.registry()
    except ConfigError as e:
        raise _fail(str(e)) from e
    errors = validate_store(store, registry)
    if errors:
        for error in errors:
            err_console.print(f"  [red]•[/red] {escape(error)}")
        raise _fail(f"{len(errors)} invariant violation(s)")

    err_console.print(f"[green]✓ Store is valid[/green] [dim]({len(store)} nodes)[/dim]")


@app.command()
def edit(
    file: FileArgument,
    *,
    ops: Annotated[
        list[str],
        typer.Option(
            "--op",
            help="Edit operation, e.g. 'add:', 'remove:0:1', 'wrap:1:!', 'duplicate:0', 'delete:2', 'undo'",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the resulting expression to this file"),
    ] = None,
    save_snapshot: Annotated[
        Path | None,
        typer.Option("--save-snapshot", help="Write the resulting store snapshot to this file"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit non-zero if an operation does not apply"),
    ] = False,
) -> None:
    """Apply edit operations to an expression and print the result."""
    config = _load_config()
    try:
        operations = [parse_operation(op) for op in ops]
    except OperationError as e:
        raise _fail(str(e)) from e

    try:
        session = EditorSession(
            _load_store(file, config),
            registry=config.registry(),
            history_limit=config.history_limit,
            inline_literals=config.inline_literals,
        )
    except ConfigError as e:
        raise _fail(str(e)) from e

    skipped = 0
    for operation in operations:
        try:
            applied = apply_operation(session, operation)
        except OperationError as e:
            raise _fail(str(e)) from e
        if not applied:
            skipped += 1
            err_console.print(f"[yellow]⚠ '{escape(str(operation))}' did not apply[/yellow]")

    expression = session.expression
    if output is not None:
        output.write_text(json.dumps(expression, indent=2) + "\n", encoding="utf-8")
        err_console.print(f"[cyan]Expression written to:[/cyan] {output}")
    if save_snapshot is not None:
        save_snapshot.write_text(dump_store(session.store) + "\n", encoding="utf-8")
        err_console.print(f"[cyan]Snapshot written to:[/cyan] {save_snapshot}")
    _print_expression(expression)

    if strict and skipped:
        raise typer.Exit(code=1)


@app.command()
def operators() -> None:
    """List the known operators."""
    config = _load_config()
    try:
        registry = config.registry()
    except ConfigError as e:
        raise _fail(str(e)) from e
    render_operator_table(registry, out_console)


if __name__ == "__main__":
    app()
