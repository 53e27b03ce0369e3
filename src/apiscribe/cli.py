from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from apiscribe.config import ExtractSettings
from apiscribe.domain.errors import ApiscribeError
from apiscribe.extractors.python.annotations import OperationDoc, extract_operations_from_file
from apiscribe.orchestrator.pipeline import run_extract
from apiscribe.params.parser import parse_parameter
from apiscribe.params.render import render_builder_source, to_openapi

app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
    )


def _settings(project_root_var: Optional[str], lenient: bool) -> ExtractSettings:
    settings = ExtractSettings.from_env()
    updates: dict[str, object] = {}
    if project_root_var:
        updates["project_root_var"] = project_root_var
    if lenient:
        updates["strict_clauses"] = False
    return settings.model_copy(update=updates)


def _abort(exc: ApiscribeError) -> NoReturn:
    err_console.print(f"[bold red]error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def _operation_payload(op: OperationDoc) -> dict:
    return {
        "handler": op.handler_name,
        "method": op.method,
        "path": op.path,
        "file": op.file_path,
        "line": op.line,
        "description": op.description,
        "parameters": [to_openapi(p) for p in op.parameters],
    }


@app.command()
def extract(
    path: str = typer.Argument(..., help="Python file or directory to extract from"),
    format: str = typer.Option("table", help="Output format: table|json"),
    project_root_var: Optional[str] = typer.Option(
        None, help="Environment variable holding the project root for include_str"
    ),
    lenient: bool = typer.Option(False, help="Allow attributes without separating commas"),
    max_files: Optional[int] = typer.Option(None, help="Limit scanned files (debug)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    _setup_logging(verbose)
    root = Path(path).expanduser().resolve()
    if not root.exists():
        raise typer.BadParameter(f"Path does not exist: {root}")

    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    try:
        result = run_extract(root, settings=_settings(project_root_var, lenient), max_files=max_files)
    except ApiscribeError as exc:
        _abort(exc)

    if fmt == "json":
        payload = {
            "root": result.root,
            "operations": [_operation_payload(op) for op in result.operations],
        }
        console.print_json(json.dumps(payload))
        return

    console.print(f"[bold green]apiscribe[/bold green] extract: {result.root}")
    console.print(f"Python files scanned: {result.files_scanned}")
    console.print(f"Annotated files: {len(result.candidate_files)}")
    if result.skipped_files:
        console.print(f"[yellow]Skipped (invalid Python):[/yellow] {', '.join(result.skipped_files)}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("HANDLER")
    table.add_column("PARAMS")
    table.add_column("SUMMARY")

    for op in result.operations:
        params = ", ".join(f"{p.name} ({p.parameter_in.value})" for p in op.parameters)
        summary = op.description.splitlines()[0] if op.description else ""
        table.add_row(op.method or "-", op.path or "-", op.handler_name, params, summary)

    console.print(table)


@app.command()
def param(
    clause: str = typer.Argument(..., help='Parameter clause, e.g. \'"id" = int, path\''),
    lenient: bool = typer.Option(False, help="Allow attributes without separating commas"),
) -> None:
    try:
        parameter = parse_parameter(clause, strict=not lenient)
    except ApiscribeError as exc:
        _abort(exc)

    console.print_json(json.dumps(to_openapi(parameter)))
    console.print(render_builder_source(parameter), markup=False)


@app.command()
def docs(
    file: str = typer.Argument(..., help="Python file"),
    handler: str = typer.Argument(..., help="Function name"),
    project_root_var: Optional[str] = typer.Option(
        None, help="Environment variable holding the project root for include_str"
    ),
) -> None:
    fpath = Path(file).expanduser().resolve()
    if not fpath.is_file():
        raise typer.BadParameter(f"Not a file: {fpath}")

    try:
        ops = extract_operations_from_file(fpath, settings=_settings(project_root_var, False))
    except ApiscribeError as exc:
        _abort(exc)

    for op in ops:
        if op.handler_name == handler:
            console.print(op.description, markup=False)
            return

    err_console.print(f"[bold red]error:[/bold red] no annotated handler named {handler}")
    raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
