"""Command line interface for API response analysis."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import rich.traceback
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import report as report_module
from .analysis import analyze_response
from .detector import DetectorConfig, SemanticDetector
from .embeddings import EmbeddingArtifactError, EmbeddingIndex
from .io import load_document
from .openapi import SpecParseError, load_spec, response_field_hints
from .plugin_registry import PluginDefinitionError, PluginRegistry
from .strategies import ENGINE_EMBEDDING, ENGINES

rich.traceback.install(show_locals=False)

app = typer.Typer(help="Infer, classify and lay out JSON API responses.")
console = Console()


def _resolve_path(path: Path | str) -> Path:
    """Resolve a string or path to an absolute Path."""
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"Path does not exist: {resolved}")
    return resolved


def _write_json(data: dict, output: Optional[Path], label: str) -> None:
    if output is None:
        console.print_json(data=data)
        return
    destination = Path(output).expanduser().resolve()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(data, indent=2), encoding="utf-8")
    console.print(f"{label} written to [green]{destination}[/green]")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every command."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def analyze(
    source: Path = typer.Argument(..., help="JSON or JSONL response body to analyze."),
    url: Optional[str] = typer.Option(None, help="URL the response was fetched from."),
    engine: str = typer.Option(ENGINE_EMBEDDING, help=f"Name matching engine ({', '.join(ENGINES)})."),
    plugins: Optional[Path] = typer.Option(None, help="YAML file with plugin category definitions."),
    spec: Optional[Path] = typer.Option(None, help="OpenAPI document describing the response."),
    operation: Optional[str] = typer.Option(
        None, help="Operation in the OpenAPI document, as 'METHOD /path' or '/path'."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Path to write the analysis JSON."
    ),
) -> None:
    """Infer the schema of a response and pick components for its nodes."""

    source_path = _resolve_path(source)
    if engine not in ENGINES:
        raise typer.BadParameter(f"engine must be one of {', '.join(ENGINES)}")
    if operation and spec is None:
        raise typer.BadParameter("--operation requires --spec")

    plugin_registry = PluginRegistry()
    if plugins is not None:
        try:
            loaded = plugin_registry.load_definitions(_resolve_path(plugins))
        except PluginDefinitionError as exc:
            raise typer.BadParameter(str(exc)) from exc
        console.print(f"Loaded {len(loaded)} plugin categories")

    hints = {}
    if spec is not None:
        try:
            parsed = load_spec(_resolve_path(spec))
        except SpecParseError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if operation:
            method, _, path = operation.rpartition(" ")
            found = parsed.find_operation(path, method or "get")
            if found is None:
                raise typer.BadParameter(f"Operation not found in spec: {operation}")
            hints = response_field_hints(found.response_schema)

    data = load_document(source_path)
    detector = SemanticDetector(DetectorConfig(engine=engine), provider=plugin_registry)
    result = analyze_response(data, url or source_path.as_uri(), detector=detector, hints=hints)
    _write_json(result.to_dict(), output, "Analysis")


@app.command()
def classify(
    names: list[str] = typer.Argument(..., help="Field names to classify."),
    artifact: Optional[Path] = typer.Option(None, help="Alternative embedding artifact JSON."),
) -> None:
    """Classify field names against the embedding centroids."""

    try:
        index = EmbeddingIndex.from_artifact(_resolve_path(artifact) if artifact else None)
    except EmbeddingArtifactError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title=f"{index.model} {index.version}")
    table.add_column("Field")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Unknown tokens")
    for name in names:
        classification = index.classify(name)
        coverage = index.token_coverage(name)
        table.add_row(
            name,
            classification.category if classification else "-",
            f"{classification.score:.2f}" if classification else "-",
            ", ".join(coverage.unknown) or "-",
        )
    console.print(table)


@app.command()
def spec(
    spec_file: Path = typer.Argument(..., help="OpenAPI 3.x or Swagger 2.0 document."),
) -> None:
    """Summarize the operations and security schemes of an OpenAPI document."""

    try:
        parsed = load_spec(_resolve_path(spec_file))
    except SpecParseError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(f"[bold]{parsed.title}[/bold] {parsed.version} (OpenAPI {parsed.spec_version})")
    if parsed.base_url:
        console.print(f"Base URL: {parsed.base_url}")

    operations = Table(title="Operations")
    operations.add_column("Method")
    operations.add_column("Path")
    operations.add_column("Operation")
    operations.add_column("Parameters", justify="right")
    operations.add_column("Response schema")
    for operation in parsed.operations:
        operations.add_row(
            operation.method,
            operation.path,
            operation.operation_id or operation.summary or "-",
            str(len(operation.parameters)),
            "yes" if operation.response_schema else "no",
        )
    console.print(operations)

    if parsed.security_schemes:
        security = Table(title="Security schemes")
        security.add_column("Name")
        security.add_column("Auth type")
        security.add_column("Description")
        for scheme in parsed.security_schemes:
            security.add_row(scheme.name, scheme.auth_type or "unsupported", scheme.description)
        console.print(security)


@app.command()
def report(
    analysis_json: Path = typer.Argument(..., help="Analysis JSON produced by the analyze command."),
    output_html: Path = typer.Option(
        Path("report.html"), "--output", "-o", help="Path to write HTML report."
    ),
) -> None:
    """Render an HTML report from an analysis JSON artifact."""

    analysis = json.loads(_resolve_path(analysis_json).read_text(encoding="utf-8"))
    html = report_module.render_report(analysis)
    output_html = output_html.expanduser().resolve()
    output_html.parent.mkdir(parents=True, exist_ok=True)
    output_html.write_text(html, encoding="utf-8")
    console.print(f"Report written to [green]{output_html}[/green]")


def main() -> None:
    """Entrypoint for `python -m apilens` usage."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
