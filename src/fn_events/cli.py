"""Typer CLI for event-source translation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog
import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fn_events.config.loader import load_translation_config
from fn_events.config.models import TranslationConfig
from fn_events.errors import TranslationError
from fn_events.translate import TranslationResult, translate_config

logger = structlog.get_logger()
console = Console()
app = typer.Typer(name="fnevents", help="Event-source translation CLI")


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a replaced sys.stderr is always the target.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(json_logs: bool = False) -> None:
    """Configure structlog processors for CLI runs."""
    processors: list[Any] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


@app.callback()
def main(
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines"),
) -> None:
    """Translate event-source specs into component and scaling manifests."""
    configure_logging(log_json)


def _load(config_path: str) -> TranslationConfig:
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return load_translation_config(path)
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _documents(results: list[TranslationResult]) -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = []
    for result in results:
        docs.append(result.component.to_manifest())
        if result.scaled_object is not None:
            docs.append(
                {
                    "source": result.source,
                    "scaledObject": result.scaled_object.to_manifest(),
                }
            )
    return docs


@app.command()
def validate(
    config_path: str = typer.Argument(..., help="Path to event-source YAML"),
) -> None:
    """Validate an event-source configuration file."""
    config = _load(config_path)
    console.print(f"[green]Valid[/green] namespace={config.namespace}")

    table = Table(title="Event Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Scaling")
    for source in config.sources:
        scale = getattr(source.spec, "scale_option", None)
        table.add_row(
            source.name, source.kind.value, "requested" if scale else "[dim]-[/dim]"
        )
    console.print(table)
    if config.event_bus is not None:
        console.print(
            f"  event bus: subjects={config.event_bus.subjects} "
            f"consumer_id={config.event_bus.consumer_id}"
        )


@app.command()
def render(
    config_path: str = typer.Argument(..., help="Path to event-source YAML"),
    source: str | None = typer.Option(None, "--source", help="Only this source"),
    output_format: str = typer.Option("yaml", "--format", help="yaml or json"),
) -> None:
    """Print the component manifests and scaled-object fragments."""
    if output_format not in ("yaml", "json"):
        console.print(f"[red]Unknown format:[/red] {output_format}")
        raise typer.Exit(2)

    config = _load(config_path)
    if source is not None:
        matches = [s for s in config.sources if s.name == source]
        if not matches:
            console.print(f"[red]Source '{source}' not found[/red]")
            raise typer.Exit(1)
        config = config.model_copy(update={"sources": matches})

    try:
        results = translate_config(config)
    except TranslationError as exc:
        console.print(f"[red]Translation error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    docs = _documents(results)
    logger.info("render.completed", documents=len(docs), format=output_format)
    if output_format == "json":
        typer.echo(json.dumps(docs, indent=2))
    else:
        typer.echo(yaml.safe_dump_all(docs, sort_keys=False), nl=False)
