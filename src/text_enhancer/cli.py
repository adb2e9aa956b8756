"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from text_enhancer.clients.llm_client import LLMClient
from text_enhancer.config import AppConfig, load_config
from text_enhancer.errors import TextEnhancerError, user_message
from text_enhancer.models.request import ENHANCEMENT_TYPES, TONES, build_request
from text_enhancer.models.settings import ApiConfig
from text_enhancer.pipeline.model_catalog import MODEL_HIERARCHY, MODEL_PROFILES
from text_enhancer.pipeline.orchestrator import EnhancementOrchestrator
from text_enhancer.storage.settings_store import SettingsStore
from text_enhancer.utils.markdown_render import render_html

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="text-enhancer",
    help="Rewrite text with LLMs and check the result before showing it",
    no_args_is_help=True,
)
settings_app = typer.Typer(help="Manage the stored API settings", no_args_is_help=True)
app.add_typer(settings_app, name="settings")
console = Console()


def _open_store(config: AppConfig) -> SettingsStore:
    return SettingsStore(config.storage.resolved_db_path)


def _build_client(config: AppConfig) -> LLMClient:
    return LLMClient(
        timeout=config.llm.timeout,
        app_title=config.llm.app_title,
        referer=config.llm.referer,
    )


@app.command()
def enhance(
    text: str = typer.Argument(None, help="Text to enhance (or use --file)"),
    file: Path = typer.Option(None, "--file", "-f", help="Read the text from a file"),
    enhancement_type: str = typer.Option(
        "general", "--type", "-t", help=f"One of: {', '.join(ENHANCEMENT_TYPES)}"
    ),
    tone: str = typer.Option(None, "--tone", help=f"One of: {', '.join(TONES)}"),
    audience: str = typer.Option(None, "--audience", "-a", help="Target audience"),
    instructions: str = typer.Option(None, "--instructions", "-i", help="Extra instructions"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the enhanced text to a file"),
    html: bool = typer.Option(False, "--html", help="Also write an HTML rendering next to --output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Enhance a piece of text."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    if file is not None:
        if not file.exists():
            console.print(f"[red]File not found: {file}[/red]")
            raise typer.Exit(1)
        text = file.read_text(encoding="utf-8")
    if not text:
        console.print("[red]Provide text as an argument or with --file.[/red]")
        raise typer.Exit(1)

    try:
        request = build_request(
            text,
            enhancement_type=enhancement_type,
            tone=tone,
            target_audience=audience,
            custom_instructions=instructions,
        )
    except TextEnhancerError as exc:
        console.print(f"[red]{escape(user_message(exc))}[/red]")
        raise typer.Exit(1)

    config = load_config()
    store = _open_store(config)
    orchestrator = EnhancementOrchestrator.from_config(_build_client(config), config, store)

    if verbose:
        console.print(f"[dim]Type: {request.enhancement_type}, tone: {request.tone or 'default'}[/dim]")
        console.print(f"[dim]Text: {len(request.text)} chars[/dim]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Enhancing...", total=None)

        def on_phase(phase: str, detail: str) -> None:
            progress.update(task, description=detail)

        try:
            result = asyncio.run(orchestrator.enhance(request, on_phase=on_phase))
        except TextEnhancerError as exc:
            logger.debug("Enhancement failed", exc_info=True)
            progress.stop()
            console.print(f"[red]{escape(user_message(exc))}[/red]")
            raise typer.Exit(1)

    score_color = "green" if result.quality_score >= config.pipeline.min_score else "yellow"
    console.print(
        Panel(
            f"[bold {score_color}]Quality: {result.quality_score}[/bold {score_color}] | "
            f"Confidence: {result.confidence} | Prompt: {result.prompt_score}"
            f"\nModel: {result.model_used}"
            + (" (strict retry)" if result.retried else "")
            + f"\nTime: {result.processing_time_ms} ms | "
            f"Length: {result.original_length} → {result.enhanced_length}",
            title="Result",
        )
    )
    if result.violations:
        console.print("\n[yellow]Warnings:[/yellow]")
        for message in result.violations:
            console.print(f"  - {message}")
    if result.improvements and verbose:
        console.print("\n[bold]Improvements:[/bold]")
        for item in result.improvements:
            console.print(f"  - {item}")

    if output is None:
        console.print()
        console.print(result.enhanced_text, markup=False, highlight=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result.enhanced_text, encoding="utf-8")
    console.print(f"\n[green]Saved: {output}[/green]")
    if html:
        html_path = output.with_suffix(".html")
        html_path.write_text(render_html(result.enhanced_text), encoding="utf-8")
        console.print(f"[green]HTML saved: {html_path}[/green]")


@settings_app.command("show")
def settings_show() -> None:
    """Show the active API settings (key masked)."""
    config = load_config()
    api_config = _open_store(config).load(config.llm)
    if api_config is None:
        console.print("[yellow]No API key configured. Run `text-enhancer settings set`.[/yellow]")
        return
    table = Table(show_header=False)
    table.add_row("API key", api_config.masked_key)
    table.add_row("Default model", api_config.default_model)
    table.add_row("Base URL", api_config.base_url)
    console.print(table)


@settings_app.command("set")
def settings_set(
    api_key: str = typer.Option(..., "--api-key", prompt=True, hide_input=True, help="API key"),
    model: str = typer.Option(None, "--model", "-m", help="Default model id"),
    base_url: str = typer.Option(None, "--base-url", help="OpenAI-compatible API base URL"),
) -> None:
    """Save the API key and optional model / base URL."""
    config = load_config()
    store = _open_store(config)
    stored = store.load_raw()
    try:
        api_config = ApiConfig(
            api_key=api_key.strip(),
            default_model=model or stored.get("default_model") or config.llm.default_model,
            base_url=base_url or stored.get("base_url") or config.llm.base_url,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid settings: {exc.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)
    store.save(api_config)
    console.print(f"[green]Settings saved ({api_config.masked_key}, {api_config.default_model}).[/green]")


@settings_app.command("clear")
def settings_clear() -> None:
    """Delete the stored API settings."""
    config = load_config()
    _open_store(config).clear_api_config()
    console.print("[green]Stored API settings removed.[/green]")


@app.command()
def models() -> None:
    """List the model catalog and the fallback order per enhancement type."""
    table = Table(title="Models")
    table.add_column("Model")
    table.add_column("Speed")
    table.add_column("Cost")
    table.add_column("Reliability", justify="right")
    table.add_column("Strengths")
    for model_id, profile in MODEL_PROFILES.items():
        table.add_row(
            model_id, profile.speed, profile.cost, str(profile.reliability),
            ", ".join(profile.strengths),
        )
    console.print(table)

    console.print("\n[bold]Fallback order:[/bold]")
    for name, hierarchy in MODEL_HIERARCHY.items():
        console.print(f"  [bold]{name}[/bold]: {' → '.join(hierarchy)}")


@app.command()
def check() -> None:
    """Check that the stored API key is accepted."""
    config = load_config()
    api_config = _open_store(config).load(config.llm)
    if api_config is None:
        console.print("[red]No API key configured. Run `text-enhancer settings set`.[/red]")
        raise typer.Exit(1)
    ok = asyncio.run(_build_client(config).test_connection(api_config))
    if not ok:
        console.print(f"[red]Connection failed ({api_config.base_url}).[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Connected to {api_config.base_url}.[/green]")


if __name__ == "__main__":
    app()
