"""Command-line interface for the Kotlin documentation chatbot."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path

import click
import uvicorn
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from kotlin_docs_chatbot.api import CHATBOT_INFO, create_app
from kotlin_docs_chatbot.app.bootstrap import RuntimeComponents, load_runtime_from_path
from kotlin_docs_chatbot.chatbot import AnswerResult
from kotlin_docs_chatbot.config import DEFAULT_CONFIG_PATH, ChatbotConfig
from kotlin_docs_chatbot.diagnostics import run_diagnostics
from kotlin_docs_chatbot.llm import check_ollama_connection, check_ollama_model
from kotlin_docs_chatbot.logging_setup import configure_logging
from kotlin_docs_chatbot.rag import EmbeddingFactory, ProcessingResult, VectorStoreManager

console = Console()

_STATUS_STYLES = {"ok": "green", "warn": "yellow", "error": "red", "not_applicable": "dim"}

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the chatbot YAML configuration.",
)


def _load_config(config_path: Path) -> ChatbotConfig:
    config = ChatbotConfig.from_file(config_path)
    configure_logging(config.logging_level())
    return config


def _load_runtime(config_path: Path) -> RuntimeComponents:
    runtime = load_runtime_from_path(config_path)
    configure_logging(runtime.config.logging_level())
    return runtime


def render_answer(result: AnswerResult) -> None:
    """Print an answer panel with its metadata, or the failure message."""
    if not result.successful:
        console.print(Panel(result.error_message, title="[bold red]Error[/bold red]", border_style="red"))
        return
    console.print(
        Panel(
            Markdown(result.answer),
            title="Kotlin Expert",
            border_style="blue",
            box=box.ROUNDED,
            expand=True,
            padding=(0, 1),
        )
    )
    console.print(
        f"[dim]confidence:[/dim] {result.confidence.value}  "
        f"[dim]context documents:[/dim] {result.context_document_count}  "
        f"[dim]response time:[/dim] {result.response_time_ms} ms"
    )


def render_processing_result(path: Path, result: ProcessingResult) -> None:
    if result.successful:
        console.print(
            f"[green]Ingested[/green] [cyan]{path}[/cyan]: "
            f"{result.documents_processed} page(s), {result.chunks_created} chunk(s) "
            f"in {result.processing_time_ms} ms"
        )
    else:
        console.print(f"[red]Failed to ingest[/red] [cyan]{path}[/cyan]: {result.error_message}")


def _ensure_ollama_ready(config: ChatbotConfig, skip_check: bool) -> None:
    llm_settings = config.llm_settings()
    if llm_settings.get("provider") != "ollama" or skip_check:
        return
    base_url = llm_settings.get("base_url", "http://localhost:11434")
    model_name = llm_settings.get("model", "llama3.1:8b")
    if not check_ollama_connection(base_url):
        console.print(
            Panel(
                "[bold red]Ollama is not running![/bold red]\n\n"
                "The chatbot requires Ollama to generate answers.\n\n"
                "[bold]To start Ollama:[/bold]\n"
                "  Run: [cyan]ollama serve[/cyan]\n\n"
                "You can skip this check with [cyan]--skip-ollama-check[/cyan], "
                "but answers will fail until Ollama is reachable.",
                title="Ollama Connection Error",
                border_style="red",
            )
        )
        raise click.Abort()
    model_installed, available_models = check_ollama_model(base_url, model_name)
    if model_installed:
        return
    available_list = "\n  - ".join(available_models) if available_models else "(none installed)"
    console.print(
        Panel(
            f"[bold red]Model '{model_name}' is not installed![/bold red]\n\n"
            "[bold]To install the model:[/bold]\n"
            f"  Run: [cyan]ollama pull {model_name}[/cyan]\n\n"
            "[bold]Currently installed models:[/bold]\n"
            f"  {available_list}",
            title="Model Not Found",
            border_style="yellow",
        )
    )
    raise click.Abort()


def perform_vector_store_reset(config: ChatbotConfig, *, force: bool) -> None:
    vector_cfg = config.vector_store_config()
    persist_dir = vector_cfg.persist_directory

    console.print("[bold]Vector Store Reset[/bold]")
    console.print(f"Collection: [cyan]{vector_cfg.collection_name}[/cyan]")
    if vector_cfg.host:
        console.print(f"Server: [cyan]{vector_cfg.host}:{vector_cfg.port}[/cyan]")
    else:
        console.print(f"Directory: [cyan]{persist_dir}[/cyan]")
        if not persist_dir.exists():
            console.print("[yellow]Vector store directory does not exist. Nothing to reset.[/yellow]")
            return
    console.print()

    if not force:
        console.print("[yellow]All ingested chunks will be deleted. You will need to re-ingest your documents.[/yellow]")
        if not click.confirm("Do you want to continue?"):
            console.print("[yellow]Reset cancelled.[/yellow]")
            return

    backup_dir = None if vector_cfg.host else _backup_existing_store(persist_dir)
    vector_store = VectorStoreManager(EmbeddingFactory(config.embedding_settings()).build(), vector_cfg)
    try:
        console.print("[dim]Resetting vector store...[/dim]")
        vector_store.reset()
    except Exception as exc:
        console.print(f"[red]Error resetting vector store:[/red] {exc}")
        if backup_dir is not None:
            console.print(f"[yellow]Backup is still available at:[/yellow] {backup_dir}")
        raise click.Abort() from exc
    console.print("[green]Vector store reset successfully![/green]")
    if backup_dir is not None:
        console.print(f"Backup is available at: [cyan]{backup_dir}[/cyan]")


def _backup_existing_store(persist_dir: Path) -> Path | None:
    if not any(persist_dir.iterdir()):
        return None
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_dir = persist_dir.parent / f"{persist_dir.name}.backup.{timestamp}"
    try:
        console.print("[dim]Creating backup...[/dim]")
        shutil.copytree(persist_dir, backup_dir, dirs_exist_ok=True)
    except OSError as exc:
        console.print(f"[red]Warning: Failed to create backup:[/red] {exc}")
        return None
    console.print(f"[green]Backup created:[/green] {backup_dir}")
    return backup_dir


@click.group()
def cli() -> None:
    """Kotlin documentation chatbot CLI."""


@cli.command()
@config_option
@click.option("--skip-ollama-check", is_flag=True, help="Skip checking that Ollama is running.")
@click.argument("question")
def ask(config_path: Path, skip_ollama_check: bool, question: str) -> None:
    """Answer a single Kotlin question from the knowledge base."""
    runtime = _load_runtime(config_path)
    _ensure_ollama_ready(runtime.config, skip_ollama_check)
    result = runtime.chatbot.ask(question)
    render_answer(result)
    if not result.successful:
        raise SystemExit(1)


@cli.command()
@config_option
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
def ingest(config_path: Path, paths: tuple[Path, ...]) -> None:
    """Chunk, enrich and index one or more documents (.pdf, .txt, .md)."""
    runtime = _load_runtime(config_path)
    failures = 0
    for path in paths:
        result = runtime.ingestion.ingest_path(path)
        render_processing_result(path, result)
        failures += 0 if result.successful else 1
    console.print(f"[bold]Knowledge base now holds {runtime.vector_store.count()} chunk(s).[/bold]")
    if failures:
        raise SystemExit(1)


@cli.command()
@config_option
@click.option("--host", type=str, default=None, help="Override the configured bind address.")
@click.option("--port", type=int, default=None, help="Override the configured port.")
def serve(config_path: Path, host: str | None, port: int | None) -> None:
    """Serve the HTTP API with uvicorn."""
    runtime = _load_runtime(config_path)
    server = runtime.config.server_config()
    uvicorn.run(
        create_app(runtime),
        host=host or server.host,
        port=port or server.port,
        log_config=None,
    )


@cli.command()
@config_option
def info(config_path: Path) -> None:
    """Show what this chatbot is and how to use it."""
    _load_config(config_path)
    console.print(
        Panel(
            f"{CHATBOT_INFO.description}\n\n{CHATBOT_INFO.usage}",
            title=f"{CHATBOT_INFO.name} v{CHATBOT_INFO.version}",
            border_style="magenta",
        )
    )


@cli.command()
@config_option
def doctor(config_path: Path) -> None:
    """Check the Python runtime, vector store and LLM backend."""
    results = run_diagnostics(_load_config(config_path))
    table = Table(title="Diagnostics", box=box.SIMPLE)
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Details")
    for name, result in results.items():
        style = _STATUS_STYLES.get(result["status"], "white")
        table.add_row(name, f"[{style}]{result['status']}[/{style}]", result["details"])
    console.print(table)
    if any(result["status"] == "error" for result in results.values()):
        raise SystemExit(1)


@cli.command()
@config_option
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def reset_vector_store(config_path: Path, force: bool) -> None:
    """Delete every chunk in the knowledge base collection.

    A local store is backed up next to its directory first.
    After reset, you will need to re-ingest your documents.
    """
    perform_vector_store_reset(_load_config(config_path), force=force)


if __name__ == "__main__":  # pragma: no cover
    cli()
