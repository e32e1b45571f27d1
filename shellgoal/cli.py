"""Command-line interface for shellgoal."""

import logging
import sqlite3
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import configure_project_root, settings
from shellgoal import __version__
from shellgoal.bot.chunker import chunk_text
from shellgoal.errors import RunAborted
from shellgoal.runtime import build_goal_loop
from shellgoal.storage.credentials import CredentialPair, CredentialStore, connect
from shellgoal.tools.remote import RemoteExecutor

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="shellgoal",
    help="Goal-driven shell automation against a remote Linux sandbox",
)
console = Console()


@app.callback()
def _configure(
    project_root: Path | None = typer.Option(
        None,
        "--project-root",
        help="Directory holding the data/ folder (database). Defaults to the install location.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-command run logs"),
) -> None:
    if project_root is not None:
        configure_project_root(project_root)
    logging.basicConfig(
        level=logging.INFO if verbose else getattr(logging, settings.log_level),
        format="%(message)s",
    )
    if not verbose:
        logging.getLogger("shellgoal.run").setLevel(logging.WARNING)


@app.command()
def run(
    goal: str = typer.Argument(..., help="Goal to achieve, e.g. 'install nginx'"),
    model_key: str = typer.Option(..., "--model-key", envvar="GROQ_API_KEY", help="Model API key"),
    sandbox_key: str = typer.Option(
        ..., "--sandbox-key", envvar="LINUX_API_KEY", help="Sandbox API key"
    ),
    max_iterations: int = typer.Option(
        None, "--max-iterations", "-n", min=1, help="Iteration budget (default from settings)"
    ),
    cwd: str = typer.Option(None, "--cwd", help="Working directory inside the sandbox"),
) -> None:
    """Run a single goal and print the outcome."""
    credentials = CredentialPair(model_api_key=model_key, sandbox_api_key=sandbox_key)

    with httpx.Client(timeout=settings.exec_timeout) as http_client:
        loop = build_goal_loop(
            http_client,
            max_iterations=max_iterations,
            working_directory=cwd,
        )
        console.print(f"[dim]Model: {settings.groq_model} | Budget: {loop.max_iterations}[/dim]")
        try:
            outcome = loop.run(
                goal,
                credentials,
                attempt_callback=lambda attempt: console.print(
                    f"[dim]Attempt #{attempt.iteration}: "
                    f"{'ok' if attempt.succeeded else 'failed'} "
                    f"({len(attempt.executions)} commands run)[/dim]"
                ),
            )
        except RunAborted as e:
            console.print(f"\n[bold red]Error:[/bold red] Goal run aborted: {e}")
            raise typer.Exit(code=2)

    for part in chunk_text(outcome.message, settings.max_message_length):
        console.print(part, markup=False, highlight=False)

    style = "green" if outcome.succeeded else "red"
    console.print(Panel(outcome.banner, style=style, title=f"{outcome.iterations} iteration(s)"))
    if not outcome.succeeded:
        raise typer.Exit(code=1)


@app.command()
def onboard(
    user_id: str = typer.Argument(..., help="Unique user id"),
    username: str = typer.Argument(..., help="Display name"),
    model_key: str = typer.Option(..., "--model-key", prompt=True, hide_input=True),
    sandbox_key: str = typer.Option(..., "--sandbox-key", prompt=True, hide_input=True),
) -> None:
    """Store API keys for a user without going through chat onboarding."""
    db = connect(settings.database_path)
    try:
        store = CredentialStore(db)
        store.store(
            user_id,
            username,
            CredentialPair(model_api_key=model_key, sandbox_api_key=sandbox_key),
        )
    except sqlite3.IntegrityError:
        console.print(f"[yellow]User {user_id} already has API keys stored.[/yellow]")
        raise typer.Exit(code=1)
    finally:
        db.close()
    console.print(f"[green]Saved API keys for {username}.[/green]")


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, "--host", "-h"),
    port: int = typer.Option(settings.api_port, "--port", "-p"),
    reload: bool = typer.Option(False, "--reload", "-r"),
) -> None:
    """Start the REST API server."""
    import uvicorn

    console.print(f"Starting API server at [cyan]http://{host}:{port}[/cyan]")
    console.print("API docs available at [cyan]/docs[/cyan]")

    uvicorn.run(
        "shellgoal.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def check() -> None:
    """Check configuration and sandbox reachability."""
    console.print("[bold]System Status Check[/bold]\n")

    with RemoteExecutor() as executor:
        sandbox_ok = executor.check_availability()
    status = "[green]OK[/green]" if sandbox_ok else "[red]NOT AVAILABLE[/red]"
    console.print(f"Sandbox API ({settings.linux_api_url}): {status}")

    table = Table(title="Settings", show_header=False, box=None)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model", settings.groq_model)
    table.add_row("Max iterations", str(settings.max_iterations))
    table.add_row("Message length", str(settings.max_message_length))
    table.add_row("Working directory", settings.working_directory)
    table.add_row("Database", str(settings.database_path))
    table.add_row("Onboarding timeout", f"{settings.onboarding_timeout:.0f}s")
    console.print(table)


@app.command()
def version() -> None:
    """Print the version."""
    console.print(f"shellgoal {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
