"""Main CLI application using Typer."""

import typer
from rich.console import Console

from ostinato import __version__

# Create Typer app
app = typer.Typer(
    name="ostinato",
    help="Ostinato - ReAct agent loop with planning and resumable sessions",
    no_args_is_help=True,
)

console = Console()


@app.command()
def version():
    """Show ostinato version."""
    console.print(f"ostinato version {__version__}")


@app.command()
def run(
    prompt: str = typer.Argument(..., help="Task for the agent"),
    session_id: str = typer.Option(
        None, "--session", "-s", help="Continue this session instead of starting a new one"
    ),
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.ostinato/ostinato.yaml)",
    ),
    plan: bool = typer.Option(False, "--plan", "-p", help="Plan the task before acting"),
    tool_modules: list[str] = typer.Option(
        None, "--tools", "-t", help="Module to import for @tool functions (repeatable)"
    ),
    sensitive: list[str] = typer.Option(
        None, "--sensitive", help="Tool that needs approval before it runs (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Run the agent on a task."""
    from ostinato.cli.run_cmd import run_command

    run_command(
        prompt,
        session_id=session_id,
        config_path=config_path,
        plan=plan,
        tool_modules=tool_modules,
        sensitive=sensitive,
        verbose=verbose,
    )


@app.command()
def resume(
    session_id: str = typer.Argument(..., help="Session to continue"),
    approve: str = typer.Option(None, "--approve", help="Approve the pending call to TOOL"),
    skip: str = typer.Option(None, "--skip", help="Skip the pending call to TOOL"),
    reject: str = typer.Option(None, "--reject", help="Reject the pending call and end the run"),
    comment: str = typer.Option(None, "--comment", "-m", help="Reviewer comment"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    tool_modules: list[str] = typer.Option(
        None, "--tools", "-t", help="Module to import for @tool functions (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Resume a suspended session, optionally with a review decision."""
    from ostinato.cli.run_cmd import resume_command

    resume_command(
        session_id,
        approve=approve,
        skip=skip,
        reject=reject,
        comment=comment,
        config_path=config_path,
        tool_modules=tool_modules,
        verbose=verbose,
    )


@app.command()
def show(
    session_id: str = typer.Argument(..., help="Session to show"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Show the history, plan and metrics of a session."""
    from ostinato.cli.session_cmd import show_command

    show_command(session_id, config_path=config_path)


@app.command()
def sessions(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of sessions to show"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """List stored sessions."""
    from ostinato.cli.session_cmd import sessions_command

    sessions_command(limit=limit, config_path=config_path)


if __name__ == "__main__":
    app()
