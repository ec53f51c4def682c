"""Inspect stored sessions."""

import typer
from rich.console import Console
from rich.table import Table

from ostinato.cli.run_cmd import load_cli_config
from ostinato.intercept.hitl import HITLInterceptor
from ostinato.sessions.storage import TraceStore

console = Console()


def _store(config_path: str | None) -> TraceStore:
    config = load_cli_config(config_path)
    return TraceStore(config.sessions.db_path)


def _shorten(text: str | None, width: int = 80) -> str:
    text = (text or "").replace("\n", " ")
    return text if len(text) <= width else text[: width - 3] + "..."


def sessions_command(limit: int = 20, config_path: str | None = None) -> None:
    """List the most recently updated sessions."""
    sessions = _store(config_path).list_sessions(limit=limit)
    if not sessions:
        console.print("[yellow]No sessions found[/yellow]")
        return

    table = Table(title=f"Sessions ({len(sessions)})")
    table.add_column("Session", style="cyan")
    table.add_column("Updated", style="magenta")
    table.add_column("Route", style="blue")
    table.add_column("Status", style="bold")
    table.add_column("Prompt")

    for summary in sessions:
        status = "[yellow]pending[/yellow]" if summary.pending else "[green]idle[/green]"
        table.add_row(
            summary.session_id,
            summary.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
            summary.route,
            status,
            _shorten(summary.prompt, 60),
        )
    console.print(table)


def show_command(session_id: str, config_path: str | None = None) -> None:
    """Print the history, plan and metrics of one session."""
    trace = _store(config_path).load(session_id)
    if trace is None:
        console.print(f"[red]No session found: {session_id}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Session {trace.session_id}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Role", style="cyan")
    table.add_column("Content")

    for i, message in enumerate(trace.messages, 1):
        content = message.content
        if message.tool_calls:
            calls = ", ".join(f"{c.name}({c.arguments})" for c in message.tool_calls)
            content = f"{content} [yellow]-> {calls}[/yellow]" if content else f"[yellow]{calls}[/yellow]"
        role = f"tool:{message.name}" if message.role == "tool" else message.role
        table.add_row(str(i), role, _shorten(content, 120))
    console.print(table)

    if trace.plans:
        console.print("\n[bold]Plan[/bold]")
        console.print(trace.formatted_plans(), markup=False)

    if trace.pending:
        console.print(f"\n[yellow]Suspended:[/yellow] {trace.pending_reason}")
        task = HITLInterceptor.pending_task(trace)
        if task is not None:
            console.print(f"Waiting on [bold]{task.tool_name}[/bold] with {task.args}")
    elif trace.final_answer is not None:
        console.print(f"\n[green]Final answer:[/green] {trace.final_answer}")

    m = trace.metrics
    console.print(
        f"\n[dim]route {trace.route} | steps {trace.step_count}/{trace.max_steps} | "
        f"model calls {m.llm_calls} | tool calls {m.tool_calls} | "
        f"tokens {m.prompt_tokens}+{m.completion_tokens}={m.total_tokens} | "
        f"{m.duration_ms} ms[/dim]"
    )
