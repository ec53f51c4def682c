"""Run and resume agent sessions from the command line."""

from __future__ import annotations

import asyncio
import importlib
import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from ostinato.agent.errors import OstinatoError
from ostinato.agent.loop import ReActAgent
from ostinato.config.loader import ConfigError, load_config
from ostinato.intercept.hitl import HITLDecision, HITLInterceptor
from ostinato.llm.client import StreamChunk
from ostinato.sessions.storage import TraceStore
from ostinato.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from ostinato.agent.trace import Trace
    from ostinato.config.schema import OstinatoConfig

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_cli_config(config_path: str | None) -> OstinatoConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Failed to load config: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None


def load_tools(modules: list[str]) -> ToolRegistry:
    """Import ``modules`` so their ``@tool`` functions register, then collect them."""
    for name in modules:
        try:
            importlib.import_module(name)
        except ImportError as e:
            console.print(f"[red]Cannot import tool module {name}: {e}[/red]")
            raise typer.Exit(1) from None
    registry = ToolRegistry.from_registered()
    logger.debug("Loaded %d tools from %d modules", len(registry), len(modules))
    return registry


def _print_chunk(chunk: StreamChunk) -> None:
    if chunk.reset:
        console.print("\n[dim](model call failed, retrying)[/dim]")
    elif chunk.delta:
        console.print(chunk.delta, end="", markup=False, highlight=False)


def _build_agent(
    config: OstinatoConfig,
    tool_modules: list[str],
    sensitive: list[str],
) -> ReActAgent:
    tools = load_tools([*config.agent.tool_modules, *tool_modules])
    interceptors = []
    gated = [*config.agent.sensitive_tools, *sensitive]
    if gated:
        interceptors.append(HITLInterceptor().on_sensitive_tool(*gated))

    return ReActAgent.from_config(
        config,
        tools=tools,
        interceptors=interceptors,
        on_chunk=_print_chunk if config.agent.streaming else None,
    )


def render_trace(trace: Trace) -> None:
    """Print the outcome of a call: the answer, or why the run is waiting."""
    if trace.pending:
        body = f"[yellow]Suspended:[/yellow] {trace.pending_reason or 'no reason given'}"
        task = HITLInterceptor.pending_task(trace)
        if task is not None:
            body += (
                f"\nTool: [bold]{task.tool_name}[/bold]\nArguments: {task.args}\n\n"
                f"Continue with [bold]ostinato resume {trace.session_id} "
                f"--approve {task.tool_name}[/bold] (or --skip / --reject)"
            )
        console.print(Panel(body, border_style="yellow"))
    else:
        console.print("\n[bold green]ostinato[/bold green]")
        console.print(Markdown(trace.final_answer or ""))

    metrics = trace.metrics
    console.print(
        f"[dim]session {trace.session_id} | steps {trace.step_count} | "
        f"tools {trace.tool_call_count} | tokens {metrics.total_tokens} | "
        f"{metrics.duration_ms} ms[/dim]"
    )


def run_command(
    prompt: str,
    session_id: str | None = None,
    config_path: str | None = None,
    plan: bool = False,
    tool_modules: list[str] | None = None,
    sensitive: list[str] | None = None,
    verbose: bool = False,
) -> None:
    """Start a new request, optionally on an existing session."""
    setup_logging(verbose)
    config = load_cli_config(config_path)
    if plan:
        config.agent.planning_mode = True

    agent = _build_agent(config, tool_modules or [], sensitive or [])

    async def _run() -> Trace:
        trace = agent.get_trace(session_id) if session_id else None
        if trace is None:
            trace = agent.new_trace(session_id)
        return await agent.call(prompt, trace)

    try:
        if config.agent.streaming:
            trace = asyncio.run(_run())
        else:
            with console.status("[bold green]Thinking...[/bold green]", spinner="dots"):
                trace = asyncio.run(_run())
    except OstinatoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    render_trace(trace)


def _decision(
    approve: str | None, skip: str | None, reject: str | None, comment: str | None
) -> tuple[str, HITLDecision] | None:
    given = [name for name in (approve, skip, reject) if name]
    if len(given) > 1:
        console.print("[red]Use only one of --approve, --skip and --reject[/red]")
        raise typer.Exit(2)
    if approve:
        return approve, HITLDecision.approve(comment)
    if skip:
        return skip, HITLDecision.skip(comment)
    if reject:
        return reject, HITLDecision.reject(comment)
    return None


def resume_command(
    session_id: str,
    approve: str | None = None,
    skip: str | None = None,
    reject: str | None = None,
    comment: str | None = None,
    config_path: str | None = None,
    tool_modules: list[str] | None = None,
    verbose: bool = False,
) -> None:
    """Attach a reviewer decision to a suspended session and continue it."""
    setup_logging(verbose)
    config = load_cli_config(config_path)
    if not config.sessions.enabled:
        console.print("[red]Session persistence is disabled in the config[/red]")
        raise typer.Exit(1)

    trace = TraceStore(config.sessions.db_path).load(session_id)
    if trace is None:
        console.print(f"[red]No session found: {session_id}[/red]")
        raise typer.Exit(1)

    gated: list[str] = []
    task = HITLInterceptor.pending_task(trace)
    if task is not None:
        gated.append(task.tool_name)

    decision = _decision(approve, skip, reject, comment)
    if decision is not None:
        tool_name, hitl_decision = decision
        HITLInterceptor.submit(trace, tool_name, hitl_decision)
        gated.append(tool_name)

    agent = _build_agent(config, tool_modules or [], gated)

    try:
        with console.status("[bold green]Resuming...[/bold green]", spinner="dots"):
            trace = asyncio.run(agent.call(None, trace))
    except OstinatoError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    render_trace(trace)
