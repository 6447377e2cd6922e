from pathlib import Path
from typing import Any, Dict

import click
from rich.console import Console

from toolgate.constants import EXECUTE_BASH, FS_READ, FS_WRITE
from toolgate.errors import ToolgateError
from toolgate.logging_config import setup_logging
from toolgate.permissions.candidates import (
    FilePathCandidate,
    LiteralCandidate,
    PermissionCandidate,
    ShellCommandCandidate,
)
from toolgate.session import PolicySession
from toolgate.tui.renderers import PolicyConsoleUI


CANDIDATE_KINDS = ["shell", "path", "literal"]


def _default_kind(tool: str) -> str:
    if tool == EXECUTE_BASH:
        return "shell"
    if tool in (FS_READ, FS_WRITE):
        return "path"
    return "literal"


def _build_candidate(kind: str, argument: str, cwd: Path) -> PermissionCandidate:
    if kind == "shell":
        return ShellCommandCandidate(argument)
    if kind == "path":
        return FilePathCandidate(argument, cwd=cwd)
    return LiteralCandidate(argument)


def _session_from_obj(obj: Dict[str, Any]) -> tuple[PolicyConsoleUI, PolicySession]:
    ui = PolicyConsoleUI(Console())
    session = PolicySession.load(ui=ui, cwd=obj["cwd"])
    return ui, session


def _switch_if_requested(session: PolicySession, agent: str | None) -> None:
    if agent is None:
        return
    try:
        session.switch(agent)
    except ToolgateError as exc:
        raise click.ClickException(str(exc))


def _agent_option():
    return click.option("--agent", "agent", default=None, help="Agent to use instead of the first loaded one.")


@click.group()
@click.option(
    "--cwd",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Workspace directory holding .amazonq/ (defaults to the current directory).",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", is_flag=True, help="Only log errors.")
@click.pass_context
def cli(ctx: click.Context, cwd: Path | None, verbose: bool, quiet: bool) -> None:
    """Inspect agent permissions merged from workspace and global config."""
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"cwd": (cwd or Path.cwd()).resolve()}


@cli.group(help="Inspect loaded agents.")
def agents() -> None:
    pass


@agents.command("list", help="List agents from both scopes after merging.")
@click.pass_obj
def agents_list(obj: Dict[str, Any]) -> None:
    ui, session = _session_from_obj(obj)
    ui.render_agents(session.status_rows())


@agents.command("show", help="Show one agent and its tool permissions.")
@click.argument("name")
@click.pass_obj
def agents_show(obj: Dict[str, Any], name: str) -> None:
    ui, session = _session_from_obj(obj)
    _switch_if_requested(session, name)
    ui.render_agent(session.active_agent, session.engine.configured_tools())


@cli.group(help="Inspect MCP server configuration.")
def mcp() -> None:
    pass


@mcp.command("list", help="List MCP servers after merging both scopes.")
@click.pass_obj
def mcp_list(obj: Dict[str, Any]) -> None:
    ui, session = _session_from_obj(obj)
    ui.render_mcp_servers(session.mcp_config.mcp_servers)


@cli.command(help="Evaluate whether a tool invocation is allowed, asked or denied.")
@click.argument("tool")
@click.argument("argument", required=False)
@_agent_option()
@click.option(
    "--kind",
    type=click.Choice(CANDIDATE_KINDS, case_sensitive=False),
    default=None,
    help="How ARGUMENT is matched against detailed lists.",
)
@click.pass_obj
def check(
    obj: Dict[str, Any],
    tool: str,
    argument: str | None,
    agent: str | None,
    kind: str | None,
) -> None:
    ui, session = _session_from_obj(obj)
    _switch_if_requested(session, agent)

    candidate = None
    if argument is not None:
        candidate = _build_candidate((kind or _default_kind(tool)).lower(), argument, obj["cwd"])
    result = session.evaluate(tool, candidate)
    subject = tool if argument is None else f"{tool} {argument}"
    ui.render_decision(subject, result, session.active_agent.name)


@cli.group(help="Inspect context hooks.")
def hooks() -> None:
    pass


@hooks.command("list", help="List global and profile hooks.")
@_agent_option()
@click.pass_obj
def hooks_list(obj: Dict[str, Any], agent: str | None) -> None:
    ui, session = _session_from_obj(obj)
    _switch_if_requested(session, agent)
    ui.render_hooks(session.hooks.entries())


@cli.group(help="Inspect context files.")
def context() -> None:
    pass


@context.command("show", help="Show global and profile context files.")
@_agent_option()
@click.pass_obj
def context_show(obj: Dict[str, Any], agent: str | None) -> None:
    ui, session = _session_from_obj(obj)
    _switch_if_requested(session, agent)
    ui.render_context(session.context.scoped_files())


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
