from rich.console import Console
from rich.markup import escape

from toolgate.agents.models import Agent, Hook
from toolgate.constants import DEFAULT_ALLOWED_BUILT_INS
from toolgate.mcp.models import CustomToolConfig
from toolgate.models import AgentStatusRow, HookScope, PermissionEvalResult, PermissionRow
from toolgate.tui.enums import DECISION_STYLE, UIStyle
from toolgate.tui.sections import UISection
from toolgate.tui.tables import (
    AgentsTable,
    AgentSummary,
    ContextTable,
    HooksTable,
    McpTable,
    PermissionTable,
)


class PolicyConsoleUI:
    """Output sink for diagnostics and inspection views."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def warn(self, message: str, subject: str | None = None) -> None:
        text = escape(message)
        if subject is not None:
            text = text.replace(
                escape(subject), f"[{UIStyle.GREEN.value}]{escape(subject)}[/{UIStyle.GREEN.value}]", 1
            )
        self.console.print(f"[{UIStyle.YELLOW.value}]WARNING:[/{UIStyle.YELLOW.value}] {text}")

    def error(self, message: str) -> None:
        self.console.print(f"[{UIStyle.RED.value}]Error:[/{UIStyle.RED.value}] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[{UIStyle.GREEN.value}]{escape(message)}[/{UIStyle.GREEN.value}]")

    def render_agents(self, rows: list[AgentStatusRow]) -> None:
        if not rows:
            self.console.print(UISection.note("agents", "No agents loaded."))
            return
        self.console.print(UISection.wrap("agents", AgentsTable.build(rows)))

    def render_agent(self, agent: Agent, permissions: list[PermissionRow]) -> None:
        self.console.print(
            UISection.wrap(f"agent: {agent.name}", AgentSummary.build(agent), style=UIStyle.CYAN.value)
        )
        if agent.scope is None:
            self.console.print(
                UISection.note(
                    "built-in default",
                    escape(
                        "No persona files were found, so this agent comes from toolgate itself. "
                        f"Only {', '.join(DEFAULT_ALLOWED_BUILT_INS)} run without asking; "
                        'add a persona with "allowedTools": ["*"] to trust every tool.'
                    ),
                    style=UIStyle.YELLOW.value,
                )
            )
        if agent.is_fully_trusted:
            self.console.print(
                UISection.note(
                    "permissions",
                    "All tools are trusted; per-tool permissions are bypassed.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        if not permissions:
            self.console.print(UISection.note("permissions", "No tool permissions configured."))
            return
        self.console.print(
            UISection.wrap("permissions", PermissionTable.build(permissions), style=UIStyle.MAGENTA.value)
        )

    def render_mcp_servers(self, servers: dict[str, CustomToolConfig]) -> None:
        if not servers:
            self.console.print(UISection.note("mcp servers", "No MCP servers configured."))
            return
        self.console.print(UISection.wrap("mcp servers", McpTable.build(servers)))

    def render_decision(self, subject: str, result: PermissionEvalResult, agent_name: str) -> None:
        style = DECISION_STYLE[result]
        self.console.print(
            f"{escape(subject)} under [bold]{escape(agent_name)}[/bold]: "
            f"[{style}]{result.value}[/{style}]"
        )

    def render_hooks(self, hooks: list[tuple[HookScope, str, Hook]]) -> None:
        if not hooks:
            self.console.print(UISection.note("hooks", "No hooks configured."))
            return
        self.console.print(UISection.wrap("hooks", HooksTable.build(hooks), style=UIStyle.CYAN.value))

    def render_context(self, scoped_files: list[tuple[str, list[str]]]) -> None:
        if not any(files for _, files in scoped_files):
            self.console.print(UISection.note("context", "No context files configured."))
            return
        self.console.print(UISection.wrap("context", ContextTable.build(scoped_files)))
