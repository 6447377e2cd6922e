from rich.table import Column, Table

from toolgate.agents.models import Agent, Hook
from toolgate.mcp.models import CustomToolConfig
from toolgate.models import AgentStatusRow, HookScope, PermissionRow
from toolgate.tui.enums import PERMISSION_STYLE, TRIGGER_STYLE, UIStyle
from toolgate.utils import compact_home_path


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


class AgentsTable:
    @staticmethod
    def build(rows: list[AgentStatusRow]) -> Table:
        table = Table(
            Column(header="", width=1),
            Column(header="Name", style="bold"),
            Column(header="Scope", width=9),
            Column(header="Source", overflow="ellipsis", max_width=48),
            Column(header="Description", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for row in rows:
            table.add_row(
                _styled("*", UIStyle.GREEN.value) if row.active else "",
                row.name,
                row.scope,
                row.source,
                row.description,
            )
        return table


class AgentSummary:
    @staticmethod
    def build(agent: Agent) -> Table:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Name", agent.name)
        table.add_row("Description", agent.description or "")
        table.add_row("Scope", agent.scope.value if agent.scope else "built-in")
        table.add_row(
            "Source", compact_home_path(agent.source_path) if agent.source_path else ""
        )
        table.add_row("Tools", ", ".join(agent.tools) or "none")
        table.add_row("Allowed", ", ".join(sorted(agent.allowed_tools)) or "none")
        table.add_row("Context files", ", ".join(agent.context.files) or "none")
        return table


class PermissionTable:
    @staticmethod
    def build(rows: list[PermissionRow]) -> Table:
        table = Table(
            Column(header="Subject", style="bold"),
            Column(header="Permission", width=12),
            Column(header="Detail", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for row in rows:
            style = PERMISSION_STYLE.get(row.permission, UIStyle.WHITE.value)
            table.add_row(row.subject, _styled(row.permission, style), row.detail)
        return table


class McpTable:
    @staticmethod
    def build(servers: dict[str, CustomToolConfig]) -> Table:
        table = Table(
            Column(header="Server", style="bold"),
            Column(header="Command", overflow="ellipsis"),
            Column(header="Timeout", justify="right", width=9),
            Column(header="Status", width=9),
            expand=True,
            header_style="bold",
        )
        for name in sorted(servers):
            config = servers[name]
            command = " ".join([config.command, *config.args])
            status = (
                _styled("disabled", UIStyle.DIM.value)
                if config.disabled
                else _styled("enabled", UIStyle.GREEN.value)
            )
            table.add_row(name, command, f"{config.timeout}ms", status)
        return table


class HooksTable:
    @staticmethod
    def build(hooks: list[tuple[HookScope, str, Hook]]) -> Table:
        table = Table(
            Column(header="Scope", width=8),
            Column(header="Name", style="bold"),
            Column(header="Trigger", width=18),
            Column(header="Command", overflow="fold"),
            Column(header="Status", width=9),
            expand=True,
            header_style="bold",
        )
        for scope, name, hook in hooks:
            status = (
                _styled("disabled", UIStyle.DIM.value)
                if hook.disabled
                else _styled("enabled", UIStyle.GREEN.value)
            )
            table.add_row(
                scope.value,
                name,
                _styled(hook.trigger.value, TRIGGER_STYLE[hook.trigger]),
                hook.command,
                status,
            )
        return table


class ContextTable:
    @staticmethod
    def build(scoped_files: list[tuple[str, list[str]]]) -> Table:
        table = Table(
            Column(header="Scope", width=8),
            Column(header="Path", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for scope, files in scoped_files:
            for item in files:
                table.add_row(scope, item)
        return table
