"""Combine local and global scope results; the workspace always wins."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from toolgate.agents.models import Agent
from toolgate.mcp.models import McpServerConfig
from toolgate.tui.renderers import PolicyConsoleUI

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _report_conflict(ui: PolicyConsoleUI | None, kind: str, name: str) -> None:
    message = f"{kind} conflict for {name}. Using workspace version."
    logger.warning(message)
    if ui is not None:
        ui.warn(message, subject=name)


def merge_mcp_servers(
    global_config: McpServerConfig,
    local_config: McpServerConfig,
    ui: PolicyConsoleUI | None = None,
) -> McpServerConfig:
    merged = dict(global_config.mcp_servers)
    for name, config in local_config.mcp_servers.items():
        if name in merged:
            _report_conflict(ui, "MCP config", name)
        merged[name] = config
    return McpServerConfig(mcp_servers=merged)


def merge_named(
    local_items: list[T],
    global_items: list[T],
    key: Callable[[T], str],
    kind: str,
    ui: PolicyConsoleUI | None = None,
) -> list[T]:
    local_names = {key(item) for item in local_items}
    retained: list[T] = []
    for item in global_items:
        if key(item) in local_names:
            _report_conflict(ui, kind, key(item))
            continue
        retained.append(item)
    return [*local_items, *retained]


def merge_agents(
    local_agents: list[Agent],
    global_agents: list[Agent],
    ui: PolicyConsoleUI | None = None,
) -> list[Agent]:
    merged = merge_named(
        local_agents, global_agents, key=lambda agent: agent.name, kind="Persona", ui=ui
    )
    if not merged:
        logger.debug("No personas found in either scope; using the built-in default")
        return [Agent.default()]
    return merged
