"""Agent data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from toolgate.constants import (
    DEFAULT_AGENT_DESCRIPTION,
    DEFAULT_AGENT_NAME,
    DEFAULT_CONTEXT_FILES,
    WILDCARD,
)
from toolgate.mcp.models import McpServerConfig
from toolgate.models import Scope
from toolgate.permissions.models import ToolPermissions


class Trigger(str, Enum):
    PER_PROMPT = "per_prompt"
    CONVERSATION_START = "conversation_start"


@dataclass
class Hook:
    trigger: Trigger
    command: str
    disabled: bool = False


@dataclass
class Context:
    files: list[str] = field(default_factory=list)
    hooks: dict[str, Hook] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "Context":
        return cls(files=list(DEFAULT_CONTEXT_FILES))


@dataclass(frozen=True)
class McpServerList:
    """Servers a legacy persona enables; ``servers is None`` means all."""

    servers: tuple[str, ...] | None = None

    @property
    def is_all(self) -> bool:
        return self.servers is None

    @classmethod
    def from_payload(cls, payload: list[str]) -> "McpServerList":
        if WILDCARD in payload:
            return cls()
        return cls(servers=tuple(payload))


@dataclass
class PersonaConfig:
    """Older persona file shape, read only to be migrated into ``Agent``."""

    mcp_servers: McpServerList = field(default_factory=McpServerList)
    tool_perms: ToolPermissions = field(default_factory=ToolPermissions.default)
    context: Context = field(default_factory=Context.default)


@dataclass
class Agent:
    name: str
    description: str | None = None
    prompt: str | None = None
    mcp_servers: McpServerConfig = field(default_factory=McpServerConfig)
    tools: list[str] = field(default_factory=list)
    allowed_tools: set[str] = field(default_factory=set)
    tools_settings: dict[str, Any] = field(default_factory=dict)
    tool_permissions: ToolPermissions = field(default_factory=ToolPermissions.default)
    context: Context = field(default_factory=Context.default)
    source_path: Path | None = None
    scope: Scope | None = None

    @classmethod
    def default(cls) -> "Agent":
        return cls(
            name=DEFAULT_AGENT_NAME,
            description=DEFAULT_AGENT_DESCRIPTION,
            tools=[WILDCARD],
        )

    @property
    def is_fully_trusted(self) -> bool:
        return WILDCARD in self.allowed_tools
