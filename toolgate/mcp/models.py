"""MCP server configuration: name → connection spec."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from toolgate.agents.schema import SchemaName, first_schema_error
from toolgate.constants import DEFAULT_MCP_TIMEOUT_MS
from toolgate.errors import McpConfigDecodeError
from toolgate.utils import write_json

MCP_SERVERS_KEY = "mcpServers"


@dataclass
class CustomToolConfig:
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] | None = None
    timeout: int = DEFAULT_MCP_TIMEOUT_MS
    disabled: bool = False

    @classmethod
    def from_payload(cls, name: str, payload: Any) -> "CustomToolConfig":
        if not isinstance(payload, dict):
            raise McpConfigDecodeError(f"server `{name}` must be an object")
        command = payload.get("command")
        if not isinstance(command, str) or not command:
            raise McpConfigDecodeError(f"server `{name}` is missing `command`")

        args = payload.get("args", [])
        if not isinstance(args, list) or not all(isinstance(item, str) for item in args):
            raise McpConfigDecodeError(f"server `{name}`: `args` must be a list of strings")

        env = payload.get("env")
        if env is not None and (
            not isinstance(env, dict)
            or not all(isinstance(value, str) for value in env.values())
        ):
            raise McpConfigDecodeError(f"server `{name}`: `env` must map strings to strings")

        timeout = payload.get("timeout", DEFAULT_MCP_TIMEOUT_MS)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0:
            raise McpConfigDecodeError(f"server `{name}`: `timeout` must be a positive integer")

        return cls(
            command=command,
            args=list(args),
            env=dict(env) if env is not None else None,
            timeout=timeout,
            disabled=bool(payload.get("disabled", False)),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"command": self.command, "args": list(self.args)}
        if self.env is not None:
            payload["env"] = dict(self.env)
        if self.timeout != DEFAULT_MCP_TIMEOUT_MS:
            payload["timeout"] = self.timeout
        if self.disabled:
            payload["disabled"] = True
        return payload


@dataclass
class McpServerConfig:
    mcp_servers: dict[str, CustomToolConfig] = field(default_factory=dict)

    @classmethod
    def from_servers_payload(cls, payload: Any) -> "McpServerConfig":
        if not isinstance(payload, dict):
            raise McpConfigDecodeError(f"`{MCP_SERVERS_KEY}` must be an object")
        return cls(
            mcp_servers={
                name: CustomToolConfig.from_payload(name, entry)
                for name, entry in payload.items()
            }
        )

    @classmethod
    def from_payload(cls, payload: Any) -> "McpServerConfig":
        if not isinstance(payload, dict):
            raise McpConfigDecodeError("MCP config must be a JSON object")
        error = first_schema_error(SchemaName.MCP_CONFIG, payload)
        if error is not None:
            raise McpConfigDecodeError(error)
        return cls.from_servers_payload(payload.get(MCP_SERVERS_KEY, {}))

    @classmethod
    def from_json(cls, text: str) -> "McpServerConfig":
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise McpConfigDecodeError(str(exc)) from exc
        return cls.from_payload(payload)

    @classmethod
    def load_from_file(cls, path: Path) -> "McpServerConfig":
        return cls.from_json(path.read_text(encoding="utf-8"))

    def servers_payload(self) -> dict[str, Any]:
        return {name: config.to_payload() for name, config in self.mcp_servers.items()}

    def to_payload(self) -> dict[str, Any]:
        return {MCP_SERVERS_KEY: self.servers_payload()}

    def save_to_file(self, path: Path) -> None:
        write_json(path, self.to_payload())

    def enabled_servers(self) -> dict[str, CustomToolConfig]:
        return {
            name: config for name, config in self.mcp_servers.items() if not config.disabled
        }
