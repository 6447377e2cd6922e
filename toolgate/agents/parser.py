"""Parse and serialize agent and persona files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from toolgate.agents.models import Agent, Context, Hook, McpServerList, PersonaConfig, Trigger
from toolgate.agents.schema import SchemaName, first_schema_error
from toolgate.constants import BUILT_IN_TOOLS, MCP_PREFIX, WILDCARD
from toolgate.errors import (
    AgentDecodeError,
    DecodeError,
    InvalidConfigSchemaError,
    InvalidJsonFormatError,
)
from toolgate.mcp.models import McpServerConfig
from toolgate.models import Scope
from toolgate.permissions.codec import decode_tool_permissions, encode_tool_permissions
from toolgate.permissions.models import AlwaysAllow, ToolPermissions, ToolRef
from toolgate.utils import write_json


def is_legacy_persona(payload: Any) -> bool:
    return isinstance(payload, dict) and "name" not in payload


def parse_agent(
    payload: Any,
    source_path: Path | None = None,
    scope: Scope | None = None,
) -> Agent:
    if not isinstance(payload, dict):
        raise AgentDecodeError("agent config must be a JSON object")
    error = first_schema_error(SchemaName.AGENT, payload)
    if error is not None:
        raise AgentDecodeError(error)

    tool_permissions = (
        decode_tool_permissions(payload["toolPerms"])
        if "toolPerms" in payload
        else ToolPermissions.default()
    )
    agent = Agent(
        name=payload["name"],
        description=payload.get("description"),
        prompt=payload.get("prompt"),
        mcp_servers=McpServerConfig.from_servers_payload(payload.get("mcpServers", {})),
        tools=list(payload.get("tools", [])),
        allowed_tools=set(payload.get("allowedTools", [])),
        tools_settings=dict(payload.get("toolsSettings", {})),
        tool_permissions=tool_permissions,
        context=_agent_context(payload),
        source_path=source_path,
        scope=scope,
    )
    fold_allowed_tools(agent)
    return agent


def fold_allowed_tools(agent: Agent) -> None:
    """Grant ``AlwaysAllow`` for named ``allowedTools`` entries.

    Explicit ``toolPerms`` entries are left untouched.
    """
    for name in sorted(agent.allowed_tools):
        if name == WILDCARD:
            continue
        ref = ToolRef.parse(name)
        if agent.tool_permissions.get_exact(ref) is None:
            agent.tool_permissions.set(ref, AlwaysAllow())


def parse_persona_config(payload: Any) -> PersonaConfig:
    if not isinstance(payload, dict):
        raise AgentDecodeError("persona config must be a JSON object")
    error = first_schema_error(SchemaName.PERSONA, payload)
    if error is not None:
        raise AgentDecodeError(error)

    return PersonaConfig(
        mcp_servers=McpServerList.from_payload(payload.get("mcpServers", [WILDCARD])),
        tool_perms=(
            decode_tool_permissions(payload["toolPerms"])
            if "toolPerms" in payload
            else ToolPermissions.default()
        ),
        context=decode_context(payload["context"]) if "context" in payload else Context.default(),
    )


def migrate_persona(
    name: str,
    config: PersonaConfig,
    source_path: Path | None = None,
    scope: Scope | None = None,
) -> Agent:
    if config.mcp_servers.is_all:
        tools = [WILDCARD]
    else:
        tools = list(BUILT_IN_TOOLS) + [
            f"{MCP_PREFIX}{server}" for server in config.mcp_servers.servers or ()
        ]
    return Agent(
        name=name,
        tools=tools,
        tool_permissions=config.tool_perms,
        context=config.context,
        source_path=source_path,
        scope=scope,
    )


def load_agent_payload(
    payload: Any,
    source_path: Path | None = None,
    scope: Scope | None = None,
) -> Agent:
    if is_legacy_persona(payload):
        name = source_path.stem if source_path is not None else "unknown_persona"
        return migrate_persona(name, parse_persona_config(payload), source_path, scope)
    return parse_agent(payload, source_path=source_path, scope=scope)


def load_agent_file(path: Path, scope: Scope | None = None) -> Agent:
    """Read one persona file.

    I/O errors propagate as ``OSError``; malformed content raises the
    ``ConfigFileError`` subclasses carrying the path.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJsonFormatError(path, f"not valid UTF-8: {exc.reason}") from exc
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise InvalidJsonFormatError(path, str(exc)) from exc
    try:
        return load_agent_payload(payload, source_path=path, scope=scope)
    except DecodeError as exc:
        raise InvalidConfigSchemaError(path, str(exc)) from exc


def serialize_agent(agent: Agent) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": agent.name}
    if agent.description is not None:
        payload["description"] = agent.description
    if agent.prompt is not None:
        payload["prompt"] = agent.prompt
    if agent.mcp_servers.mcp_servers:
        payload["mcpServers"] = agent.mcp_servers.servers_payload()
    payload["tools"] = list(agent.tools)
    payload["allowedTools"] = sorted(agent.allowed_tools)
    if agent.tools_settings:
        payload["toolsSettings"] = dict(agent.tools_settings)
    payload["toolPerms"] = encode_tool_permissions(agent.tool_permissions)
    payload["context"] = encode_context(agent.context)
    return payload


def save_agent(agent: Agent, path: Path) -> None:
    write_json(path, serialize_agent(agent))


def decode_context(payload: Any) -> Context:
    if not isinstance(payload, dict):
        raise AgentDecodeError("`context` must be an object")
    files = payload.get("files", [])
    if not isinstance(files, list) or not all(isinstance(item, str) for item in files):
        raise AgentDecodeError("`context.files` must be a list of strings")

    hooks_raw = payload.get("hooks", {})
    if not isinstance(hooks_raw, dict):
        raise AgentDecodeError("`context.hooks` must be an object")
    hooks = {name: decode_hook(name, entry) for name, entry in hooks_raw.items()}
    return Context(files=list(files), hooks=hooks)


def decode_hook(name: str, payload: Any) -> Hook:
    if not isinstance(payload, dict):
        raise AgentDecodeError(f"hook `{name}` must be an object")
    try:
        trigger = Trigger(payload.get("trigger"))
    except ValueError as exc:
        raise AgentDecodeError(f"hook `{name}` has unknown trigger {payload.get('trigger')!r}") from exc
    command = payload.get("command")
    if not isinstance(command, str):
        raise AgentDecodeError(f"hook `{name}` is missing `command`")
    return Hook(trigger=trigger, command=command, disabled=bool(payload.get("disabled", False)))


def encode_context(context: Context) -> dict[str, Any]:
    return {
        "files": list(context.files),
        "hooks": {name: encode_hook(hook) for name, hook in context.hooks.items()},
    }


def encode_hook(hook: Hook) -> dict[str, Any]:
    payload: dict[str, Any] = {"trigger": hook.trigger.value, "command": hook.command}
    if hook.disabled:
        payload["disabled"] = True
    return payload


def _agent_context(payload: dict[str, Any]) -> Context:
    context = decode_context(payload["context"]) if "context" in payload else None

    if "fileHooks" in payload:
        if context is None:
            context = Context(files=[])
        for item in payload["fileHooks"]:
            if item not in context.files:
                context.files.append(item)
    if context is None:
        context = Context.default()

    for index, command in enumerate(payload.get("startHooks", []), start=1):
        context.hooks.setdefault(
            f"start_hook_{index}", Hook(trigger=Trigger.CONVERSATION_START, command=command)
        )
    for index, command in enumerate(payload.get("promptHooks", []), start=1):
        context.hooks.setdefault(
            f"prompt_hook_{index}", Hook(trigger=Trigger.PER_PROMPT, command=command)
        )
    return context
