"""Tests for agent parsing, legacy persona migration and serialization."""

import json
from pathlib import Path

import pytest

from toolgate.agents.models import Agent, Context, Hook, Trigger
from toolgate.agents.parser import (
    is_legacy_persona,
    load_agent_file,
    load_agent_payload,
    parse_agent,
    serialize_agent,
)
from toolgate.errors import AgentDecodeError, InvalidConfigSchemaError, InvalidJsonFormatError
from toolgate.models import Scope
from toolgate.permissions.models import AlwaysAllow, Deny, ToolRef


def test_parse_full_agent() -> None:
    agent = parse_agent(
        {
            "name": "reviewer",
            "description": "Reviews pull requests",
            "prompt": "Be terse.",
            "mcpServers": {"git": {"command": "uvx", "args": ["mcp-server-git"]}},
            "tools": ["fs_read", "@git"],
            "allowedTools": ["fs_read"],
            "toolsSettings": {"fs_read": {"maxBytes": 1000}},
            "toolPerms": {"builtIn": {"fs_write": "deny"}},
            "context": {
                "files": ["README.md"],
                "hooks": {"branch": {"trigger": "conversation_start", "command": "git branch"}},
            },
            "futureField": {"ignored": True},
        },
        scope=Scope.LOCAL,
    )
    assert agent.name == "reviewer"
    assert agent.description == "Reviews pull requests"
    assert agent.prompt == "Be terse."
    assert agent.mcp_servers.mcp_servers["git"].args == ["mcp-server-git"]
    assert agent.tools == ["fs_read", "@git"]
    assert agent.tools_settings == {"fs_read": {"maxBytes": 1000}}
    assert agent.tool_permissions.get_exact(ToolRef(tool="fs_write")) == Deny()
    assert agent.tool_permissions.get_exact(ToolRef(tool="fs_read")) == AlwaysAllow()
    assert agent.context.files == ["README.md"]
    assert agent.context.hooks["branch"] == Hook(
        trigger=Trigger.CONVERSATION_START, command="git branch"
    )
    assert agent.scope is Scope.LOCAL


def test_parse_minimal_agent_uses_defaults() -> None:
    agent = parse_agent({"name": "bare"})
    assert agent.tools == []
    assert agent.allowed_tools == set()
    assert agent.context == Context.default()
    assert agent.tool_permissions.lookup(ToolRef(tool="fs_read")) == AlwaysAllow()
    assert not agent.is_fully_trusted


def test_allowed_tools_do_not_override_explicit_entries() -> None:
    agent = parse_agent(
        {
            "name": "x",
            "allowedTools": ["fs_write", "@git/git_status", "*"],
            "toolPerms": {"builtIn": {"fs_write": "deny"}},
        }
    )
    assert agent.tool_permissions.get_exact(ToolRef(tool="fs_write")) == Deny()
    assert agent.tool_permissions.get_exact(ToolRef(server="git", tool="git_status")) == AlwaysAllow()
    assert agent.is_fully_trusted


def test_context_without_files_key_is_empty() -> None:
    agent = parse_agent({"name": "x", "context": {"hooks": {}}})
    assert agent.context.files == []


def test_legacy_hook_fields_fold_into_context() -> None:
    agent = parse_agent(
        {
            "name": "x",
            "fileHooks": ["docs/**/*.md"],
            "startHooks": ["git status"],
            "promptHooks": ["date"],
        }
    )
    assert agent.context.files == ["docs/**/*.md"]
    assert agent.context.hooks["start_hook_1"].trigger == Trigger.CONVERSATION_START
    assert agent.context.hooks["prompt_hook_1"].command == "date"


@pytest.mark.parametrize(
    "payload",
    [
        {"description": "no name", "tools": "fs_read", "name": 3},
        {"name": "x", "toolPerms": {"builtIn": {"fs_read": "sometimes"}}},
        {"name": "x", "toolPerms": {"builtIn": {"fs_read": {"allow": ["a"]}}}},
        {"name": "x", "context": {"hooks": {"h": {"trigger": "hourly", "command": "ls"}}}},
        {"name": "x", "mcpServers": {"git": {"args": []}}},
        ["not", "an", "object"],
    ],
)
def test_parse_agent_rejects_invalid_payloads(payload) -> None:
    with pytest.raises(AgentDecodeError):
        parse_agent(payload)


def test_is_legacy_persona() -> None:
    assert is_legacy_persona({"mcpServers": ["git"]})
    assert not is_legacy_persona({"name": "x"})


def test_legacy_persona_migrates_with_file_stem(tmp_path: Path) -> None:
    agent = load_agent_payload(
        {"mcpServers": ["git", "jira"], "toolPerms": {"builtIn": {"fs_write": "deny"}}},
        source_path=tmp_path / "backend.json",
        scope=Scope.GLOBAL,
    )
    assert agent.name == "backend"
    assert "@git" in agent.tools and "@jira" in agent.tools
    assert "fs_read" in agent.tools
    assert agent.tool_permissions.get_exact(ToolRef(tool="fs_write")) == Deny()
    assert agent.context == Context.default()
    assert agent.scope is Scope.GLOBAL


def test_legacy_persona_wildcard_servers() -> None:
    agent = load_agent_payload({"mcpServers": ["*"]}, source_path=Path("all.json"))
    assert agent.tools == ["*"]


def test_load_agent_file_reports_path(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidJsonFormatError) as excinfo:
        load_agent_file(broken)
    assert excinfo.value.path == broken

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"name": "x", "tools": "fs_read"}), encoding="utf-8")
    with pytest.raises(InvalidConfigSchemaError, match="tools"):
        load_agent_file(invalid)

    with pytest.raises(OSError):
        load_agent_file(tmp_path / "missing.json")


def test_serialize_round_trip(tmp_path: Path) -> None:
    original = parse_agent(
        {
            "name": "dev",
            "description": "d",
            "tools": ["*"],
            "allowedTools": ["fs_read"],
            "toolPerms": {
                "builtIn": {"execute_bash": {"alwaysAllow": ["npm"], "deny": ["curl"]}},
                "git": {"*": "alwaysAllow"},
            },
            "context": {
                "files": ["AmazonQ.md"],
                "hooks": {"h": {"trigger": "per_prompt", "command": "date", "disabled": True}},
            },
        }
    )
    payload = serialize_agent(original)
    assert payload["allowedTools"] == ["fs_read"]
    assert payload["context"]["hooks"]["h"]["disabled"] is True

    restored = parse_agent(json.loads(json.dumps(payload)))
    assert restored == original


def test_default_agent_is_not_fully_trusted() -> None:
    agent = Agent.default()
    assert agent.name == "Default"
    assert agent.tools == ["*"]
    assert not agent.is_fully_trusted
