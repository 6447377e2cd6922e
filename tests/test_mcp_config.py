"""Tests for MCP server configuration files."""

from pathlib import Path

import pytest

from toolgate.errors import McpConfigDecodeError
from toolgate.mcp.models import CustomToolConfig, McpServerConfig


def test_from_json_applies_defaults() -> None:
    config = McpServerConfig.from_json('{"mcpServers": {"git": {"command": "uvx"}}}')
    server = config.mcp_servers["git"]
    assert server == CustomToolConfig(command="uvx")
    assert server.timeout == 120000
    assert server.env is None
    assert not server.disabled


def test_missing_servers_key_is_empty() -> None:
    assert McpServerConfig.from_json("{}").mcp_servers == {}


@pytest.mark.parametrize(
    "text",
    [
        "{oops",
        "[]",
        '{"mcpServers": {"git": {}}}',
        '{"mcpServers": {"git": {"command": "uvx", "args": "x"}}}',
        '{"mcpServers": {"git": {"command": "uvx", "timeout": -1}}}',
        '{"mcpServers": {"git": {"command": "uvx", "env": {"A": 1}}}}',
    ],
)
def test_invalid_configs_raise(text: str) -> None:
    with pytest.raises(McpConfigDecodeError):
        McpServerConfig.from_json(text)


def test_save_and_load(tmp_path: Path) -> None:
    config = McpServerConfig(
        mcp_servers={
            "git": CustomToolConfig(command="uvx", args=["mcp-server-git"], timeout=5000),
            "jira": CustomToolConfig(command="jira-mcp", env={"TOKEN": "t"}, disabled=True),
        }
    )
    path = tmp_path / "nested" / "mcp.json"
    config.save_to_file(path)
    assert McpServerConfig.load_from_file(path) == config
    assert config.to_payload()["mcpServers"]["git"] == {
        "command": "uvx",
        "args": ["mcp-server-git"],
        "timeout": 5000,
    }


def test_enabled_servers() -> None:
    config = McpServerConfig(
        mcp_servers={
            "a": CustomToolConfig(command="a"),
            "b": CustomToolConfig(command="b", disabled=True),
        }
    )
    assert list(config.enabled_servers()) == ["a"]
