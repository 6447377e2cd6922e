"""Tests for the toolgate CLI."""

from pathlib import Path

import pytest

from toolgate.__main__ import cli


@pytest.fixture
def configured(workspace: Path, local_root: Path, global_root: Path, write_json) -> Path:
    write_json(
        local_root / "personas" / "dev.json",
        {
            "name": "dev",
            "description": "Workspace agent",
            "toolPerms": {
                "builtIn": {
                    "fs_read": "alwaysAllow",
                    "fs_write": {"alwaysAllow": ["src"], "deny": ["src/secrets"]},
                    "execute_bash": {"alwaysAllow": ["npm"], "deny": ["curl"]},
                }
            },
            "context": {
                "files": ["README.md"],
                "hooks": {"branch": {"trigger": "conversation_start", "command": "git branch"}},
            },
        },
    )
    write_json(global_root / "personas" / "ops.json", {"name": "ops", "allowedTools": ["*"]})
    write_json(local_root / "mcp.json", {"mcpServers": {"git": {"command": "uvx", "args": ["mcp-server-git"]}}})
    write_json(global_root / "mcp.json", {"mcpServers": {"git": {"command": "other"}, "jira": {"command": "jira-mcp"}}})
    return workspace


def test_agents_list_default(workspace: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(workspace), "agents", "list"])
    assert result.exit_code == 0
    assert "Default" in result.output


def test_agents_list_merged(configured: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "agents", "list"])
    assert result.exit_code == 0
    assert "dev" in result.output
    assert "ops" in result.output
    assert "workspace" in result.output


def test_agents_show(configured: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "agents", "show", "dev"])
    assert result.exit_code == 0
    assert "execute_bash" in result.output
    assert "detailed" in result.output

    trusted = cli_runner.invoke(cli, ["--cwd", str(configured), "agents", "show", "ops"])
    assert "All tools are trusted" in trusted.output


def test_agents_show_unknown(configured: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "agents", "show", "missing"])
    assert result.exit_code != 0
    assert "No agent with name missing found" in result.output


def test_mcp_list(configured: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "mcp", "list"])
    assert result.exit_code == 0
    assert "mcp-server-git" in result.output
    assert "jira-mcp" in result.output
    assert "MCP config conflict for git" in result.output


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        (["execute_bash", "npm install"], "allow"),
        (["execute_bash", "curl http://x"], "deny"),
        (["execute_bash", "rm -rf /"], "ask"),
        (["fs_write", "src/app.py"], "allow"),
        (["fs_write", "src/secrets/key"], "deny"),
        (["fs_read"], "allow"),
        (["@git/git_status"], "ask"),
        (["execute_bash", "curl http://x", "--agent", "ops"], "allow"),
        (["fs_write", "src/app.py", "--kind", "literal"], "ask"),
    ],
)
def test_check(configured: Path, cli_runner, args: list[str], expected: str) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "check", *args])
    assert result.exit_code == 0, result.output
    assert result.output.strip().splitlines()[-1].endswith(f": {expected}")


def test_hooks_and_context(configured: Path, cli_runner) -> None:
    hooks = cli_runner.invoke(cli, ["--cwd", str(configured), "hooks", "list"])
    assert hooks.exit_code == 0
    assert "git branch" in hooks.output

    context = cli_runner.invoke(cli, ["--cwd", str(configured), "context", "show", "--agent", "ops"])
    assert context.exit_code == 0
    assert "AmazonQ.md" in context.output


def test_agents_show_explains_builtin_default(workspace: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(workspace), "agents", "show", "Default"])
    assert result.exit_code == 0
    assert "built-in default" in result.output
    assert "fs_read" in result.output
    assert "without asking" in result.output


def test_agents_show_persona_has_no_default_note(configured: Path, cli_runner) -> None:
    result = cli_runner.invoke(cli, ["--cwd", str(configured), "agents", "show", "dev"])
    assert "built-in default" not in result.output
