"""Tests for tool-side argument matching."""

from pathlib import Path

import pytest

from toolgate.models import PermissionEvalResult
from toolgate.permissions.candidates import (
    FilePathCandidate,
    LiteralCandidate,
    ShellCommandCandidate,
    split_command_segments,
)
from toolgate.permissions.models import DetailedList

BASH_RULES = DetailedList(always_allow=("npm", "git status", "ls"), deny=("curl", "rm -rf"))


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        ("npm install", PermissionEvalResult.ALLOW),
        ("git status --short", PermissionEvalResult.ALLOW),
        ("git push", PermissionEvalResult.ASK),
        ("npmx build", PermissionEvalResult.ASK),
        ("curl http://x", PermissionEvalResult.DENY),
        ("rm -rf /", PermissionEvalResult.DENY),
        ("rm file.txt", PermissionEvalResult.ASK),
        ("ls && npm test", PermissionEvalResult.ALLOW),
        ("npm test; curl http://x", PermissionEvalResult.DENY),
        ("ls | wc -l", PermissionEvalResult.ASK),
        ("", PermissionEvalResult.ASK),
    ],
)
def test_shell_command_candidate(command: str, expected: PermissionEvalResult) -> None:
    assert ShellCommandCandidate(command).eval(BASH_RULES) == expected


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        ("npm install\nrm file.txt", PermissionEvalResult.ASK),
        ("npm install\ncurl http://x", PermissionEvalResult.DENY),
        ("npm install\r\nrm -rf /", PermissionEvalResult.DENY),
        ("npm install # note\ncurl http://x", PermissionEvalResult.DENY),
        ("npm install `curl http://x`", PermissionEvalResult.DENY),
        ("npm install $(curl http://x)", PermissionEvalResult.DENY),
        ('npm install "$(curl http://x)"', PermissionEvalResult.DENY),
        ("ls; (curl http://x)", PermissionEvalResult.DENY),
        ("npm install $(ls)", PermissionEvalResult.ASK),
        ("npm install `whoami`", PermissionEvalResult.ASK),
        ("npm ci <(ls)", PermissionEvalResult.ASK),
        ("ls > out.txt", PermissionEvalResult.ASK),
        ("npm test >> build.log", PermissionEvalResult.ASK),
        ("npm test &> build.log", PermissionEvalResult.ASK),
        ("npm test 2>&1", PermissionEvalResult.ALLOW),
        ("npm run 'unterminated", PermissionEvalResult.ASK),
    ],
)
def test_shell_hidden_commands_are_not_allowed(command: str, expected: PermissionEvalResult) -> None:
    assert ShellCommandCandidate(command).eval(BASH_RULES) == expected


def test_shell_deny_wins_when_both_lists_match() -> None:
    rules = DetailedList(always_allow=("git",), deny=("git push",))
    assert ShellCommandCandidate("git push origin").eval(rules) == PermissionEvalResult.DENY
    assert ShellCommandCandidate("git log").eval(rules) == PermissionEvalResult.ALLOW


def test_split_command_segments() -> None:
    assert split_command_segments("a b && c | d; e") == [["a", "b"], ["c"], ["d"], ["e"]]
    assert split_command_segments("echo 'a && b'") == [["echo", "a && b"]]


def test_file_path_containment(tmp_path: Path) -> None:
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    rules = DetailedList(always_allow=("src",), deny=("src/secrets",))
    candidate = FilePathCandidate("src/pkg/module.py", cwd=tmp_path)
    assert candidate.eval(rules) == PermissionEvalResult.ALLOW
    assert FilePathCandidate("src/secrets/key", cwd=tmp_path).eval(rules) == PermissionEvalResult.DENY
    assert FilePathCandidate("docs/index.md", cwd=tmp_path).eval(rules) == PermissionEvalResult.ASK


def test_file_path_does_not_match_sibling_prefix(tmp_path: Path) -> None:
    candidate = FilePathCandidate("srcfoo/a.py", cwd=tmp_path)
    assert not candidate.matches("src")


def test_file_path_glob(tmp_path: Path) -> None:
    rules = DetailedList(always_allow=("*.md",), deny=("*.env",))
    assert FilePathCandidate("README.md", cwd=tmp_path).eval(rules) == PermissionEvalResult.ALLOW
    assert FilePathCandidate("docs/guide.md", cwd=tmp_path).eval(rules) == PermissionEvalResult.ALLOW
    assert FilePathCandidate(".env", cwd=tmp_path).eval(rules) == PermissionEvalResult.DENY
    assert FilePathCandidate("main.py", cwd=tmp_path).eval(rules) == PermissionEvalResult.ASK


def test_file_path_expands_home(tmp_path: Path) -> None:
    candidate = FilePathCandidate("~/notes/todo.txt", cwd=tmp_path / "elsewhere", home=tmp_path)
    assert candidate.matches("~/notes")
    assert candidate.matches(str(tmp_path))


def test_literal_candidate() -> None:
    rules = DetailedList(always_allow=("us-east-1",), deny=("eu-west-1",))
    assert LiteralCandidate("us-east-1").eval(rules) == PermissionEvalResult.ALLOW
    assert LiteralCandidate("eu-west-1").eval(rules) == PermissionEvalResult.DENY
    assert LiteralCandidate("us-east").eval(rules) == PermissionEvalResult.ASK
