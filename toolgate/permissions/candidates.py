"""Tool-side argument matching for detailed permission lists.

The engine owns table lookup; when a subject is governed by a
``DetailedList`` it hands the list to the calling tool's candidate, which
knows how to compare its own argument against the opaque pattern strings.
"""

from __future__ import annotations

import fnmatch
import shlex
from abc import ABC, abstractmethod
from pathlib import Path

from toolgate.models import PermissionEvalResult
from toolgate.permissions.models import DetailedList
from toolgate.utils import expand_path, is_under

_SHELL_PUNCTUATION = "();<>|&`\n\r"
_SHELL_PUNCTUATION_SET = frozenset(_SHELL_PUNCTUATION)
_SEPARATOR_CHARS = frozenset(";|&()`\n\r")
_OUTPUT_REDIRECTIONS = frozenset({">", ">>", ">|", "&>", "&>>", "<>", ">&"})
_REDIRECTIONS = _OUTPUT_REDIRECTIONS | {"<", "<<", "<<<", "<&"}
_SUBSTITUTION_MARKERS = ("$(", "`", "<(", ">(")
_GLOB_CHARS = frozenset("*?[")


class PermissionCandidate(ABC):
    @abstractmethod
    def matches(self, pattern: str) -> bool:
        raise NotImplementedError

    def eval(self, permission: DetailedList) -> PermissionEvalResult:
        """Deny entries win over allow entries matching the same argument."""
        if any(self.matches(pattern) for pattern in permission.deny):
            return PermissionEvalResult.DENY
        if any(self.matches(pattern) for pattern in permission.always_allow):
            return PermissionEvalResult.ALLOW
        return PermissionEvalResult.ASK


class LiteralCandidate(PermissionCandidate):
    def __init__(self, value: str) -> None:
        self.value = value

    def matches(self, pattern: str) -> bool:
        return pattern == self.value


class ShellCommandCandidate(PermissionCandidate):
    """Matches patterns as command prefixes, token by token.

    ``npm`` matches ``npm install`` but not ``npmx``. Compound commands are
    judged per segment, with newlines, subshell parentheses and backticks
    splitting segments like ``;`` and ``&&`` do. One denied segment denies
    the whole command. The command is allowed only when every segment is
    allowed and nothing in it escapes plain prefix matching: command or
    process substitution, output redirection, or unbalanced quoting all
    cap the result at ask.
    """

    def __init__(self, command: str) -> None:
        self.command = command
        try:
            tokens = tokenize_command(command)
            self.parsed = True
        except ValueError:
            tokens = command.split()
            self.parsed = False
        self.segments, self.irregular = _split_tokens(tokens)
        self.substituted = any(marker in command for marker in _SUBSTITUTION_MARKERS)
        # Substitutions quoted inside a word still run; check their commands too.
        self.embedded = [
            segment
            for token in (_segment_tokens(self.segments) if self.parsed else [])
            if any(marker in token for marker in _SUBSTITUTION_MARKERS)
            for segment in ShellCommandCandidate(token).all_segments()
        ]

    def all_segments(self) -> list[list[str]]:
        return [*self.segments, *self.embedded]

    def matches(self, pattern: str) -> bool:
        return any(_is_token_prefix(pattern, segment) for segment in self.all_segments())

    def eval(self, permission: DetailedList) -> PermissionEvalResult:
        if not self.segments:
            return PermissionEvalResult.ASK

        results = [_eval_segment(segment, permission) for segment in self.all_segments()]
        if PermissionEvalResult.DENY in results:
            return PermissionEvalResult.DENY
        if not self.parsed or self.irregular or self.substituted:
            return PermissionEvalResult.ASK
        if any(_writes_to_file(segment) for segment in self.segments):
            return PermissionEvalResult.ASK
        if all(result == PermissionEvalResult.ALLOW for result in results):
            return PermissionEvalResult.ALLOW
        return PermissionEvalResult.ASK


class FilePathCandidate(PermissionCandidate):
    """Matches patterns as directory containment or path globs."""

    def __init__(self, path: str | Path, cwd: Path | None = None, home: Path | None = None) -> None:
        self.cwd = cwd or Path.cwd()
        self.home = home
        self.path = expand_path(str(path), self.cwd, self.home)

    def matches(self, pattern: str) -> bool:
        pattern_path = expand_path(pattern, self.cwd, self.home)
        if _GLOB_CHARS & set(pattern):
            target = str(self.path.resolve())
            return fnmatch.fnmatchcase(target, str(_resolve_glob_root(pattern_path)))
        return is_under(self.path, pattern_path)


def tokenize_command(command: str) -> list[str]:
    """Split a shell command into words and operator tokens.

    Raises ``ValueError`` on unbalanced quotes or a trailing escape.
    """
    lexer = shlex.shlex(command, posix=True, punctuation_chars=_SHELL_PUNCTUATION)
    lexer.whitespace = " \t"
    lexer.whitespace_split = True
    lexer.commenters = ""
    return list(lexer)


def split_command_segments(command: str) -> list[list[str]]:
    try:
        tokens = tokenize_command(command)
    except ValueError:
        tokens = command.split()
    segments, _ = _split_tokens(tokens)
    return segments


def _split_tokens(tokens: list[str]) -> tuple[list[list[str]], bool]:
    """Group tokens into segments; the flag marks operators we do not model."""
    segments: list[list[str]] = []
    current: list[str] = []
    irregular = False
    for token in tokens:
        if token in _REDIRECTIONS or not _is_operator(token):
            current.append(token)
            continue
        if not set(token) <= _SEPARATOR_CHARS:
            irregular = True
        if current:
            segments.append(current)
        current = []
    if current:
        segments.append(current)
    return segments, irregular


def _is_operator(token: str) -> bool:
    return bool(token) and set(token) <= _SHELL_PUNCTUATION_SET


def _segment_tokens(segments: list[list[str]]) -> list[str]:
    return [token for segment in segments for token in segment]


def _writes_to_file(segment: list[str]) -> bool:
    for index, token in enumerate(segment):
        if token not in _OUTPUT_REDIRECTIONS:
            continue
        if token == ">&":
            target = segment[index + 1] if index + 1 < len(segment) else ""
            if target.isdigit() or target == "-":
                continue
        return True
    return False


def _is_token_prefix(pattern: str, segment: list[str]) -> bool:
    try:
        pattern_tokens = shlex.split(pattern)
    except ValueError:
        pattern_tokens = pattern.split()
    if not pattern_tokens or len(pattern_tokens) > len(segment):
        return False
    return segment[: len(pattern_tokens)] == pattern_tokens


def _eval_segment(segment: list[str], permission: DetailedList) -> PermissionEvalResult:
    if any(_is_token_prefix(pattern, segment) for pattern in permission.deny):
        return PermissionEvalResult.DENY
    if any(_is_token_prefix(pattern, segment) for pattern in permission.always_allow):
        return PermissionEvalResult.ALLOW
    return PermissionEvalResult.ASK


def _resolve_glob_root(pattern_path: Path) -> Path:
    # Resolve the literal leading part so symlinked roots compare equal.
    parts = pattern_path.parts
    literal: list[str] = []
    for part in parts:
        if _GLOB_CHARS & set(part):
            break
        literal.append(part)
    if not literal:
        return pattern_path
    root = Path(*literal).resolve()
    rest = parts[len(literal) :]
    return root.joinpath(*rest) if rest else root
