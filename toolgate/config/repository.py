from pathlib import Path

from toolgate.constants import (
    GLOBAL_CONFIG_RELPATH,
    GLOBAL_CONTEXT_FILENAME,
    LOCAL_CONFIG_DIRNAME,
    MCP_CONFIG_FILENAME,
    PERSONA_FILE_SUFFIX,
    PERSONAS_DIRNAME,
)
from toolgate.errors import InvalidAgentNameError
from toolgate.models import Scope
from toolgate.utils import read_text_safe


class ScopeRepository:
    """File layout of one configuration scope."""

    def __init__(self, scope: Scope, root: Path) -> None:
        self.scope = scope
        self._root = root

    @classmethod
    def local(cls, cwd: Path | None = None) -> "ScopeRepository":
        return cls(Scope.LOCAL, (cwd or Path.cwd()) / LOCAL_CONFIG_DIRNAME)

    @classmethod
    def global_(cls, home: Path | None = None) -> "ScopeRepository":
        return cls(Scope.GLOBAL, (home or Path.home()).joinpath(*GLOBAL_CONFIG_RELPATH))

    @property
    def root(self) -> Path:
        return self._root

    @property
    def mcp_path(self) -> Path:
        return self.root / MCP_CONFIG_FILENAME

    @property
    def personas_dir(self) -> Path:
        return self.root / PERSONAS_DIRNAME

    @property
    def global_context_path(self) -> Path:
        return self.root / GLOBAL_CONTEXT_FILENAME

    def agent_path(self, name: str) -> Path:
        """Persona file for ``name``; names that would leave ``personas/`` are rejected."""
        if not name or name in (".", "..") or any(sep in name for sep in ("/", "\\", "\0")):
            raise InvalidAgentNameError(name)
        path = self.personas_dir / f"{name}{PERSONA_FILE_SUFFIX}"
        if path.resolve().parent != self.personas_dir.resolve():
            raise InvalidAgentNameError(name)
        return path

    def read_mcp_text(self) -> str | None:
        return read_text_safe(self.mcp_path)

    def read_global_context_text(self) -> str | None:
        return read_text_safe(self.global_context_path)

    def list_persona_files(self) -> list[Path]:
        try:
            entries = sorted(self.personas_dir.iterdir())
        except OSError:
            return []
        return [
            path
            for path in entries
            if path.suffix == PERSONA_FILE_SUFFIX and not path.is_dir()
        ]
