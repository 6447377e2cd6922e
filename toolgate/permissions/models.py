"""Permission data model: subjects, per-tool policies and policy tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from toolgate.constants import DEFAULT_ALLOWED_BUILT_INS, MCP_PREFIX, WILDCARD


class PermissionSubject:
    """Name a permission entry applies to.

    ``PermissionSubject.all()`` and an entry literally named ``"*"`` share
    the canonical string ``"*"`` and are therefore the same subject. Subjects
    compare equal to their canonical string so tables can be probed with
    plain names.
    """

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        if not isinstance(name, str):
            raise TypeError("permission subject must be a string")
        self._name = name

    @classmethod
    def all(cls) -> "PermissionSubject":
        return cls(WILDCARD)

    @classmethod
    def exact(cls, name: str) -> "PermissionSubject":
        return cls(name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_all(self) -> bool:
        return self._name == WILDCARD

    def matches(self, name: str) -> bool:
        return self.is_all or self._name == name

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PermissionSubject):
            return self._name == other._name
        if isinstance(other, str):
            return self._name == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._name)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        if self.is_all:
            return "PermissionSubject.all()"
        return f"PermissionSubject.exact({self._name!r})"


class ToolPermission:
    """Base of the closed set of per-tool policies."""

    __slots__ = ()


@dataclass(frozen=True)
class AlwaysAllow(ToolPermission):
    pass


@dataclass(frozen=True)
class Deny(ToolPermission):
    pass


@dataclass(frozen=True)
class DetailedList(ToolPermission):
    """Argument-level policy; entries are interpreted by the consuming tool."""

    always_allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()


PermissionTable = dict[PermissionSubject, ToolPermission]


@dataclass
class ToolPermissions:
    built_in: PermissionTable = field(default_factory=dict)
    custom: dict[PermissionSubject, PermissionTable] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "ToolPermissions":
        return cls(
            built_in={
                PermissionSubject.exact(name): AlwaysAllow()
                for name in DEFAULT_ALLOWED_BUILT_INS
            }
        )

    def lookup(self, ref: "ToolRef") -> ToolPermission | None:
        if not ref.is_mcp:
            return _lookup(self.built_in, ref.tool or WILDCARD)

        tool = ref.tool or WILDCARD
        server_table = self.custom.get(PermissionSubject(ref.server or WILDCARD))
        if server_table is not None:
            found = _lookup(server_table, tool)
            if found is not None:
                return found
        # Rules under the "*" server apply to tools the server's own table leaves open.
        wildcard_table = self.custom.get(PermissionSubject.all())
        if wildcard_table is None:
            return None
        return _lookup(wildcard_table, tool)

    def get_exact(self, ref: "ToolRef") -> ToolPermission | None:
        """Entry stored under exactly this subject, without wildcard fallback."""
        if not ref.is_mcp:
            return self.built_in.get(PermissionSubject(ref.tool or WILDCARD))
        server_table = self.custom.get(PermissionSubject(ref.server or WILDCARD))
        if server_table is None:
            return None
        return server_table.get(PermissionSubject(ref.tool or WILDCARD))

    def set(self, ref: "ToolRef", permission: ToolPermission) -> None:
        if not ref.is_mcp:
            self.built_in[PermissionSubject(ref.tool or WILDCARD)] = permission
            return
        server = PermissionSubject(ref.server or WILDCARD)
        self.custom.setdefault(server, {})[PermissionSubject(ref.tool or WILDCARD)] = (
            permission
        )

    def remove(self, ref: "ToolRef") -> ToolPermission | None:
        if not ref.is_mcp:
            return self.built_in.pop(PermissionSubject(ref.tool or WILDCARD), None)
        server = PermissionSubject(ref.server or WILDCARD)
        server_table = self.custom.get(server)
        if server_table is None:
            return None
        removed = server_table.pop(PermissionSubject(ref.tool or WILDCARD), None)
        if not server_table:
            del self.custom[server]
        return removed

    def subjects(self) -> list["ToolRef"]:
        refs = [ToolRef(tool=subject.name) for subject in self.built_in]
        for server, table in self.custom.items():
            refs.extend(
                ToolRef(server=server.name, tool=None if tool.is_all else tool.name)
                for tool in table
            )
        return refs


def _lookup(table: dict[PermissionSubject, Any], name: str) -> Any:
    found = table.get(PermissionSubject(name))
    if found is not None:
        return found
    return table.get(PermissionSubject.all())


@dataclass(frozen=True)
class ToolRef:
    """Address of a tool: a built-in name, an MCP server, or a server tool.

    ``tool`` is ``None`` for a whole-server reference (``@git``).
    """

    tool: str | None = None
    server: str | None = None

    @property
    def is_mcp(self) -> bool:
        return self.server is not None

    @classmethod
    def parse(cls, text: str) -> "ToolRef":
        value = text.strip()
        if value.startswith(MCP_PREFIX):
            value = value[len(MCP_PREFIX) :]
            server, _, tool = value.partition("/")
            return cls(server=server, tool=tool or None)
        if "/" in value:
            server, _, tool = value.partition("/")
            return cls(server=server, tool=tool or None)
        return cls(tool=value)

    @property
    def canonical(self) -> str:
        if not self.is_mcp:
            return self.tool or WILDCARD
        if self.tool is None:
            return f"{MCP_PREFIX}{self.server}"
        return f"{MCP_PREFIX}{self.server}/{self.tool}"

    def __str__(self) -> str:
        return self.canonical
