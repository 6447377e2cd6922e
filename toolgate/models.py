from dataclasses import dataclass
from enum import Enum


class Scope(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"

    @property
    def label(self) -> str:
        return "workspace" if self is Scope.LOCAL else "global"


class PermissionEvalResult(str, Enum):
    ALLOW = "allow"
    ASK = "ask"
    DENY = "deny"


class HookScope(str, Enum):
    PROFILE = "profile"
    GLOBAL = "global"


@dataclass(frozen=True)
class AgentStatusRow:
    name: str
    scope: str
    source: str
    description: str
    active: bool

    def as_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "scope": self.scope,
            "source": self.source,
            "description": self.description,
            "active": "*" if self.active else "",
        }


@dataclass(frozen=True)
class PermissionRow:
    subject: str
    permission: str
    detail: str

    def as_dict(self) -> dict[str, str]:
        return {
            "subject": self.subject,
            "permission": self.permission,
            "detail": self.detail,
        }
