"""Evaluate tool invocations against the active agent's permission tables."""

from __future__ import annotations

import copy
import json
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from toolgate.agents.collection import AgentCollection
from toolgate.agents.models import Agent
from toolgate.constants import WILDCARD
from toolgate.errors import UnknownToolError
from toolgate.models import PermissionEvalResult, PermissionRow
from toolgate.permissions.candidates import PermissionCandidate
from toolgate.permissions.codec import describe_tool_permission, encode_tool_permission
from toolgate.permissions.models import (
    AlwaysAllow,
    Deny,
    DetailedList,
    ToolPermission,
    ToolPermissions,
    ToolRef,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Baseline:
    allowed_tools: frozenset[str]
    tool_permissions: ToolPermissions


class PermissionEngine:
    """Decides allow/ask/deny for the collection's active agent.

    Mutations write into the active agent itself and last for the session;
    ``reset`` restores what the agent held before its first mutation.
    """

    def __init__(
        self,
        agents: AgentCollection,
        known_tools: Iterable[str] | None = None,
    ) -> None:
        self._agents = agents
        self._known_tools: set[str] | None = None
        self._baselines: dict[str, _Baseline] = {}
        self._lock = threading.RLock()
        if known_tools is not None:
            self.set_known_tools(known_tools)

    def set_known_tools(self, names: Iterable[str] | None) -> None:
        with self._lock:
            if names is None:
                self._known_tools = None
                return
            self._known_tools = {ToolRef.parse(name).canonical for name in names}

    def evaluate(
        self,
        subject: str | ToolRef,
        candidate: PermissionCandidate | None = None,
    ) -> PermissionEvalResult:
        ref = subject if isinstance(subject, ToolRef) else ToolRef.parse(subject)
        with self._lock:
            agent = self._agents.require_active()
            if agent.is_fully_trusted:
                return PermissionEvalResult.ALLOW
            entry = agent.tool_permissions.lookup(ref)

        result = self._decide(entry, candidate)
        logger.debug("Permission for %s under %s: %s", ref, agent.name, result.value)
        return result

    @staticmethod
    def _decide(
        entry: ToolPermission | None, candidate: PermissionCandidate | None
    ) -> PermissionEvalResult:
        if entry is None:
            return PermissionEvalResult.ASK
        if isinstance(entry, AlwaysAllow):
            return PermissionEvalResult.ALLOW
        if isinstance(entry, Deny):
            return PermissionEvalResult.DENY
        if isinstance(entry, DetailedList):
            if candidate is None:
                return PermissionEvalResult.ASK
            return candidate.eval(entry)
        return PermissionEvalResult.ASK

    def trust(self, name: str) -> None:
        ref = ToolRef.parse(name)
        if ref.canonical == WILDCARD:
            self.trust_all()
            return
        with self._lock:
            self._ensure_known(ref)
            agent = self._mutable_active()
            agent.allowed_tools.add(ref.canonical)
            agent.tool_permissions.set(ref, AlwaysAllow())

    def trust_all(self) -> None:
        with self._lock:
            self._mutable_active().allowed_tools.add(WILDCARD)

    def untrust(self, name: str) -> None:
        ref = ToolRef.parse(name)
        with self._lock:
            if ref.canonical == WILDCARD:
                self._mutable_active().allowed_tools.discard(WILDCARD)
                return
            self._ensure_known(ref)
            agent = self._mutable_active()
            agent.allowed_tools.discard(ref.canonical)

            table = agent.tool_permissions
            entry = table.get_exact(ref)
            if isinstance(entry, AlwaysAllow):
                table.remove(ref)
            elif isinstance(entry, DetailedList):
                table.set(ref, DetailedList(deny=entry.deny))
            if isinstance(table.lookup(ref), AlwaysAllow):
                # A wildcard grant still covers this subject; pin it to ask.
                table.set(ref, DetailedList())

    def reset(self, name: str) -> None:
        ref = ToolRef.parse(name)
        with self._lock:
            agent = self._agents.require_active()
            baseline = self._baselines.get(agent.name) or self._snapshot(agent)
            if not self._is_configured(ref, agent, baseline):
                raise UnknownToolError(name)

            agent = self._mutable_active()
            original = baseline.tool_permissions.get_exact(ref)
            if original is None:
                agent.tool_permissions.remove(ref)
            else:
                agent.tool_permissions.set(ref, copy.deepcopy(original))

            if ref.canonical in baseline.allowed_tools:
                agent.allowed_tools.add(ref.canonical)
            else:
                agent.allowed_tools.discard(ref.canonical)

    def reset_all(self) -> None:
        with self._lock:
            agent = self._agents.require_active()
            baseline = self._baselines.pop(agent.name, None)
            if baseline is None:
                return
            agent.allowed_tools = set(baseline.allowed_tools)
            agent.tool_permissions = copy.deepcopy(baseline.tool_permissions)

    def trusted_tools(self) -> list[str]:
        with self._lock:
            agent = self._agents.require_active()
            if agent.is_fully_trusted:
                return [WILDCARD]
            return sorted(
                ref.canonical
                for ref in agent.tool_permissions.subjects()
                if isinstance(agent.tool_permissions.get_exact(ref), AlwaysAllow)
            )

    def configured_tools(self) -> list[PermissionRow]:
        with self._lock:
            agent = self._agents.require_active()
            rows: list[PermissionRow] = []
            for ref in agent.tool_permissions.subjects():
                entry = agent.tool_permissions.get_exact(ref)
                if entry is None:
                    continue
                detail = (
                    json.dumps(encode_tool_permission(entry))
                    if isinstance(entry, DetailedList)
                    else ""
                )
                rows.append(
                    PermissionRow(
                        subject=ref.canonical,
                        permission=describe_tool_permission(entry),
                        detail=detail,
                    )
                )
            return sorted(rows, key=lambda row: row.subject)

    def _mutable_active(self) -> Agent:
        agent = self._agents.require_active()
        if agent.name not in self._baselines:
            self._baselines[agent.name] = self._snapshot(agent)
        return agent

    @staticmethod
    def _snapshot(agent: Agent) -> _Baseline:
        return _Baseline(
            allowed_tools=frozenset(agent.allowed_tools),
            tool_permissions=copy.deepcopy(agent.tool_permissions),
        )

    def _ensure_known(self, ref: ToolRef) -> None:
        if self._known_tools is None or self._is_known(ref):
            return
        raise UnknownToolError(ref.canonical)

    def _is_known(self, ref: ToolRef) -> bool:
        if self._known_tools is None:
            return False
        if ref.canonical in self._known_tools:
            return True
        if ref.is_mcp and ref.tool is None:
            prefix = f"{ref.canonical}/"
            return any(name.startswith(prefix) for name in self._known_tools)
        return False

    def _is_configured(self, ref: ToolRef, agent: Agent, baseline: _Baseline) -> bool:
        return (
            agent.tool_permissions.get_exact(ref) is not None
            or baseline.tool_permissions.get_exact(ref) is not None
            or ref.canonical in agent.allowed_tools
            or ref.canonical in baseline.allowed_tools
            or self._is_known(ref)
        )
