"""One chat session's view of the permission and configuration layer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from toolgate.agents.collection import AgentCollection, AgentSubscriber
from toolgate.agents.models import Agent, Context, Trigger
from toolgate.agents.parser import save_agent
from toolgate.config.loader import ConfigLoader
from toolgate.context.manager import ContextManager
from toolgate.hooks.executor import HookExecutor, HookOutput
from toolgate.hooks.registry import HookRegistry
from toolgate.mcp.models import McpServerConfig
from toolgate.models import AgentStatusRow, PermissionEvalResult, Scope
from toolgate.permissions.candidates import PermissionCandidate
from toolgate.permissions.engine import PermissionEngine
from toolgate.permissions.models import ToolRef
from toolgate.tui.renderers import PolicyConsoleUI
from toolgate.utils import compact_home_path

logger = logging.getLogger(__name__)


class PolicySession:
    def __init__(
        self,
        agents: AgentCollection,
        mcp_config: McpServerConfig,
        global_context: Context,
        loader: ConfigLoader,
        known_tools: Iterable[str] | None = None,
    ) -> None:
        self.agents = agents
        self.mcp_config = mcp_config
        self.loader = loader
        self._known_tools = list(known_tools) if known_tools is not None else None
        self.engine = PermissionEngine(agents, known_tools=self._known_tools)

        active = agents.require_active()
        self.context = ContextManager(
            profile_context=active.context,
            global_context=global_context,
            cwd=loader.cwd,
            home=loader.home,
        )
        self.hooks = HookRegistry(
            profile_hooks=active.context.hooks,
            global_hooks=global_context.hooks,
        )

    @classmethod
    def load(
        cls,
        ui: PolicyConsoleUI | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
        known_tools: Iterable[str] | None = None,
    ) -> "PolicySession":
        loader = ConfigLoader(ui=ui, cwd=cwd, home=home)
        return cls(
            agents=loader.load(),
            mcp_config=loader.load_mcp(),
            global_context=loader.load_global_context(),
            loader=loader,
            known_tools=known_tools,
        )

    def reload(self) -> None:
        """Re-read both scopes, keeping the active agent when it still exists."""
        active_name = self.agents.require_active().name
        subscribers = list(self.agents.subscribers)
        self.agents = self.loader.load()
        self.agents.subscribers.extend(subscribers)
        self.mcp_config = self.loader.load_mcp()
        self.engine = PermissionEngine(self.agents, known_tools=self._known_tools)
        self.context.global_context = self.loader.load_global_context()
        self.hooks = HookRegistry(global_hooks=self.context.global_context.hooks)
        if self.agents.get(active_name) is not None:
            self.agents.active_idx = self.agents.names().index(active_name)
        self._bind_active()
        if subscribers:
            self.agents.publish()

    @property
    def active_agent(self) -> Agent:
        return self.agents.require_active()

    def switch(self, name: str) -> Agent:
        agent = self.agents.switch(name)
        self._bind_active()
        logger.info("Switched to agent %s", name)
        return agent

    def subscribe(self, subscriber: AgentSubscriber) -> None:
        self.agents.subscribe(subscriber)
        self.agents.publish(subscriber)

    def evaluate(
        self, subject: str | ToolRef, candidate: PermissionCandidate | None = None
    ) -> PermissionEvalResult:
        return self.engine.evaluate(subject, candidate)

    def trust(self, *names: str) -> None:
        for name in names:
            self.engine.trust(name)
        self._republish()

    def trust_all(self) -> None:
        self.engine.trust_all()
        self._republish()

    def untrust(self, *names: str) -> None:
        for name in names:
            self.engine.untrust(name)
        self._republish()

    def reset(self, name: str) -> None:
        self.engine.reset(name)
        self._republish()

    def reset_all(self) -> None:
        self.engine.reset_all()
        self._republish()

    def add_paths(self, paths: list[str], global_: bool = False, force: bool = False) -> None:
        self.context.add_paths(paths, global_=global_, force=force)

    def remove_paths(self, paths: list[str], global_: bool = False) -> int:
        return self.context.remove_paths(paths, global_=global_)

    async def run_hooks(self, trigger: Trigger, executor: HookExecutor) -> list[HookOutput]:
        return await self.hooks.run(trigger, executor)

    def save_to_file(self, path: Path | None = None) -> Path:
        """Persist the active agent; defaults to the workspace persona file."""
        agent = self.active_agent
        target = path or self.loader.local.agent_path(agent.name)
        save_agent(agent, target)
        logger.info("Saved agent %s to %s", agent.name, target)
        return target

    def save_global_context(self) -> Path:
        target = self.loader.global_.global_context_path
        self.context.save_global(target)
        return target

    def status_rows(self) -> list[AgentStatusRow]:
        return [
            AgentStatusRow(
                name=agent.name,
                scope=agent.scope.label if isinstance(agent.scope, Scope) else "built-in",
                source=compact_home_path(agent.source_path) if agent.source_path else "",
                description=agent.description or "",
                active=index == self.agents.active_idx,
            )
            for index, agent in enumerate(self.agents.agents)
        ]

    def _bind_active(self) -> None:
        active = self.agents.require_active()
        self.context.bind_profile(active.context)
        self.hooks.bind_profile(active.context.hooks)

    def _republish(self) -> None:
        if self.agents.subscribers:
            self.agents.publish()
