"""Read configuration from the workspace and global scopes.

Nothing here raises for missing or malformed files: absence yields an empty
result, and decode failures become warnings plus an empty result for the
offending scope or file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from toolgate.agents.collection import AgentCollection
from toolgate.agents.models import Agent, Context
from toolgate.agents.parser import decode_context, load_agent_file
from toolgate.config.merger import merge_agents, merge_mcp_servers
from toolgate.config.repository import ScopeRepository
from toolgate.errors import DecodeError, InvalidConfigSchemaError, InvalidJsonFormatError
from toolgate.mcp.models import McpServerConfig
from toolgate.models import Scope
from toolgate.tui.renderers import PolicyConsoleUI

logger = logging.getLogger(__name__)


class ConfigLoader:
    def __init__(
        self,
        ui: PolicyConsoleUI | None = None,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> None:
        self.ui = ui
        self.cwd = cwd or Path.cwd()
        self.home = home or Path.home()
        self.local = ScopeRepository.local(self.cwd)
        self.global_ = ScopeRepository.global_(self.home)

    def repository(self, scope: Scope) -> ScopeRepository:
        return self.local if scope == Scope.LOCAL else self.global_

    def load_mcp_config(self, scope: Scope) -> McpServerConfig:
        repository = self.repository(scope)
        text = repository.read_mcp_text()
        if text is None:
            return McpServerConfig()
        try:
            return McpServerConfig.from_json(text)
        except DecodeError as exc:
            self._warn(
                f"Error reading {scope.value} mcp config: {exc}\n"
                "Please check to make sure config is correct. Discarding."
            )
            logger.error("Invalid MCP config %s: %s", repository.mcp_path, exc)
            return McpServerConfig()

    def load_agents(self, scope: Scope) -> list[Agent]:
        repository = self.repository(scope)
        agents: list[Agent] = []
        for path in repository.list_persona_files():
            try:
                agents.append(load_agent_file(path, scope=scope))
            except OSError as exc:
                logger.error("Error reading persona file %s: %s", path, exc)
            except (InvalidJsonFormatError, InvalidConfigSchemaError) as exc:
                logger.error("Error deserializing persona file %s: %s", path, exc.detail)
                self._warn(f"Error loading {scope.value} persona {path.name}: {exc.detail}. Skipping.")
        return agents

    def load_global_context(self) -> Context:
        text = self.global_.read_global_context_text()
        if text is None:
            return Context(files=[])
        try:
            return decode_context(json.loads(text))
        except (ValueError, DecodeError) as exc:
            self._warn(f"Error reading global context: {exc}. Discarding.")
            logger.error("Invalid global context %s: %s", self.global_.global_context_path, exc)
            return Context(files=[])

    def load_mcp(self) -> McpServerConfig:
        local_config = self.load_mcp_config(Scope.LOCAL)
        global_config = self.load_mcp_config(Scope.GLOBAL)
        return merge_mcp_servers(global_config, local_config, self.ui)

    def load(self) -> AgentCollection:
        local_agents = self.load_agents(Scope.LOCAL)
        global_agents = self.load_agents(Scope.GLOBAL)
        return AgentCollection(agents=merge_agents(local_agents, global_agents, self.ui))

    def _warn(self, message: str) -> None:
        if self.ui is not None:
            self.ui.warn(message)
