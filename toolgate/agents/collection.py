from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from toolgate.agents.models import Agent
from toolgate.errors import AgentNotFoundError, NoActiveAgentError

logger = logging.getLogger(__name__)


class AgentSubscriber(ABC):
    """Implemented by components that cache a copy of the active agent."""

    @abstractmethod
    def receive(self, agent: Agent) -> None:
        raise NotImplementedError


@dataclass
class AgentCollection:
    agents: list[Agent] = field(default_factory=list)
    active_idx: int = 0
    subscribers: list[AgentSubscriber] = field(default_factory=list, repr=False)

    def get_active(self) -> Agent | None:
        if 0 <= self.active_idx < len(self.agents):
            return self.agents[self.active_idx]
        return None

    def require_active(self) -> Agent:
        agent = self.get_active()
        if agent is None:
            raise NoActiveAgentError()
        return agent

    def names(self) -> list[str]:
        return [agent.name for agent in self.agents]

    def get(self, name: str) -> Agent | None:
        return next((agent for agent in self.agents if agent.name == name), None)

    def switch(self, name: str) -> Agent:
        for index, agent in enumerate(self.agents):
            if agent.name == name:
                changed = index != self.active_idx
                self.active_idx = index
                if changed and self.subscribers:
                    self.publish()
                return agent
        raise AgentNotFoundError(name)

    def subscribe(self, subscriber: AgentSubscriber) -> None:
        if subscriber not in self.subscribers:
            self.subscribers.append(subscriber)

    def unsubscribe(self, subscriber: AgentSubscriber) -> None:
        if subscriber in self.subscribers:
            self.subscribers.remove(subscriber)

    def publish(self, subscriber: AgentSubscriber | None = None) -> None:
        """Send a copy of the active agent to one subscriber, or to all."""
        agent = self.get_active()
        if agent is None:
            raise NoActiveAgentError()

        targets = [subscriber] if subscriber is not None else list(self.subscribers)
        for target in targets:
            target.receive(copy.deepcopy(agent))
        logger.debug("Published agent %s to %d subscriber(s)", agent.name, len(targets))
