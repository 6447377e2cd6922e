"""Tests for the active-agent lifecycle."""

import pytest

from toolgate.agents.collection import AgentCollection, AgentSubscriber
from toolgate.agents.models import Agent
from toolgate.errors import AgentNotFoundError, NoActiveAgentError


class RecordingSubscriber(AgentSubscriber):
    def __init__(self) -> None:
        self.received: list[Agent] = []

    def receive(self, agent: Agent) -> None:
        self.received.append(agent)


@pytest.fixture
def agents() -> AgentCollection:
    return AgentCollection(agents=[Agent(name="a"), Agent(name="b"), Agent(name="c")])


def test_switch_activates_requested_agent(agents: AgentCollection) -> None:
    selected = agents.switch("b")
    assert selected.name == "b"
    assert agents.require_active().name == "b"
    assert agents.active_idx == 1


def test_switch_unknown_agent_keeps_current(agents: AgentCollection) -> None:
    agents.switch("c")
    with pytest.raises(AgentNotFoundError, match="No agent with name missing found"):
        agents.switch("missing")
    assert agents.require_active().name == "c"


def test_publish_sends_copy_of_active(agents: AgentCollection) -> None:
    subscriber = RecordingSubscriber()
    agents.subscribe(subscriber)
    agents.publish()
    received = subscriber.received[-1]
    assert received.name == "a"
    received.allowed_tools.add("*")
    assert agents.require_active().allowed_tools == set()


def test_switch_notifies_subscribers_on_change(agents: AgentCollection) -> None:
    subscriber = RecordingSubscriber()
    agents.subscribe(subscriber)
    agents.subscribe(subscriber)
    agents.switch("a")
    assert subscriber.received == []
    agents.switch("c")
    assert [agent.name for agent in subscriber.received] == ["c"]

    agents.unsubscribe(subscriber)
    agents.switch("b")
    assert len(subscriber.received) == 1


def test_publish_to_single_subscriber(agents: AgentCollection) -> None:
    first = RecordingSubscriber()
    second = RecordingSubscriber()
    agents.subscribe(first)
    agents.publish(second)
    assert first.received == []
    assert [agent.name for agent in second.received] == ["a"]


def test_publish_without_active_agent_fails() -> None:
    empty = AgentCollection()
    assert empty.get_active() is None
    with pytest.raises(NoActiveAgentError):
        empty.publish(RecordingSubscriber())


def test_names_and_get(agents: AgentCollection) -> None:
    assert agents.names() == ["a", "b", "c"]
    assert agents.get("c").name == "c"
    assert agents.get("z") is None
