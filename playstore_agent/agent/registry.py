"""
Agent registry.
What it does:
- Holds the agents served over A2A, keyed by agent id
- Answers lookups and lists the available ids for diagnostics

And, the main purpose:
Explicitly constructed, injected mapping of agents (no global singleton).
"""


from typing import Iterator, Mapping, Optional, Protocol

from playstore_agent.llm.schemas import AgentResponse


class AgentInvoker(Protocol):
    async def generate(self, messages: list[dict]) -> AgentResponse: ...


class AgentRegistry:
    def __init__(self, agents: Mapping[str, AgentInvoker] | None = None):
        self._agents: dict[str, AgentInvoker] = dict(agents or {})

    def get(self, agent_id: str) -> Optional[AgentInvoker]:
        return self._agents.get(agent_id)

    def names(self) -> list[str]:
        return list(self._agents.keys())

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[str]:
        return iter(self._agents)

    def __len__(self) -> int:
        return len(self._agents)
