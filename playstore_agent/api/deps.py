from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from playstore_agent.a2a.adapter import A2AAdapter
from playstore_agent.agent.memory import HistoryStore
from playstore_agent.agent.registry import AgentRegistry
from playstore_agent.agent.tracer import RunTracer
from playstore_agent.workflow.rating_check import RatingLookup
from playstore_agent.workflow.scheduler import RatingCheckScheduler


@dataclass
class Services:
    registry: AgentRegistry
    adapter: A2AAdapter
    rating_client: RatingLookup
    history_store: Optional[HistoryStore] = None
    run_tracer: Optional[RunTracer] = None
    scheduler: Optional[RatingCheckScheduler] = None


def get_services(request: Request) -> Services:
    return request.app.state.services
