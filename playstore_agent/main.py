from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from playstore_agent.a2a.adapter import A2AAdapter
from playstore_agent.agent.memory import HistoryStore
from playstore_agent.agent.playstore_agent import PlayStoreAgent
from playstore_agent.agent.registry import AgentRegistry
from playstore_agent.agent.tracer import RunTracer
from playstore_agent.api.a2a_routes import router as a2a_router
from playstore_agent.api.deps import Services
from playstore_agent.api.routes import router
from playstore_agent.core.config import Settings, settings as default_settings
from playstore_agent.core.logging import get_logger
from playstore_agent.db.session import SessionLocal, init_db
from playstore_agent.tools.playstore import get_default_client
from playstore_agent.workflow.rating_check import RatingLookup
from playstore_agent.workflow.scheduler import RatingCheckScheduler

log = get_logger("main")

PLAYSTORE_AGENT_ID = "playStoreAgent"


def build_services(
    settings: Settings,
    *,
    registry: Optional[AgentRegistry] = None,
    rating_client: Optional[RatingLookup] = None,
    history_store: Optional[HistoryStore] = None,
    run_tracer: Optional[RunTracer] = None,
    scheduler: Optional[RatingCheckScheduler] = None,
) -> Services:
    registry = registry or AgentRegistry({PLAYSTORE_AGENT_ID: PlayStoreAgent()})
    rating_client = rating_client or get_default_client()
    return Services(
        registry=registry,
        adapter=A2AAdapter(registry, expose_stack=not settings.is_production),
        rating_client=rating_client,
        history_store=history_store,
        run_tracer=run_tracer,
        scheduler=scheduler,
    )


def create_app(services: Optional[Services] = None, settings: Settings = default_settings) -> FastAPI:
    """
    App factory. With no services given it wires the production stack:
    the Play Store agent, the SQLite history store / run tracer and,
    when enabled, the rating check scheduler.
    """
    init_database = services is None
    if services is None:
        history_store = HistoryStore(SessionLocal)
        run_tracer = RunTracer(SessionLocal)
        rating_client = get_default_client()
        scheduler = None
        if settings.SCHEDULER_ENABLED:
            scheduler = RatingCheckScheduler(
                settings.rating_check_apps,
                lookup=rating_client,
                history_store=history_store,
                listener_factory=lambda: run_tracer,
                interval_hours=settings.RATING_CHECK_INTERVAL_HOURS,
            )
        services = build_services(
            settings,
            rating_client=rating_client,
            history_store=history_store,
            run_tracer=run_tracer,
            scheduler=scheduler,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            await init_db()
        if services.scheduler:
            await services.scheduler.start()
        log.info(f"Serving agents: {services.registry.names()}")
        try:
            yield
        finally:
            if services.scheduler:
                await services.scheduler.stop()

    app = FastAPI(title="PlayStore Rating Agent API", version="0.1.0", lifespan=lifespan)
    app.state.services = services
    app.include_router(a2a_router)
    app.include_router(router, prefix="/v1")
    return app


app = create_app()
