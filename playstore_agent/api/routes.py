import json
from fastapi import APIRouter, Depends, HTTPException, Query

from playstore_agent.api.deps import Services, get_services
from playstore_agent.api.types import RatingCheckRequest, ScoreRequest
from playstore_agent.core.scoring import score_app
from playstore_agent.workflow.rating_check import HISTORY_KEY_PREFIX, WORKFLOW_ID, run_rating_check, summarize


"""
FastAPI routes for the rating workflows and history.
What it provides:
- Agent listing
- Run scheduled rating check endpoint
- Fetch workflow run status and trace
- Fetch rating history for an app
- Score app metrics

And, the main purpose:
Expose workflow functionality over HTTP.
"""

router = APIRouter()

@router.get("/agents")
async def api_list_agents(services: Services = Depends(get_services)):
    return {"agents": services.registry.names()}


@router.post(f"/workflows/{WORKFLOW_ID}/runs")
async def api_run_rating_check(req: RatingCheckRequest, services: Services = Depends(get_services)):
    app_names = [n.strip() for n in req.app_names if n.strip()]
    if not app_names:
        raise HTTPException(400, "appNames must contain at least one non-empty name")

    result = await run_rating_check(
        app_names,
        lookup=services.rating_client,
        history_store=services.history_store,
        listener=services.run_tracer,
    )
    summary = summarize(result)
    if not result.ok:
        raise HTTPException(500, summary)
    return summary


@router.get("/workflows/runs/{run_id}")
async def api_get_run(run_id: str, services: Services = Depends(get_services)):
    if services.run_tracer is None:
        raise HTTPException(503, "run tracing is not available")
    run = await services.run_tracer.describe(run_id)
    if not run:
        raise HTTPException(404, "run not found")
    return run


@router.get("/ratings/history/{app_id}")
async def api_rating_history(
    app_id: str,
    limit: int = Query(50, ge=1, le=500),
    services: Services = Depends(get_services),
):
    if services.history_store is None:
        raise HTTPException(503, "history store is not available")
    entries = await services.history_store.list_by_prefix(f"{HISTORY_KEY_PREFIX}:{app_id}:", limit=limit)
    history = []
    for e in entries:
        try:
            rating = json.loads(e["content"])
        except (TypeError, json.JSONDecodeError):
            rating = e["content"]
        history.append({"key": e["key"], "at": e["at"], "rating": rating})
    return {"appId": app_id, "count": len(history), "history": history}


@router.post("/ratings/score")
async def api_score(req: ScoreRequest):
    return score_app(req.rating, req.ratings_count, req.installs).model_dump()
