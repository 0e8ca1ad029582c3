from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from playstore_agent.api.deps import Services, get_services


"""
A2A endpoint.
What it provides:
- POST /a2a/agent/{agent_id}: JSON-RPC 2.0 task requests
- OPTIONS /a2a/agent/{agent_id}: CORS preflight (204, empty body)

And, the main purpose:
Expose the registered agents to other agents over HTTP.
"""

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

router = APIRouter()

@router.options("/a2a/agent/{agent_id}")
async def a2a_preflight(agent_id: str):
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/a2a/agent/{agent_id}")
async def a2a_agent(agent_id: str, request: Request, services: Services = Depends(get_services)):
    raw = await request.body()
    status, body = await services.adapter.handle(raw, agent_id)
    return JSONResponse(body, status_code=status, headers=CORS_HEADERS)
