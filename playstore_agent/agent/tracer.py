"""
Stores workflow run records and their trace.
What it records:
- Run creation with its initial context
- State transitions (fetching, formatting, storing, completed, failed)
- Step outputs
- Errors

And, the main purpose:
Observability and debugging of scheduled rating checks.
"""


import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from playstore_agent.core.ids import new_id
from playstore_agent.db.models import WorkflowEvent, WorkflowRun
from playstore_agent.db.repo import add_event, create_run, get_run, list_events, update_run_status

TERMINAL_STATES = {"completed", "failed"}


class RunTracer:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def transition(self, run_id: str, state: str, step_id: str, payload: dict[str, Any]) -> None:
        async with self.session_factory() as db:
            if state == "pending":
                run = WorkflowRun(
                    id=run_id,
                    workflow_id=str(payload.get("workflowId", "")),
                    status=state,
                    input=payload.get("context") or {},
                )
                await create_run(db, run)
                return

            event_type = "error" if state == "failed" else "state"
            await trace(db, run_id, step_id, event_type, {"state": state, **payload})
            await update_run_status(
                db,
                run_id,
                status=state,
                output=payload.get("output"),
                error=payload.get("error"),
                finished=state in TERMINAL_STATES,
            )

    async def step_output(self, run_id: str, step_id: str, output: dict) -> None:
        async with self.session_factory() as db:
            await trace(db, run_id, step_id, "step_output", output)

    async def describe(self, run_id: str) -> dict | None:
        async with self.session_factory() as db:
            run = await get_run(db, run_id)
            if run is None:
                return None
            events = await list_events(db, run_id)
        return {
            "id": run.id,
            "workflowId": run.workflow_id,
            "status": run.status,
            "input": _loads(run.input),
            "output": _loads(run.output),
            "error": run.error or None,
            "createdAt": run.created_at.isoformat(),
            "finishedAt": run.finished_at.isoformat() if run.finished_at else None,
            "events": [
                {
                    "id": ev.id,
                    "stepId": ev.step_id,
                    "type": ev.event_type,
                    "payload": _loads(ev.payload),
                    "at": ev.created_at.isoformat(),
                }
                for ev in events
            ],
        }


async def trace(db: AsyncSession, run_id: str, step_id: str, event_type: str, payload: dict):
    ev = WorkflowEvent(
        id=new_id("ev"),
        run_id=run_id,
        step_id=step_id,
        event_type=event_type,
        payload=json.dumps(payload, ensure_ascii=False, default=str),
    )
    await add_event(db, ev)


def _loads(text: str | None) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
