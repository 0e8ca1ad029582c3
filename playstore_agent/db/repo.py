# playstore_agent/db/repo.py

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playstore_agent.db.models import MemoryMessage, WorkflowRun, WorkflowEvent


def _serialize_sqlite_value(value: Any) -> Any:
    """
    SQLite cannot bind dict/list directly into TEXT parameters.
    Convert dict/list to JSON string so commit never fails.

    NOTE:
    - Keep strings as-is.
    - For dict/list, store pretty JSON for readability.
    """
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, indent=2)
    return value


async def add_message(db: AsyncSession, msg: MemoryMessage) -> MemoryMessage:
    msg.content = _serialize_sqlite_value(msg.content)
    db.add(msg)
    await db.commit()
    await db.refresh(msg)
    return msg


async def list_messages_by_prefix(db: AsyncSession, prefix: str, limit: int = 100) -> list[MemoryMessage]:
    res = await db.execute(
        select(MemoryMessage)
        .where(MemoryMessage.key.startswith(prefix, autoescape=True))
        .order_by(MemoryMessage.created_at.desc())
        .limit(limit)
    )
    return list(res.scalars().all())


async def create_run(db: AsyncSession, run: WorkflowRun) -> WorkflowRun:
    run.input = _serialize_sqlite_value(run.input)
    db.add(run)
    await db.commit()
    await db.refresh(run)
    return run


async def get_run(db: AsyncSession, run_id: str) -> WorkflowRun | None:
    res = await db.execute(select(WorkflowRun).where(WorkflowRun.id == run_id))
    return res.scalar_one_or_none()


async def update_run_status(
    db: AsyncSession,
    run_id: str,
    *,
    status: str,
    output: Any = None,
    error: str | None = None,
    finished: bool = False,
) -> WorkflowRun | None:
    run = await get_run(db, run_id)
    if run is None:
        return None
    run.status = status
    if output is not None:
        run.output = _serialize_sqlite_value(output)
    if error is not None:
        run.error = error
    if finished:
        run.finished_at = datetime.utcnow()
    await db.commit()
    await db.refresh(run)
    return run


async def add_event(db: AsyncSession, ev: WorkflowEvent) -> WorkflowEvent:
    # Make payload SQLite-safe if it exists and is dict/list
    ev.payload = _serialize_sqlite_value(ev.payload)
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def list_events(db: AsyncSession, run_id: str) -> list[WorkflowEvent]:
    res = await db.execute(
        select(WorkflowEvent)
        .where(WorkflowEvent.run_id == run_id)
        .order_by(WorkflowEvent.created_at)
    )
    return list(res.scalars().all())
