"""
Append-only history store.
What it does:
- Appends keyed messages (role + content + key) to the DB log
- Reads entries back by key prefix (e.g. one app's rating history)

And, the main purpose:
Keep historical ratings so trends can be tracked across scheduled runs.
"""


from typing import Any, TypedDict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from playstore_agent.db.models import MemoryMessage
from playstore_agent.db.repo import add_message, list_messages_by_prefix
from playstore_agent.core.ids import new_id


class HistoryEntry(TypedDict):
    role: str
    content: str
    key: str


class HistoryStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def append(self, entry: HistoryEntry) -> None:
        msg = MemoryMessage(
            id=new_id("msg"),
            key=entry["key"],
            role=entry.get("role") or "assistant",
            content=entry["content"],
        )
        async with self.session_factory() as db:
            await add_message(db, msg)

    async def list_by_prefix(self, prefix: str, limit: int = 100) -> list[dict[str, Any]]:
        async with self.session_factory() as db:
            items = await list_messages_by_prefix(db, prefix, limit=limit)
        return [
            {
                "id": m.id,
                "key": m.key,
                "role": m.role,
                "content": m.content,
                "at": m.created_at.isoformat(),
            }
            for m in items
        ]
