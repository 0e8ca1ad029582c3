from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from playstore_agent.core.config import settings
from playstore_agent.db.base import Base
from playstore_agent.db import models  # noqa: F401

engine = create_async_engine(settings.DATABASE_URL, echo=False, future=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def init_db(bind: AsyncEngine = engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
