"""
Database table definitions and it stores:
- History messages (append-only keyed log, e.g. rating history)
- Workflow runs
- Workflow trace events
Main purpose:
Define persistent data structure.
"""



from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from playstore_agent.db.base import Base

class MemoryMessage(Base):
    __tablename__ = "memory_messages"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    key: Mapped[str] = mapped_column(String, index=True)
    role: Mapped[str] = mapped_column(String, default="assistant")
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

class WorkflowRun(Base):
    __tablename__ = "workflow_runs"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    workflow_id: Mapped[str] = mapped_column(String, index=True)
    status: Mapped[str] = mapped_column(String, default="pending")  # pending|fetching|formatting|storing|completed|failed
    input: Mapped[str] = mapped_column(Text, default="")
    output: Mapped[str] = mapped_column(Text, default="")
    error: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    events = relationship("WorkflowEvent", back_populates="run", cascade="all, delete-orphan")

class WorkflowEvent(Base):
    __tablename__ = "workflow_events"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    run_id: Mapped[str] = mapped_column(String, ForeignKey("workflow_runs.id"), index=True)
    step_id: Mapped[str] = mapped_column(String, default="")
    event_type: Mapped[str] = mapped_column(String)  # state|step_output|error
    payload: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    run = relationship("WorkflowRun", back_populates="events")
