from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlalchemy.sql import func
from sqlalchemy import String, Boolean, DateTime, JSON, Enum as SAEnum, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

class WorkerRole(str, Enum):
    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"
    WORKER = "WORKER"

class Worker(Base):
    __tablename__ = "workers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[WorkerRole] = mapped_column(
        SAEnum(WorkerRole, name="worker_role"), nullable=False, default=WorkerRole.WORKER
    )
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text("true"), default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # relationships
    signups = relationship("ShiftSignup", back_populates="worker", cascade="all, delete-orphan")

    @property
    def skill_set(self) -> frozenset[str]:
        return frozenset(self.skills or ())

    @property
    def is_supervisor(self) -> bool:
        return self.role in (WorkerRole.ADMIN, WorkerRole.SUPERVISOR)
