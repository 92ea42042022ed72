from __future__ import annotations
from enum import Enum
from sqlalchemy import Integer, String, Text, JSON, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

class StationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    OFFLINE = "OFFLINE"

class WorkStation(Base):
    __tablename__ = "work_stations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[StationStatus] = mapped_column(
        SAEnum(StationStatus, name="station_status"), nullable=False, default=StationStatus.ACTIVE
    )
    # normalized at the DTO boundary: stripped, unique, sorted
    required_skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # relationships
    shifts = relationship("Shift", back_populates="station", cascade="all, delete-orphan")

    @property
    def required_skill_set(self) -> frozenset[str]:
        return frozenset(self.required_skills or ())
