import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select
from .models import WorkStation, StationStatus
from .schema import StationCreate, StationUpdate

logger = logging.getLogger(__name__)

# an explicit null on these leaves the column as it is
_NOT_NULL = {"name", "category", "capacity", "status", "required_skills"}


def get_stations(
    db: Session,
    *,
    category: Optional[str] = None,
    status: Optional[StationStatus] = None,
) -> List[WorkStation]:
    stmt = select(WorkStation).order_by(WorkStation.name)
    if category:
        stmt = stmt.where(WorkStation.category == category)
    if status:
        stmt = stmt.where(WorkStation.status == status)
    return list(db.scalars(stmt))

def get_station(db: Session, station_id: int) -> Optional[WorkStation]:
    return db.get(WorkStation, station_id)

def create_station(db: Session, dto: StationCreate) -> WorkStation:
    station = WorkStation(**dto.model_dump())
    db.add(station)
    db.commit()
    db.refresh(station)
    logger.info("Station %s (%s) created, skills %s", station.id, station.name, station.required_skills)
    return station

def update_station(db: Session, station_id: int, patch: StationUpdate) -> Optional[WorkStation]:
    """Apply only the fields that were sent; skills arrive already normalized."""
    station = db.get(WorkStation, station_id)
    if station is None:
        return None
    changes = patch.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in _NOT_NULL:
            continue
        setattr(station, field, value)
    db.commit()
    db.refresh(station)
    return station

def delete_station(db: Session, station_id: int) -> bool:
    station = db.get(WorkStation, station_id)
    if station is None:
        return False
    # shifts, their exceptions and signups go with it
    db.delete(station)
    db.commit()
    logger.info("Station %s deleted", station_id)
    return True
