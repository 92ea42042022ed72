from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_supervisor
from .models import StationStatus
from .schema import StationSchema, StationCreate, StationUpdate
from . import service

station_router = APIRouter(prefix="/stations", tags=["Stations"])

# Stations, optionally by category or status
@station_router.get("", response_model=list[StationSchema])
def list_stations(
    category: Optional[str] = None,
    station_status: Optional[StationStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    return service.get_stations(db, category=category, status=station_status)

@station_router.get("/{station_id}", response_model=StationSchema)
def station_detail(station_id: int, db: Session = Depends(get_db), user = Depends(get_current_active_user)):
    obj = service.get_station(db, station_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Station not found")
    return obj

@station_router.post("", response_model=StationSchema, status_code=status.HTTP_201_CREATED)
def station_post(
    payload: StationCreate,
    db: Session = Depends(get_db),
    _sup = Depends(require_supervisor),
):
    try:
        return service.create_station(db, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A station with this name already exists")

@station_router.patch("/{station_id}", response_model=StationSchema)
def station_patch(
    station_id: int,
    payload: StationUpdate,
    db: Session = Depends(get_db),
    _sup = Depends(require_supervisor),
):
    try:
        obj = service.update_station(db, station_id, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A station with this name already exists")
    if not obj:
        raise HTTPException(status_code=404, detail="Station not found")
    return obj

# Deleting a station removes its shifts and their signups
@station_router.delete("/{station_id}")
def station_delete(station_id: int, db: Session = Depends(get_db), _sup = Depends(require_supervisor)):
    if not service.delete_station(db, station_id):
        raise HTTPException(status_code=404, detail="Station not found")
    return {"message": "Station deleted"}
