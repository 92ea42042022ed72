from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_supervisor
from .models import WorkerRole
from .schema import WorkerSchema, WorkerCreate, WorkerUpdate
from . import service

worker_router = APIRouter(prefix="/workers", tags=["Workers"])

# The calling worker, with role and skills
@worker_router.get("/me", response_model=WorkerSchema)
def me(user = Depends(get_current_active_user)):
    return user

@worker_router.get("", response_model=list[WorkerSchema])
def list_workers(
    role: Optional[WorkerRole] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    _sup = Depends(require_supervisor),
):
    return service.get_workers(db, role=role, is_active=is_active)

@worker_router.get("/{worker_id}", response_model=WorkerSchema)
def worker_detail(worker_id: int, db: Session = Depends(get_db), _sup = Depends(require_supervisor)):
    obj = service.get_worker(db, worker_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Worker not found")
    return obj

@worker_router.post("", response_model=WorkerSchema, status_code=status.HTTP_201_CREATED)
def worker_post(payload: WorkerCreate, db: Session = Depends(get_db), _sup = Depends(require_supervisor)):
    if service.get_worker_by_email(db, payload.email):
        raise HTTPException(status_code=409, detail="A worker with this email already exists")
    try:
        return service.create_worker(db, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A worker with this email already exists")

# No delete: deactivate with {"is_active": false}
@worker_router.patch("/{worker_id}", response_model=WorkerSchema)
def worker_patch(
    worker_id: int,
    payload: WorkerUpdate,
    db: Session = Depends(get_db),
    _sup = Depends(require_supervisor),
):
    obj = service.update_worker(db, worker_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Worker not found")
    return obj
