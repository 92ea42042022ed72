import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import func, select
from .models import Worker, WorkerRole
from .schema import WorkerCreate, WorkerUpdate

logger = logging.getLogger(__name__)

_NOT_NULL = {"name", "role", "skills", "is_active"}


def get_workers(
    db: Session,
    *,
    role: Optional[WorkerRole] = None,
    is_active: Optional[bool] = None,
) -> List[Worker]:
    stmt = select(Worker).order_by(Worker.name, Worker.id)
    if role:
        stmt = stmt.where(Worker.role == role)
    if is_active is not None:
        stmt = stmt.where(Worker.is_active == is_active)
    return list(db.scalars(stmt))

def get_worker(db: Session, worker_id: int) -> Optional[Worker]:
    return db.get(Worker, worker_id)

def get_worker_by_email(db: Session, email: str) -> Optional[Worker]:
    # emails are unique regardless of case
    return db.scalars(select(Worker).where(func.lower(Worker.email) == email.strip().lower())).first()

def create_worker(db: Session, dto: WorkerCreate) -> Worker:
    worker = Worker(**dto.model_dump())
    db.add(worker)
    db.commit()
    db.refresh(worker)
    logger.info("Worker %s registered as %s", worker.id, worker.role.value)
    return worker

def update_worker(db: Session, worker_id: int, patch: WorkerUpdate) -> Optional[Worker]:
    """Partial update. Workers keep their signup history, so there is no delete; deactivate instead."""
    worker = db.get(Worker, worker_id)
    if worker is None:
        return None
    changes = patch.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in _NOT_NULL:
            continue
        setattr(worker, field, value)
    db.commit()
    db.refresh(worker)
    if changes.get("is_active") is False:
        logger.info("Worker %s deactivated", worker.id)
    return worker
