from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from core.database import get_db
from worker.models import Worker

# Sessions are owned by the front end; the API only trusts the forwarded worker id.

def get_current_active_user(
    x_worker_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> Worker:
    if x_worker_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    worker = db.get(Worker, x_worker_id)
    if not worker or not worker.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive or unknown worker")
    return worker
