from fastapi import Depends, HTTPException
from auth.services.auth_service import get_current_active_user
from worker.models import Worker

def require_supervisor(user: Worker = Depends(get_current_active_user)) -> None:
    if not user.is_supervisor:
        raise HTTPException(status_code=403, detail="Supervisor role required")
