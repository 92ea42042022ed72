from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.logging_config import setup_logging

from shift.router import shift_router
from shiftexception.router import shiftexception_router
from signup.router import signup_router
from recurrence.router import recurrence_router
from station.router import station_router
from worker.router import worker_router
import models_bootstrap

logger = setup_logging()

openapi_tags = [
    {
        "name": "Shifts",
        "description": "Shift definitions, calendar and availability",
    },
    {
        "name": "Signups",
        "description": "Claiming and withdrawing from shift occurrences",
    },
    {
        "name": "Stations",
        "description": "Work stations and their required skills",
    },
    {
        "name": "Workers",
        "description": "Workers, roles and skills",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(title="ShiftBoard", openapi_tags=openapi_tags)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# shift_router declares /calendar and /available before /{shift_id}
app.include_router(shift_router, prefix="/api")
app.include_router(shiftexception_router, prefix="/api")
app.include_router(signup_router, prefix="/api")
app.include_router(recurrence_router, prefix="/api")
app.include_router(station_router, prefix="/api")
app.include_router(worker_router, prefix="/api")

logger.info("ShiftBoard API ready")


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}
