# backend/legal_insights/main.py
import logging
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from legal_insights import __version__
from legal_insights.config import get_settings
from legal_insights.database import get_db
from legal_insights.api.auth import router as auth_router
from legal_insights.api.users import router as users_router
from legal_insights.api.tags import router as tags_router
from legal_insights.api.permissions import router as permissions_router
from legal_insights.api.notebooks import router as notebooks_router
from legal_insights.api.sources import router as sources_router
from legal_insights.api.notes import router as notes_router
from legal_insights.api.chat import router as chat_router, relay_cors_middleware
from legal_insights.api.admin import router as admin_router
from legal_insights.api.websocket import router as websocket_router
from legal_insights.services.errors import ServiceError
from legal_insights.services.storage_service import StorageService, get_reachable_storage

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Research notebooks with tag-based access control",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Registered after CORSMiddleware so it wraps it and answers relay preflights itself
app.middleware("http")(relay_cors_middleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": str(exc)}},
    )


# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")
app.include_router(permissions_router, prefix="/api/v1")
app.include_router(notebooks_router, prefix="/api/v1")
app.include_router(sources_router, prefix="/api/v1")
app.include_router(notes_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(websocket_router, prefix="/api/v1")


@app.get("/health")
def health_check(
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[Optional[StorageService], Depends(get_reachable_storage)],
):
    """Report whether the database and file storage respond."""
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database_ok = False
    storage_ok = storage is not None and storage.is_available()

    if not database_ok:
        health = "down"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif not storage_ok:
        health = "degraded"
    else:
        health = "healthy"
    return {
        "status": health,
        "app": settings.app_name,
        "checks": {"database": database_ok, "storage": storage_ok},
    }
