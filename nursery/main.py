"""Nursery Admin - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nursery.api import attendance, auth, children, dashboard, invoices, portal, scan, settings as settings_api, staff
from nursery.api.deps import require_module_permission
from nursery.config import settings
from nursery.db import db_shutdown, db_startup, get_store
from nursery.errors import AuthError, InvalidSettingsError, StoreError, StoreUnavailableError
from nursery.seed import seed_admin
from nursery.services.identity import get_identity

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_startup()
    try:
        await seed_admin(get_store(), get_identity())
    except StoreUnavailableError as e:
        logger.error("Firebase Realtime Database is not reachable at %s", settings.firebase_database_url)
        raise RuntimeError("Database connection failed. Check FIREBASE_DATABASE_URL and network access.") from e
    except AuthError:
        logger.exception("Could not seed the admin profile")
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Nursery administration: children, staff, QR attendance, invoicing",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error("Database unreachable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Cannot reach the database. Check your connection and try again.", "retry": True},
    )


@app.exception_handler(InvalidSettingsError)
async def invalid_settings_handler(request: Request, exc: InvalidSettingsError):
    logger.error("Invalid nursery settings during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "The nursery settings are invalid. An admin must save them again.", "retry": False},
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Database error during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "An unexpected error occurred while accessing the data.", "retry": False},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"], dependencies=[Depends(require_module_permission("dashboard"))])
app.include_router(children.router, prefix="/api/children", tags=["Children"], dependencies=[Depends(require_module_permission("children"))])
app.include_router(staff.router, prefix="/api/staff", tags=["Staff"], dependencies=[Depends(require_module_permission("staff"))])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"], dependencies=[Depends(require_module_permission("attendance"))])
app.include_router(scan.router, prefix="/api/scan", tags=["QR Scanner"], dependencies=[Depends(require_module_permission("scan"))])
app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoicing"], dependencies=[Depends(require_module_permission("invoices"))])
app.include_router(settings_api.router, prefix="/api/settings", tags=["Settings"], dependencies=[Depends(require_module_permission("settings"))])
app.include_router(portal.router, prefix="/api/portal", tags=["Portals"], dependencies=[Depends(require_module_permission("portal"))])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
