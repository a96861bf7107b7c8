from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lectro.api.routes import (
    admin,
    auth,
    health,
    issues,
    notifications,
    swaps,
    system,
    timetables,
)
from lectro.core.config import get_settings
from lectro.core.exceptions import AppError
from lectro.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware, SecurityHeadersMiddleware
from lectro.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(admin.router, prefix=f"{settings.api_prefix}/admin", tags=["admin"])
app.include_router(system.router, prefix=settings.api_prefix, tags=["system"])
app.include_router(timetables.router, prefix=f"{settings.api_prefix}/timetables", tags=["timetables"])
app.include_router(swaps.router, prefix=settings.api_prefix, tags=["swaps"])
app.include_router(issues.router, prefix=settings.api_prefix, tags=["issues"])
app.include_router(notifications.router, prefix=settings.api_prefix, tags=["notifications"])
