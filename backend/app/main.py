import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LOG_LEVEL, RUN_MIGRATIONS_ON_STARTUP, CORS_ORIGINS
from app.database import engine, Base
import app.models  # noqa: F401 - registers tables on Base.metadata
from app.api import users, login, diet, whatsapp
from app.exceptions import DietServiceError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


def run_migrations():
    """Run pending Alembic migrations, then make sure every table exists."""
    try:
        from alembic.config import Config
        from alembic import command
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, "head")
        logger.info("[Alembic] Migrations applied successfully")
    except Exception as e:
        logger.error(f"[Alembic] Migration failed, falling back to create_all: {e}")

    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if RUN_MIGRATIONS_ON_STARTUP:
        run_migrations()
    logger.info(f"MediDiet API started (database: {engine.url.render_as_string(hide_password=True)})")
    yield


app = FastAPI(title="MediDiet API", version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    elapsed_ms = (time.monotonic() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)")
    return response


@app.exception_handler(DietServiceError)
async def diet_service_error_handler(request: Request, exc: DietServiceError):
    if exc.is_upstream:
        # Full detail stays in the logs; the caller gets the generic message
        logger.error(f"{exc.status_code} {request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
        detail = exc.public_message
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    issues = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        issues.append(f"{'.'.join(loc) or 'body'} - {err.get('msg')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Validation error: {'; '.join(issues)}"},
    )


app.include_router(users.router)
app.include_router(login.router)
app.include_router(diet.router)
app.include_router(whatsapp.router)


# Root endpoint
@app.get("/")
def root():
    return {
        "message": "MediDiet Backend is Running",
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Health check endpoint
@app.get("/health")
def health_check():
    return {"status": "healthy", "message": "API is running"}
