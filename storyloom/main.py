import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .database import engine, init_db
from .errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, StoryloomError
from .routers.collaborators import router as collaborators_router
from .routers.pages import router as pages_router
from .schemas import UserCreate, UserRead, UserUpdate
from .settings.config import settings
from .users import auth_backend, fastapi_users

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("storyloom API started")
    yield
    await engine.dispose()


app = FastAPI(title="Storyloom API", lifespan=lifespan)

# Enable CORS if needed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------
# Route Includes
# ----------------------
app.include_router(pages_router)
app.include_router(collaborators_router)

# Authentication Routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"]
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/users",
    tags=["users"]
)

# -----------------------------------------------------
# Domain errors -> HTTP status
# -----------------------------------------------------
_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
    (BadRequestError, 400),
)


@app.exception_handler(StoryloomError)
async def _domain_error_handler(request: Request, exc: StoryloomError):
    status_code = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check():
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database = "ok"
    except Exception as exc:  # noqa: BLE001
        logger.warning("Health check database ping failed: %s", exc)
        database = "unavailable"
    return {"status": "healthy", "database": database}
