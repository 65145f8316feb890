# app.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from core.config import CORS_ORIGINS, LOG_LEVEL
from data.database import init_db
from routers import users, tasks, auth
from routers.analytics import router as analytics_router

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# --- Lifespan: create tables on startup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Taskboard API started")
    yield
    logger.info("Taskboard API stopped")


app = FastAPI(
    title="Taskboard API",
    description="Role-based task management: admins, managers and employees.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS: origins from TASKBOARD_CORS_ORIGINS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Unique-constraint races that slip past the router pre-checks ---
@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicts with an existing record"},
    )


# --- Routers (mounted under /api) ---
app.include_router(auth.router,     prefix="/api")
app.include_router(users.router,    prefix="/api")
app.include_router(tasks.router,    prefix="/api")
app.include_router(analytics_router, prefix="/api")

# --- Simple roots / health ---
@app.get("/")
def read_root():
    return {"message": "Welcome to Taskboard!"}

@app.get("/health")
def health():
    return {"status": "ok"}
