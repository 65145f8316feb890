import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("TASKBOARD_SECRET_KEY", "change-this-in-production-please")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("TASKBOARD_ACCESS_TOKEN_MINUTES", "60"))

_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
DATABASE_URL = os.getenv(
    "TASKBOARD_DATABASE_URL",
    f"sqlite:///{os.path.join(_DATA_DIR, 'taskboard.db')}",
)
SQL_ECHO = os.getenv("TASKBOARD_SQL_ECHO", "false").lower() in {"1", "true", "yes"}

LOG_LEVEL = os.getenv("TASKBOARD_LOG_LEVEL", "INFO")

# login brute-force protection, per client IP
LOGIN_MAX_ATTEMPTS = int(os.getenv("TASKBOARD_LOGIN_MAX_ATTEMPTS", "10"))
LOGIN_WINDOW_SECONDS = int(os.getenv("TASKBOARD_LOGIN_WINDOW_SECONDS", "600"))

CORS_ORIGINS = [
    o.strip() for o in os.getenv("TASKBOARD_CORS_ORIGINS", "*").split(",") if o.strip()
]


def access_token_delta() -> timedelta:
    return timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
