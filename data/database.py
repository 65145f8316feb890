# data/database.py

import logging

from sqlmodel import SQLModel, create_engine, Session

from core.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# ---------------------------
# Database configuration
# ---------------------------
# SQLite connections are shared across FastAPI's worker threads
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# echo=True logs SQL statements (TASKBOARD_SQL_ECHO)
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=_connect_args)


def init_db(bind=None) -> None:
    """
    Initialize the database.

    Creates all tables defined in SQLModel metadata if they don't already exist.
    """
    import models.users    # register User first
    import models.tasks    # then Task (which references users.id)

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ready")


def get_session() -> Session:
    """
    Dependency for FastAPI routes.

    Yields a database session that is automatically closed afterwards.
    """
    with Session(engine) as session:
        yield session
