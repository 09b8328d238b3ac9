"""
Conexión a la base de datos y sesión de SQLAlchemy
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from ..config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, **kwargs):
    """
    Crea el engine de SQLAlchemy

    En SQLite se activan las llaves foráneas para que los ON DELETE CASCADE
    se comporten igual que en PostgreSQL.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)

    new_engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency de FastAPI: una sesión por request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
