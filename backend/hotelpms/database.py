"""
Database configuration - SQLAlchemy persistence layer.
The database is only the persistence layer; settlement rules live in hotelpms.domain.
"""
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from hotelpms.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency injection: yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables"""
    from hotelpms.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)

    if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
        # WAL mode for better concurrent readers
        with engine.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.commit()


@contextmanager
def transaction(db: Session):
    """
    Unit of work for one service operation

    Commits on success. Any failure, including a stale version detected at
    flush time, rolls the whole operation back and propagates.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
