"""
SQLAlchemy Database Models for the running program store

Provides persistent storage for:
- The active program, stored under a fixed key
- Archived programs (history), newest first

Programs are stored as JSON documents and validated back into Pydantic
models on load, so date fields round-trip as ISO 8601 strings.
"""

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, DateTime, Integer, JSON, String, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from runplan.plan_schemas import Program
from runplan.tracking import archive_program

logger = logging.getLogger(__name__)

Base = declarative_base()

ACTIVE_PROGRAM_KEY = "active_program"
DEFAULT_DATABASE_URL = "sqlite:///runplan.db"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredDocument(Base):
    """
    JSON document stored under a fixed key.

    Attributes:
        id: Primary key
        key: Unique document name (e.g. 'active_program')
        payload: Document as JSON
        updated_at: Last write timestamp
    """

    __tablename__ = "stored_documents"

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<StoredDocument(key='{self.key}', updated_at='{self.updated_at}')>"


class ArchivedProgram(Base):
    """
    Program moved to history when the athlete deleted it.

    Attributes:
        id: Primary key
        program_id: Program identifier (creation timestamp)
        distance: Race distance of the program
        race_name: Target race name
        archived_at: When the program was archived
        payload: Full Program as JSON
    """

    __tablename__ = "archived_programs"

    id = Column(Integer, primary_key=True)
    program_id = Column(String, nullable=False, index=True)
    distance = Column(String, nullable=False)
    race_name = Column(String, nullable=True)
    archived_at = Column(DateTime, nullable=False, index=True)
    payload = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<ArchivedProgram(program_id='{self.program_id}', archived_at='{self.archived_at}')>"


class ProgramStore:
    """
    Read and write programs through a SQLAlchemy session.

    Writes replace whole documents; the store never patches part of a program.
    """

    def __init__(self, db: Session):
        self.db = db

    def save_active(self, program: Program) -> None:
        payload = program.model_dump(mode="json")
        document = self.db.query(StoredDocument).filter_by(key=ACTIVE_PROGRAM_KEY).one_or_none()
        if document is None:
            document = StoredDocument(key=ACTIVE_PROGRAM_KEY, payload=payload)
            self.db.add(document)
        else:
            document.payload = payload
            document.updated_at = _utcnow()
        self.db.commit()
        logger.info("Saved active program %s", program.id)

    def load_active(self) -> Optional[Program]:
        document = self.db.query(StoredDocument).filter_by(key=ACTIVE_PROGRAM_KEY).one_or_none()
        if document is None:
            return None
        return Program.model_validate(document.payload)

    def delete_active(self, now: Optional[datetime] = None) -> Optional[Program]:
        """
        Archive the active program into history and clear it.

        Returns:
            The archived program, or None when there was no active program
        """
        program = self.load_active()
        if program is None:
            return None

        archived = archive_program(program, now)
        self.db.add(
            ArchivedProgram(
                program_id=archived.id,
                distance=archived.distance.value,
                race_name=archived.race_name,
                archived_at=archived.archived_at,
                payload=archived.model_dump(mode="json"),
            )
        )
        self.db.query(StoredDocument).filter_by(key=ACTIVE_PROGRAM_KEY).delete()
        self.db.commit()
        logger.info("Archived program %s", archived.id)
        return archived

    def history(self) -> List[Program]:
        """Archived programs, newest first."""
        records = (
            self.db.query(ArchivedProgram)
            .order_by(ArchivedProgram.archived_at.desc(), ArchivedProgram.id.desc())
            .all()
        )
        return [Program.model_validate(record.payload) for record in records]

    def clear_history(self) -> int:
        count = self.db.query(ArchivedProgram).delete()
        self.db.commit()
        return count


# Database connection and session management


def get_database_url() -> str:
    """Database URL from RUNPLAN_DATABASE_URL, defaulting to a local SQLite file."""
    return os.environ.get("RUNPLAN_DATABASE_URL", DEFAULT_DATABASE_URL)


def get_engine(database_url: Optional[str] = None):
    """
    Create SQLAlchemy engine.

    Args:
        database_url: Database connection string (default: environment or SQLite file)

    Returns:
        SQLAlchemy Engine instance
    """
    return create_engine(database_url or get_database_url(), echo=False)


def get_session_factory(engine):
    """
    Create session factory.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        Session factory (sessionmaker)
    """
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_database(database_url: Optional[str] = None) -> Session:
    """
    Initialize database and create all tables.

    Args:
        database_url: Database connection string

    Returns:
        SQLAlchemy Session instance
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    SessionFactory = get_session_factory(engine)
    return SessionFactory()


def get_db_session():
    """
    Dependency for FastAPI to get database session.

    Yields:
        SQLAlchemy Session instance

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db_session)):
            ...
    """
    engine = get_engine()
    Base.metadata.create_all(engine)
    SessionFactory = get_session_factory(engine)
    db = SessionFactory()
    try:
        yield db
    finally:
        db.close()
