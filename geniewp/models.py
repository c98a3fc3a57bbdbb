from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, String, create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Option(Base):
    __tablename__ = "options"

    name = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


def create_sqlite_engine(database_url: str = "sqlite:///geniewp.db", echo: bool = False):
    """Create SQLite engine usable from FastAPI's worker threads"""
    engine = create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})
    return engine


def create_tables(engine):
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
