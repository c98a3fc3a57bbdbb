from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import StorageError
from .models import Option, create_sqlite_engine, create_tables
from .store import OptionStore


class SQLiteOptionStore(OptionStore):
    """SQLite implementation of OptionStore."""

    def __init__(self, database_url: str = "sqlite:///geniewp.db", echo: bool = False):
        """Initialize SQLite store.

        Args:
            database_url: SQLAlchemy database URL
            echo: Whether to echo SQL statements (useful for debugging)
        """
        self.engine = create_sqlite_engine(database_url, echo)
        create_tables(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _get_session(self) -> Session:
        return self.SessionLocal()

    def get_option(self, name: str, default: Any = None) -> Any:
        try:
            with self._get_session() as session:
                row = session.get(Option, name)
                return row.value if row is not None else default
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read option {name}: {e}") from e

    def set_option(self, name: str, value: Any) -> None:
        try:
            with self._get_session() as session:
                row = session.get(Option, name)
                if row is None:
                    session.add(Option(name=name, value=value))
                else:
                    row.value = value
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not write option {name}: {e}") from e

    def delete_option(self, name: str) -> bool:
        try:
            with self._get_session() as session:
                row = session.get(Option, name)
                if row is None:
                    return False
                session.delete(row)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StorageError(f"Could not delete option {name}: {e}") from e


def create_sqlite_store(database_url: str = "sqlite:///geniewp.db", echo: bool = False) -> SQLiteOptionStore:
    """Create a SQLite option store instance"""
    return SQLiteOptionStore(database_url, echo)
