# layout_service/layout_store.py

import logging
from typing import Any, Iterable, List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from layout_service.entities import Base, LayoutRecord
from layout_service.google_helpers import DEFAULT_OWNER, DEFAULT_TAGS

logger = logging.getLogger("layout_service")


class LayoutStoreError(Exception):
    """Raised when the backing database fails to read or write a record."""


def generate_record_id() -> str:
    return f"batch-{uuid4().hex}"


class LayoutStore:
    """
    Persists validated Layout Documents, one row per document.

    - Each store() is a single insert + commit; no cross-record transactions.
    - Records are immutable once written.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def create_tables(self) -> None:
        engine = self.session_factory.kw["bind"]
        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            logger.exception("Failed to create layout tables")
            raise LayoutStoreError(f"{type(e).__name__}: could not create layout tables") from e

    def store(
        self,
        document: List[dict[str, Any]],
        *,
        owner: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> dict:
        """
        Write an already validated document and return the stored record
        {id, owner, tags, payload}.
        """
        record = LayoutRecord(
            id=generate_record_id(),
            owner=owner or DEFAULT_OWNER,
            tags=list(tags) if tags is not None else list(DEFAULT_TAGS),
            payload=document,
        )
        item = record.to_item()

        session: Session = self.session_factory()
        try:
            session.add(record)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception(f"Failed to store layout {item['id']}")
            raise LayoutStoreError(f"{type(e).__name__}: could not store layout") from e
        finally:
            session.close()

        logger.info(f"Stored layout {item['id']} for owner '{item['owner']}'")
        return item

    def retrieve_all(self) -> List[dict]:
        """Full scan. Returns [] when nothing is stored."""
        session: Session = self.session_factory()
        try:
            rows = session.query(LayoutRecord).all()
            return [row.to_item() for row in rows]
        except SQLAlchemyError as e:
            logger.exception("Failed to retrieve layouts")
            raise LayoutStoreError(f"{type(e).__name__}: could not retrieve layouts") from e
        finally:
            session.close()
