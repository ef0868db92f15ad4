# layout_service/entities.py
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy import DateTime, String, JSON

from layout_service.google_helpers import LAYOUT_TABLE

Base = declarative_base()


class LayoutRecord(Base):
    __tablename__ = LAYOUT_TABLE

    # "batch-<hex>" identifiers, see layout_store.generate_record_id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner: Mapped[str] = mapped_column(String, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # The validated Layout Document, stored verbatim
    payload: Mapped[list[dict[str, object]]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_item(self) -> dict:
        return {
            "id": self.id,
            "owner": self.owner,
            "tags": list(self.tags or []),
            "payload": self.payload,
        }
