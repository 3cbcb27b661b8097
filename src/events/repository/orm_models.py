import sqlalchemy as sa
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp, Versioned


class EventRow(Base, TimeStamp, Versioned):
    """An event stored as one versioned JSON document.

    ``name`` and ``is_archived`` are copies of document fields kept for
    ordering and filtering in SQL.
    """

    __tablename__ = TableNames.EVENTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    document: Mapped[dict] = mapped_column(sa.JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<EventRow {self.name} v{self.version}>"
