from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp


class Costume(Base, TimeStamp):
    __tablename__ = TableNames.COSTUMES.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Costume {self.name}>"


# names are unique regardless of case
Index("ix_costumes_lower_name", func.lower(Costume.name), unique=True)
