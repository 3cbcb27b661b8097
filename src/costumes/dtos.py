from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class CostumeDTO:
    id: UUID
    name: str
    description: str | None = None
    image_url: str | None = None
