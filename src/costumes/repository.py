"""Costume registry models - return DTOs, never ORM models."""

from abc import ABC, abstractmethod
from functools import partial

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.costumes.dtos import CostumeDTO
from src.costumes.orm_models import Costume
from src.events.errors import ConflictError, UpstreamUnavailableError


class CostumeRepository(ABC):
    @abstractmethod
    async def list_costumes(self) -> list[CostumeDTO]:
        raise NotImplementedError

    @abstractmethod
    async def create_costume(
        self, name: str, description: str | None = None, image_url: str | None = None
    ) -> CostumeDTO:
        """Raises ConflictError when a costume with the same name exists."""
        raise NotImplementedError


def _to_dto(costume: Costume) -> CostumeDTO:
    return CostumeDTO(
        id=costume.uuid,
        name=costume.name,
        description=costume.description,
        image_url=costume.image_url,
    )


class SqlCostumeRepository(CostumeRepository):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self._session_overwrite = session_overwrite

    async def list_costumes(self) -> list[CostumeDTO]:
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                result = await session.execute(select(Costume).order_by(Costume.name))
                return [_to_dto(costume) for costume in result.scalars().all()]
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Costume registry unavailable") from e

    async def _find_by_name(self, session: AsyncSession, name: str) -> Costume | None:
        return await session.scalar(select(Costume).where(func.lower(Costume.name) == name.lower()))

    async def create_costume(
        self, name: str, description: str | None = None, image_url: str | None = None
    ) -> CostumeDTO:
        name = name.strip()
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                if await self._find_by_name(session, name) is not None:
                    raise ConflictError(f"Costume '{name}' already exists")

                costume = Costume(name=name, description=description, image_url=image_url)
                session.add(costume)
                await session.flush()
                return _to_dto(costume)
        except IntegrityError as e:
            # a concurrent create of the same name committed first
            raise ConflictError(f"Costume '{name}' already exists") from e
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Costume registry unavailable") from e
