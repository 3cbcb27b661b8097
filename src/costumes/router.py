from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.costumes.repository import CostumeRepository, SqlCostumeRepository
from src.identity.auth import get_current_actor
from src.identity.dtos import Actor

router = APIRouter()

COSTUMES_URL = "/api/private/costumes"


class CostumeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)


class CostumeResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    image_url: str | None = None


def get_costume_repository() -> CostumeRepository:
    """Dependency to get costume repository instance."""
    return SqlCostumeRepository()


@router.get(COSTUMES_URL, response_model=list[CostumeResponse])
async def list_costumes(
    actor: Actor = Depends(get_current_actor),
    repository: CostumeRepository = Depends(get_costume_repository),
) -> list[CostumeResponse]:
    costumes = await repository.list_costumes()
    return [
        CostumeResponse(
            id=str(costume.id),
            name=costume.name,
            description=costume.description,
            image_url=costume.image_url,
        )
        for costume in costumes
    ]


@router.post(COSTUMES_URL, response_model=CostumeResponse, status_code=201)
async def create_costume(
    request: CostumeCreate,
    actor: Actor = Depends(get_current_actor),
    repository: CostumeRepository = Depends(get_costume_repository),
) -> CostumeResponse:
    """Register a costume so members can pick it when signing up."""
    costume = await repository.create_costume(
        name=request.name,
        description=request.description,
        image_url=request.image_url,
    )
    return CostumeResponse(
        id=str(costume.id),
        name=costume.name,
        description=costume.description,
        image_url=costume.image_url,
    )
