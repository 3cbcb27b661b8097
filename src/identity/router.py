from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.events.errors import ForbiddenError
from src.identity.auth import get_current_actor, require_permission
from src.identity.directory import ProfileDirectory, get_profile_directory
from src.identity.dtos import Actor, Profile
from src.identity.permissions import MANAGE_EVENTS
from src.identity.urls import USER_URL, USERS_URL

router = APIRouter()


class ProfileResponse(BaseModel):
    user_id: str
    email: str | None = None
    email_verified: bool
    username: str | None = None
    permissions: list[str]
    user_metadata: dict

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            user_id=profile.user_id,
            email=profile.email,
            email_verified=profile.email_verified,
            username=profile.username,
            permissions=sorted(profile.permissions),
            user_metadata=profile.user_metadata,
        )


class UpdateProfileRequest(BaseModel):
    user_metadata: dict


@router.get(USERS_URL, response_model=list[ProfileResponse])
async def list_users(
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    directory: ProfileDirectory = Depends(get_profile_directory),
) -> list[ProfileResponse]:
    """List member profiles from the identity provider."""
    profiles = await directory.list_all_profiles()
    return [ProfileResponse.from_profile(profile) for profile in profiles]


@router.get(USER_URL, response_model=ProfileResponse)
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    directory: ProfileDirectory = Depends(get_profile_directory),
) -> ProfileResponse:
    if actor.identity != user_id and not actor.has_permission(MANAGE_EVENTS):
        raise ForbiddenError("You can only view your own profile")
    return ProfileResponse.from_profile(await directory.get_profile(user_id))


@router.patch(USER_URL, response_model=ProfileResponse)
async def update_user(
    user_id: str,
    request: UpdateProfileRequest,
    actor: Actor = Depends(get_current_actor),
    directory: ProfileDirectory = Depends(get_profile_directory),
) -> ProfileResponse:
    """Update the caller's own user metadata."""
    if actor.identity != user_id:
        raise ForbiddenError("You can only update your own profile")
    profile = await directory.update_profile(user_id, request.user_metadata)
    return ProfileResponse.from_profile(profile)
