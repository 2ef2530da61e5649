from typing import Annotated

from fastapi import APIRouter, Query

from app.api.dependencies import AuthContextDep, ProfileServiceDep
from app.models.profile.responses import UserListResponse, UserProfileResponse

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)

MAX_SEARCH_LENGTH = 100


@router.get("", response_model=UserListResponse)
async def list_users(
    context: AuthContextDep,
    profile_service: ProfileServiceDep,
    search: Annotated[str | None, Query(max_length=MAX_SEARCH_LENGTH)] = None,
    exclude_me: bool = True,
) -> UserListResponse:
    """List profiles that can receive kudos, optionally filtered by name or email."""
    profiles = profile_service.list_profiles(
        requester_id=context.user_id,
        search=search.strip() if search else None,
        exclude_me=exclude_me,
    )
    return UserListResponse(data=[UserProfileResponse.from_model(profile) for profile in profiles])
