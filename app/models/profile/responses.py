from pydantic import BaseModel

from app.models.profile.models import Profile


class UserProfileResponse(BaseModel):
    id: str
    display_name: str
    avatar_url: str | None
    email: str | None

    @staticmethod
    def from_model(profile: Profile) -> "UserProfileResponse":
        return UserProfileResponse(
            id=profile.id,
            display_name=profile.display_name,
            avatar_url=profile.avatar_url,
            email=profile.email,
        )


class UserListResponse(BaseModel):
    data: list[UserProfileResponse]
