import uuid
from dataclasses import dataclass

from app.db.profile_repo import ProfileRepo
from app.models.profile.models import Profile
from app.services.api_key_service import ApiKeyService


@dataclass
class ProfileRegistrationResult:
    profile: Profile
    plaintext_key: str


class ProfileService:
    def __init__(self, profile_repo: ProfileRepo, api_key_service: ApiKeyService) -> None:
        self.profile_repo = profile_repo
        self.api_key_service = api_key_service

    def list_profiles(self, requester_id: str, search: str | None = None, exclude_me: bool = True) -> list[Profile]:
        return self.profile_repo.list_profiles(
            search=search,
            exclude_id=requester_id if exclude_me else None,
        )

    def register_profile(
        self,
        display_name: str,
        email: str | None = None,
        avatar_url: str | None = None,
    ) -> ProfileRegistrationResult:
        """Create a profile together with its first API key"""
        profile = self.profile_repo.create_profile(
            profile_id=str(uuid.uuid4()),
            display_name=display_name,
            email=email,
            avatar_url=avatar_url,
        )
        key = self.api_key_service.create_api_key(profile_id=profile.id, name="default")
        return ProfileRegistrationResult(profile=profile, plaintext_key=key.plaintext_key)
