from datetime import datetime

from pydantic import BaseModel

from app.models.kudo.models import KudoPage, KudoWithUsers
from app.models.profile.responses import UserProfileResponse


class KudoResponse(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    message: str
    created_at: datetime
    updated_at: datetime
    sender: UserProfileResponse
    recipient: UserProfileResponse

    @staticmethod
    def from_model(item: KudoWithUsers) -> "KudoResponse":
        return KudoResponse(
            id=item.kudo.id,
            sender_id=item.kudo.sender_id,
            recipient_id=item.kudo.recipient_id,
            message=item.kudo.message,
            created_at=item.kudo.created_at,
            updated_at=item.kudo.updated_at,
            sender=UserProfileResponse.from_model(item.sender),
            recipient=UserProfileResponse.from_model(item.recipient),
        )


class PaginationResponse(BaseModel):
    limit: int
    offset: int
    total: int


class KudoListResponse(BaseModel):
    data: list[KudoResponse]
    pagination: PaginationResponse

    @staticmethod
    def from_model(page: KudoPage) -> "KudoListResponse":
        return KudoListResponse(
            data=[KudoResponse.from_model(item) for item in page.items],
            pagination=PaginationResponse(limit=page.limit, offset=page.offset, total=page.total),
        )


class DeleteKudoResponse(BaseModel):
    message: str
    id: str
