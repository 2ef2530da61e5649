import logging
import uuid

from fastapi import status

from app.api.errors import ApiError, ErrorCode
from app.db.kudo_repo import KudoRepo
from app.db.profile_repo import ProfileRepo
from app.models.kudo.models import KudoPage, KudoWithUsers
from utils import not_none


LOGGER = logging.getLogger("kudos.board")


class KudoService:
    """Business rules for sending, listing and deleting kudos"""

    def __init__(self, kudo_repo: KudoRepo, profile_repo: ProfileRepo) -> None:
        self.kudo_repo = kudo_repo
        self.profile_repo = profile_repo

    def list_kudos(self, limit: int, offset: int) -> KudoPage:
        return self.kudo_repo.list_kudos(limit=limit, offset=offset)

    def create_kudo(self, sender_id: str, recipient_id: str, message: str) -> KudoWithUsers:
        if sender_id == recipient_id:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                ErrorCode.SELF_KUDO_NOT_ALLOWED,
                "You cannot send kudos to yourself.",
            )

        if self.profile_repo.get_profile_by_id(recipient_id) is None:
            raise ApiError(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_RECIPIENT, "Recipient does not exist.")

        kudo = self.kudo_repo.create_kudo(
            kudo_id=str(uuid.uuid4()),
            sender_id=sender_id,
            recipient_id=recipient_id,
            message=message,
        )
        LOGGER.info("Kudo created (id=%s, message_length=%d)", kudo.id, len(message))

        return not_none(self.kudo_repo.get_kudo_with_users(kudo.id), "created kudo")

    def delete_kudo(self, kudo_id: str, requester_id: str) -> str:
        """Delete a kudo. Only its sender may delete it."""
        kudo = self.kudo_repo.get_kudo_by_id(kudo_id)
        if kudo is None:
            raise ApiError(status.HTTP_404_NOT_FOUND, ErrorCode.KUDO_NOT_FOUND, "Kudo does not exist.")

        if kudo.sender_id != requester_id:
            raise ApiError(
                status.HTTP_403_FORBIDDEN,
                ErrorCode.FORBIDDEN,
                "You are not allowed to delete this kudo.",
                {"sender_id": kudo.sender_id, "requester_id": requester_id},
            )

        self.kudo_repo.delete_kudo(kudo_id)
        LOGGER.info("Kudo deleted (id=%s)", kudo_id)
        return kudo_id
