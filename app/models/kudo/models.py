from dataclasses import dataclass
from datetime import datetime

from app.models.profile.models import Profile


@dataclass
class Kudo:
    id: str
    sender_id: str
    recipient_id: str
    message: str
    created_at: datetime
    updated_at: datetime


@dataclass
class KudoWithUsers:
    """Kudo joined with sender and recipient profiles"""
    kudo: Kudo
    sender: Profile
    recipient: Profile


@dataclass
class KudoPage:
    items: list[KudoWithUsers]
    limit: int
    offset: int
    total: int
