from dataclasses import dataclass
from datetime import datetime


@dataclass
class Profile:
    id: str
    display_name: str
    email: str | None
    avatar_url: str | None
    created_at: datetime
    updated_at: datetime
