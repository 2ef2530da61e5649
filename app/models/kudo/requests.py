from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints


class CreateKudoRequest(BaseModel):
    recipient_id: UUID = Field(..., description="Profile id of the recipient")
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)] = Field(
        ...,
        description="Kudo message (1-1000 characters after trimming)",
    )
