from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints


class GenerateMessageRequest(BaseModel):
    prompt: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=200)] = Field(
        ...,
        description="What the recipient did; used as the highlight of the generated kudo",
    )
