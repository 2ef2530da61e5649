from pydantic import BaseModel, Field


class GeneratedMessageResponse(BaseModel):
    message: str
    suggested_hashtags: list[str] = Field(default_factory=list)
