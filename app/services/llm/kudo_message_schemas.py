"""
Schemas for kudo message completion: the caller-facing request/result and the
subset of the OpenRouter chat completion response that the service relies on.
"""
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


HASHTAG_PATTERN = r"^#[a-z0-9_]{2,30}$"

Hashtag = Annotated[str, StringConstraints(pattern=HASHTAG_PATTERN)]


class KudoTone(str, Enum):
    CELEBRATORY = "celebratory"
    GRATEFUL = "grateful"
    SUPPORTIVE = "supportive"
    PROFESSIONAL = "professional"


class MessageLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class KudoMessageRequest(BaseModel):
    """Input for generating a kudo message draft"""
    model_config = ConfigDict(frozen=True)

    recipient_label: str = Field(..., min_length=1, max_length=100, description="Who the kudo is for")
    highlight: str = Field(..., min_length=1, max_length=500, description="What the recipient did")
    tone: KudoTone = Field(KudoTone.GRATEFUL)
    length: MessageLength = Field(MessageLength.MEDIUM)


class CompletionOverrides(BaseModel):
    """Per-call sampling parameters. Unset fields are not sent upstream."""
    model_config = ConfigDict(frozen=True)

    model: str | None = Field(None, min_length=1)
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    top_p: float | None = Field(None, ge=0.0, le=1.0)
    max_completion_tokens: int | None = Field(None, gt=0)
    presence_penalty: float | None = Field(None, ge=-2.0, le=2.0)


class KudoMessageResult(BaseModel):
    """Validated output of a completion"""
    model_config = ConfigDict(frozen=True)

    message: str = Field(..., min_length=10, max_length=320)
    suggested_hashtags: list[Hashtag] = Field(default_factory=list, max_length=3)


class OpenRouterResponseMessage(BaseModel):
    role: str
    content: str | None = None


class OpenRouterChoice(BaseModel):
    message: OpenRouterResponseMessage
    finish_reason: str | None = None


class OpenRouterUsage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class OpenRouterChatResponse(BaseModel):
    id: str
    model: str
    choices: list[OpenRouterChoice]
    usage: OpenRouterUsage | None = None
