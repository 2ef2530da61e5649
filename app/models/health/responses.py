from datetime import datetime
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str
    ai_configured: bool = Field(..., description="Whether an OpenRouter API key is set")
    timestamp: datetime
