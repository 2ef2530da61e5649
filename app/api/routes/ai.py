from fastapi import APIRouter, status

from app.api.dependencies import AuthContextDep, MessageCompletionServiceDep
from app.api.errors import ErrorResponse
from app.models.ai.requests import GenerateMessageRequest
from app.models.ai.responses import GeneratedMessageResponse
from app.services.llm.kudo_message_schemas import KudoMessageRequest, KudoTone, MessageLength

router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
)

# The prompt is free text about the recipient's contribution; the recipient
# itself is chosen separately in the kudo form.
GENERIC_RECIPIENT_LABEL = "colleague"


@router.post(
    "/generate-message",
    response_model=GeneratedMessageResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def generate_message(
    request_body: GenerateMessageRequest,
    context: AuthContextDep,
    completion_service: MessageCompletionServiceDep,
) -> GeneratedMessageResponse:
    """
    Generate a kudo message draft from a short description.
    Completion failures are rendered by the error handlers; retryable ones
    come back as 503 AI_SERVICE_UNAVAILABLE.
    """
    result = await completion_service.complete(
        KudoMessageRequest(
            recipient_label=GENERIC_RECIPIENT_LABEL,
            highlight=request_body.prompt,
            tone=KudoTone.GRATEFUL,
            length=MessageLength.MEDIUM,
        )
    )

    return GeneratedMessageResponse(
        message=result.message,
        suggested_hashtags=list(result.suggested_hashtags),
    )
