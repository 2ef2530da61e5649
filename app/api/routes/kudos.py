from uuid import UUID

from fastapi import APIRouter, Query, status

from app.api.dependencies import AuthContextDep, KudoServiceDep
from app.models.kudo.requests import CreateKudoRequest
from app.models.kudo.responses import DeleteKudoResponse, KudoListResponse, KudoResponse

router = APIRouter(
    prefix="/api/kudos",
    tags=["kudos"],
)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


@router.get("", response_model=KudoListResponse)
async def list_kudos(
    context: AuthContextDep,
    kudo_service: KudoServiceDep,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
) -> KudoListResponse:
    """List kudos, newest first."""
    page = kudo_service.list_kudos(limit=limit, offset=offset)
    return KudoListResponse.from_model(page)


@router.post("", response_model=KudoResponse, status_code=status.HTTP_201_CREATED)
async def create_kudo(
    request_body: CreateKudoRequest,
    context: AuthContextDep,
    kudo_service: KudoServiceDep,
) -> KudoResponse:
    """Send a kudo from the authenticated user to `recipient_id`."""
    created = kudo_service.create_kudo(
        sender_id=context.user_id,
        recipient_id=str(request_body.recipient_id),
        message=request_body.message,
    )
    return KudoResponse.from_model(created)


@router.delete("/{id}", response_model=DeleteKudoResponse)
async def delete_kudo(
    id: UUID,
    context: AuthContextDep,
    kudo_service: KudoServiceDep,
) -> DeleteKudoResponse:
    """Delete a kudo. Only the sender can delete it."""
    deleted_id = kudo_service.delete_kudo(kudo_id=str(id), requester_id=context.user_id)
    return DeleteKudoResponse(message="Kudo deleted successfully.", id=deleted_id)
