from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_identity, get_journal_service
from app.api.models import UserResponse
from app.features.auth.keycloak import Identity
from app.features.journaling.service import JournalService

router = APIRouter(tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def current_user(
    identity: Identity = Depends(get_current_identity),
    service: JournalService = Depends(get_journal_service),
) -> UserResponse:
    """The caller's user record, created on first sight."""
    user = await service.resolve_user(identity)
    return UserResponse(id=user["id"], email=user.get("email"), name=user.get("name"))
