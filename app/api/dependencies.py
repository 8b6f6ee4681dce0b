from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.features.auth.keycloak import Identity, KeycloakTokenVerifier
from app.features.journaling.service import JournalService
from app.shared.errors import AuthError

_bearer = HTTPBearer(auto_error=False)


def get_journal_service(request: Request) -> JournalService:
    """The journal service built at startup."""
    return request.app.state.journal_service


def get_token_verifier(request: Request) -> KeycloakTokenVerifier:
    """The token verifier built at startup."""
    return request.app.state.token_verifier


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    verifier: KeycloakTokenVerifier = Depends(get_token_verifier),
) -> Identity:
    """Verified identity of the caller; 401 without a token, 403 for a bad one."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    return await verifier.verify(credentials.credentials)
