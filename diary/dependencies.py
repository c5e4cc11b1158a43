# fastapi dependency injection
# resolves the bearer token to the caller's diary workspace

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from diary.services.auth_service import decode_token
from diary.services.db import Database, get_db
from diary.state.registry import WorkspaceRegistry, get_registry
from diary.state.workspace import DiaryWorkspace

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """extract and validate the access token claims"""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    if not payload.get("sub") or not payload.get("sid"):
        raise _unauthorized("Token missing subject or session")

    return payload


async def get_workspace(
    payload: dict = Depends(get_token_payload),
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
) -> DiaryWorkspace:
    """the signed-in workspace for this token, the diary is only reachable with an identity"""
    workspace = await registry.resume(payload["sid"], payload["sub"], db)
    if workspace is None or workspace.identity is None:
        raise _unauthorized("Not signed in")

    if workspace.identity.id != payload["sub"]:
        logger.warning(f"Session {payload['sid']} does not belong to user {payload['sub']}")
        raise _unauthorized("Session does not match token")

    return workspace
