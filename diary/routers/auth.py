# auth router — signup, login, google sign-in, refresh, logout, session status
# each successful sign-in opens a diary workspace and binds the tokens to it

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from diary.dependencies import get_token_payload, get_workspace, security
from diary.models.user import CredentialRequest, GoogleSignInRequest, SessionStatus, TokenResponse
from diary.services.auth_service import decode_token, issue_session_tokens
from diary.services.db import Database, get_db
from diary.services.session import AuthError
from diary.state.registry import WorkspaceRegistry, get_registry
from diary.state.workspace import DiaryWorkspace

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., alias="refreshToken")

    model_config = {"populate_by_name": True}


def _tokens(user_id: str, session_id: str) -> TokenResponse:
    access, refresh = issue_session_tokens(user_id, session_id)
    return TokenResponse(accessToken=access, refreshToken=refresh)


async def _sign_in(registry: WorkspaceRegistry, db: Database, error_status: int, sign_in) -> TokenResponse:
    """open a workspace and run a sign-in against its session provider.
    the workspace is closed again if the sign-in fails for any reason."""
    workspace = await registry.open(db)
    try:
        identity = await sign_in(workspace.session)
    except AuthError as e:
        await registry.close(workspace.session_id)
        raise HTTPException(status_code=error_status, detail=e.message)
    except Exception as e:
        logger.error(f"Sign-in failed for session {workspace.session_id}: {e}")
        await registry.close(workspace.session_id)
        raise
    return _tokens(identity.id, workspace.session_id)


@router.post("/auth/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: CredentialRequest,
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """create an email/password account and sign it in"""
    return await _sign_in(
        registry, db, status.HTTP_400_BAD_REQUEST,
        lambda session: session.create_account(body.email, body.password),
    )


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    body: CredentialRequest,
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    return await _sign_in(
        registry, db, status.HTTP_401_UNAUTHORIZED,
        lambda session: session.sign_in_with_credential(body.email, body.password),
    )


@router.post("/auth/google", response_model=TokenResponse)
async def google_sign_in(
    body: GoogleSignInRequest,
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """sign in with a google id token, the account is created on first use"""
    return await _sign_in(
        registry, db, status.HTTP_401_UNAUTHORIZED,
        lambda session: session.sign_in_with_federated_provider("google", body.id_token),
    )


@router.post("/auth/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """new token pair for the same workspace session"""
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    workspace = await registry.resume(payload.get("sid", ""), payload.get("sub", ""), db)
    if workspace is None or workspace.identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has ended",
        )
    return _tokens(workspace.identity.id, workspace.session_id)


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    payload: dict = Depends(get_token_payload),
    workspace: DiaryWorkspace = Depends(get_workspace),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    await workspace.logout()
    await registry.end(payload["sid"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/session", response_model=SessionStatus)
async def session_status(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
    registry: WorkspaceRegistry = Depends(get_registry),
):
    """auth gate: loading, authenticated or anonymous"""
    if credentials is None:
        return SessionStatus(state="anonymous")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access" or not payload.get("sid"):
        return SessionStatus(state="anonymous")

    workspace = await registry.resume(payload["sid"], payload.get("sub", ""), db)
    if workspace is None:
        return SessionStatus(state="anonymous")
    return SessionStatus(state=workspace.status, user=workspace.identity)
