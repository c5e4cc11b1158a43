# user models — credentials, tokens, and the identity handed to the diary workspace

from typing import Optional, Literal
from pydantic import BaseModel, Field


# auth

class CredentialRequest(BaseModel):
    """email/password payload for both signup and login"""
    email: str = Field(..., min_length=1, description="user email address")
    password: str = Field(..., min_length=1, description="plaintext password")


class GoogleSignInRequest(BaseModel):
    id_token: str = Field(..., alias="idToken", min_length=1, description="google id token from the sign-in popup")

    model_config = {"populate_by_name": True}


class TokenResponse(BaseModel):
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    token_type: str = "bearer"

    model_config = {"populate_by_name": True}


# identity

class Identity(BaseModel):
    """the authenticated user record"""
    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    provider: Literal["password", "google"] = "password"

    model_config = {"populate_by_name": True}


class SessionStatus(BaseModel):
    state: Literal["loading", "authenticated", "anonymous"]
    user: Optional[Identity] = None
