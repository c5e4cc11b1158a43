# federated sign-in — verifies google id tokens against google's published signing keys
# keys are fetched with httpx and cached until a verification fails

import logging
from typing import Optional

import httpx
from jose import JWTError, jwt

from diary.config import settings

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class FederatedSignInError(Exception):
    """the id token could not be verified"""


class GoogleTokenVerifier:
    """verify google id tokens and return their claims"""

    def __init__(
        self,
        client_id: Optional[str] = None,
        certs_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.certs_url = certs_url or settings.GOOGLE_CERTS_URL
        self._transport = transport
        self._keys: Optional[dict] = None

    async def _fetch_keys(self) -> dict:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
                resp = await client.get(self.certs_url)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as e:
            logger.error(f"Could not fetch google signing keys: {e}")
            raise FederatedSignInError("signing keys unavailable") from e

    async def verify(self, id_token: str) -> dict:
        if not self.client_id:
            raise FederatedSignInError("google sign-in is not configured")

        if self._keys is None:
            self._keys = await self._fetch_keys()

        try:
            claims = jwt.decode(
                id_token,
                self._keys,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"verify_at_hash": False},
            )
        except JWTError as e:
            # google rotates keys, refetch on the next attempt
            self._keys = None
            logger.warning(f"Google id token rejected: {e}")
            raise FederatedSignInError(str(e)) from e

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise FederatedSignInError(f"unexpected issuer: {claims.get('iss')}")
        if not claims.get("email"):
            raise FederatedSignInError("token has no email claim")
        return claims
