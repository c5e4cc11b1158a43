# session provider — who is signed in, and who wants to know when that changes
# email/password accounts live in the users collection, google accounts are upserted by email

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from bson import ObjectId
from bson.errors import InvalidId

from diary.config import settings
from diary.models.user import Identity
from diary.services.auth_service import hash_password, verify_password
from diary.services.federated import FederatedSignInError, GoogleTokenVerifier

logger = logging.getLogger(__name__)

GENERIC_AUTH_MESSAGE = "Something went wrong. Please try again."

AUTH_ERROR_MESSAGES = {
    "auth/email-already-in-use": "This email is already registered.",
    "auth/wrong-password": "Incorrect password.",
    "auth/user-not-found": "No account found with this email.",
    "auth/invalid-credential": "Invalid email or password.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/federated-sign-in-failed": "Google Sign In failed. Try again.",
}

IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]


def auth_error_message(code: str) -> str:
    """human readable message for an auth error code, generic for unknown codes"""
    return AUTH_ERROR_MESSAGES.get(code, GENERIC_AUTH_MESSAGE)


class AuthError(Exception):
    """credential or sign-in failure, carries a stable error code"""

    def __init__(self, code: str):
        self.code = code
        self.message = auth_error_message(code)
        super().__init__(self.message)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def user_to_identity(doc: dict) -> Identity:
    """convert a mongodb user document to an identity"""
    return Identity(
        id=str(doc["_id"]),
        displayName=doc.get("display_name"),
        email=doc.get("email"),
        photoURL=doc.get("photo_url"),
        provider=doc.get("provider", "password"),
    )


class SessionProvider:
    """holds the current identity for one client and notifies subscribers on change"""

    def __init__(self, db, verifier: Optional[GoogleTokenVerifier] = None):
        self._db = db
        self._verifier = verifier or GoogleTokenVerifier()
        self._listeners: list[IdentityListener] = []
        self.current_identity: Optional[Identity] = None

    def subscribe(self, on_change: IdentityListener) -> Callable[[], None]:
        self._listeners.append(on_change)

        def unsubscribe():
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    async def _emit(self, identity: Optional[Identity]):
        self.current_identity = identity
        for listener in list(self._listeners):
            try:
                await listener(identity)
            except Exception as e:
                logger.exception(f"Identity listener failed: {e}")

    async def restore(self, user_id: Optional[str]) -> Optional[Identity]:
        """initial identity check, resolves a user id from a bearer token"""
        identity = None
        if user_id:
            try:
                doc = await self._db.users.find_one({"_id": ObjectId(user_id)})
            except InvalidId:
                doc = None
            if doc:
                identity = user_to_identity(doc)
            else:
                logger.warning(f"Session restore found no user for id {user_id}")
        await self._emit(identity)
        return identity

    async def create_account(self, email: str, password: str) -> Identity:
        """register an email/password account and sign it in"""
        email = _normalize_email(email)
        if "@" not in email:
            raise AuthError("auth/invalid-email")
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise AuthError("auth/weak-password")

        existing = await self._db.users.find_one({"email": email})
        if existing:
            raise AuthError("auth/email-already-in-use")

        doc = {
            "email": email,
            "hashed_password": hash_password(password),
            "display_name": None,
            "photo_url": None,
            "provider": "password",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        result = await self._db.users.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Account created: {email}")

        identity = user_to_identity(doc)
        await self._emit(identity)
        return identity

    async def sign_in_with_credential(self, email: str, password: str) -> Identity:
        email = _normalize_email(email)
        user = await self._db.users.find_one({"email": email})
        if not user:
            raise AuthError("auth/user-not-found")

        hashed = user.get("hashed_password")
        if not hashed:
            # google-only account, there is no password to check
            raise AuthError("auth/invalid-credential")
        if not verify_password(password, hashed):
            raise AuthError("auth/wrong-password")

        identity = user_to_identity(user)
        logger.info(f"Signed in: {email}")
        await self._emit(identity)
        return identity

    async def sign_in_with_federated_provider(self, provider: str, id_token: str) -> Identity:
        """sign in with a third-party id token, creating the account on first use"""
        if provider != "google":
            raise AuthError("auth/operation-not-allowed")

        try:
            claims = await self._verifier.verify(id_token)
        except FederatedSignInError as e:
            logger.warning(f"Federated sign-in failed: {e}")
            raise AuthError("auth/federated-sign-in-failed") from e

        email = _normalize_email(claims["email"])
        profile = {
            "display_name": claims.get("name"),
            "photo_url": claims.get("picture"),
            "google_sub": claims.get("sub"),
        }

        user = await self._db.users.find_one({"email": email})
        if user:
            await self._db.users.update_one({"_id": user["_id"]}, {"$set": profile})
            user.update(profile)
        else:
            user = {
                "email": email,
                "hashed_password": None,
                "provider": "google",
                "created_at": datetime.now(timezone.utc).isoformat(),
                **profile,
            }
            result = await self._db.users.insert_one(user)
            user["_id"] = result.inserted_id
            logger.info(f"Account created via google: {email}")

        identity = user_to_identity(user)
        await self._emit(identity)
        return identity

    async def sign_out(self):
        if self.current_identity is not None:
            logger.info(f"Signed out: {self.current_identity.email}")
        await self._emit(None)
