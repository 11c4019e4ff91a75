"""Firebase Authentication: identity creation, ID token checks, password sign-in."""
import asyncio
import logging
from typing import Optional, Protocol

import firebase_admin
import httpx
from firebase_admin import auth, exceptions

from nursery.config import settings
from nursery.errors import AuthError

logger = logging.getLogger(__name__)

_INVALID_SIGN_IN = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "USER_DISABLED",
    "INVALID_EMAIL",
}


class IdentityProvider(Protocol):
    async def create_identity(self, email: str, password: str) -> str: ...

    async def verify_token(self, id_token: str) -> dict: ...

    async def sign_in(self, email: str, password: str) -> dict: ...

    async def sign_out(self, uid: str) -> None: ...

    async def get_uid_by_email(self, email: str) -> Optional[str]: ...


class FirebaseIdentity:
    """IdentityProvider backed by firebase_admin.auth and the Identity Toolkit REST API."""

    def __init__(self, app: firebase_admin.App):
        self._app = app

    async def create_identity(self, email: str, password: str) -> str:
        try:
            record = await asyncio.to_thread(auth.create_user, email=email, password=password, app=self._app)
        except auth.EmailAlreadyExistsError as e:
            raise AuthError("email-in-use", f"{email} is already registered") from e
        except (exceptions.FirebaseError, ValueError) as e:
            raise AuthError("other", str(e)) from e
        return record.uid

    async def verify_token(self, id_token: str) -> dict:
        try:
            claims = await asyncio.to_thread(auth.verify_id_token, id_token, app=self._app, check_revoked=True)
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError, auth.UserDisabledError) as e:
            raise AuthError("invalid-credential", str(e)) from e
        except (exceptions.FirebaseError, ValueError) as e:
            raise AuthError("other", str(e)) from e
        return {"uid": claims["uid"], "email": claims.get("email", "")}

    async def sign_in(self, email: str, password: str) -> dict:
        url = f"{settings.firebase_auth_url}/accounts:signInWithPassword"
        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.post(url, params={"key": settings.firebase_web_api_key}, json=payload)
        except httpx.HTTPError as e:
            raise AuthError("other", f"sign-in request failed: {e}") from e
        if resp.status_code == 200:
            body = resp.json()
            return {
                "uid": body["localId"],
                "id_token": body["idToken"],
                "refresh_token": body["refreshToken"],
                "expires_in": int(body.get("expiresIn", 3600)),
            }
        try:
            reason = resp.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            reason = resp.text
        if reason.split(" ")[0] in _INVALID_SIGN_IN:
            raise AuthError("invalid-credential", reason)
        raise AuthError("other", reason)

    async def sign_out(self, uid: str) -> None:
        try:
            await asyncio.to_thread(auth.revoke_refresh_tokens, uid, app=self._app)
        except exceptions.FirebaseError as e:
            raise AuthError("other", str(e)) from e

    async def get_uid_by_email(self, email: str) -> Optional[str]:
        try:
            record = await asyncio.to_thread(auth.get_user_by_email, email, app=self._app)
        except auth.UserNotFoundError:
            return None
        except exceptions.FirebaseError as e:
            raise AuthError("other", str(e)) from e
        return record.uid


_identity: Optional[FirebaseIdentity] = None


def get_identity() -> IdentityProvider:
    global _identity
    if _identity is None:
        from nursery.db import get_firebase_app

        _identity = FirebaseIdentity(get_firebase_app())
    return _identity
