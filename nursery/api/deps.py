"""Shared dependencies: Firebase ID token auth, profiles, permissions, snapshot."""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nursery.db import DataStore, get_store
from nursery.errors import AuthError
from nursery.models.user import CurrentUser as CurrentUserModel
from nursery.models.user import UserProfile, UserRole
from nursery.rbac import ACTION_BY_METHOD, has_permission
from nursery.services.clock import local_today
from nursery.services.identity import IdentityProvider, get_identity
from nursery.services.snapshot import NurserySnapshot, load_snapshot

security = HTTPBearer(auto_error=False)

Store = Annotated[DataStore, Depends(get_store)]
Identity = Annotated[IdentityProvider, Depends(get_identity)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: Store,
    identity: Identity,
) -> CurrentUserModel:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = await identity.verify_token(credentials.credentials)
    except AuthError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    raw = await store.get(f"users/{claims['uid']}")
    if not raw:
        raise HTTPException(status_code=403, detail="No profile is linked to this account")
    profile = UserProfile.model_validate(raw)
    return CurrentUserModel(uid=claims["uid"], email=claims["email"], role=profile.role, link_id=profile.link_id)


def require_roles(*allowed: UserRole):
    async def checker(user: Annotated[CurrentUserModel, Depends(get_current_user)]):
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def require_module_permission(module: str):
    async def checker(
        request: Request,
        user: Annotated[CurrentUserModel, Depends(get_current_user)],
    ):
        method = request.method.upper()
        action = ACTION_BY_METHOD.get(method)
        if not action:
            raise HTTPException(status_code=405, detail=f"Unsupported method for permission check: {method}")
        if not has_permission(user.role.value, module, action):
            raise HTTPException(status_code=403, detail=f"Missing {module}.{action} permission")
        return user

    return checker


async def get_snapshot(store: Store) -> NurserySnapshot:
    """Fresh snapshot for this request (overdue promotion applied)."""
    return await load_snapshot(store, local_today())


# Type aliases for route injection
CurrentUser = Annotated[CurrentUserModel, Depends(get_current_user)]
AdminOnly = Annotated[CurrentUserModel, Depends(require_roles(UserRole.ADMIN))]
StaffOnly = Annotated[CurrentUserModel, Depends(require_roles(UserRole.STAFF))]
ParentOnly = Annotated[CurrentUserModel, Depends(require_roles(UserRole.PARENT))]
Snapshot = Annotated[NurserySnapshot, Depends(get_snapshot)]
