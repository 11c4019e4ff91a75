"""Firebase-backed sign-in / sign-out and the caller's profile."""
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from nursery.api.deps import CurrentUser, Identity
from nursery.errors import AuthError

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, identity: Identity):
    try:
        session = await identity.sign_in(req.email, req.password)
    except AuthError as e:
        if e.code == "invalid-credential":
            raise HTTPException(status_code=401, detail="Invalid email or password")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sign-in failed, please try again")
    return TokenResponse(
        id_token=session["id_token"],
        refresh_token=session["refresh_token"],
        expires_in=session["expires_in"],
    )


@router.post("/logout", status_code=204)
async def logout(user: CurrentUser, identity: Identity):
    """Revoke the caller's refresh tokens so existing sessions end."""
    try:
        await identity.sign_out(user.uid)
    except AuthError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Sign-out failed")


@router.get("/me")
async def me(user: CurrentUser):
    return {
        "uid": user.uid,
        "email": user.email,
        "role": user.role.value,
        "link_id": user.link_id,
    }
