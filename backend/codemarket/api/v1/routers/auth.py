# codemarket/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from codemarket.api.v1.deps import get_current_user, get_storage
from codemarket.core.security import ACCESS_TOKEN_COOKIE, create_access_token, hash_password, verify_password
from codemarket.core.serializers import user_out
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.schemas.auth import LoginRequest, RegisterIn

router = APIRouter(tags=["auth"])

def _set_token_cookie(response: Response, user: User) -> str:
    token = create_access_token(user.id, user.role)
    response.set_cookie(ACCESS_TOKEN_COOKIE, token, httponly=True, secure=False, samesite="lax")
    return token

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, response: Response, storage: Storage = Depends(get_storage)):
    """
    Register a new marketplace account and log it in.

    Args:
        body: username, email, password, fullName and role
            (buyer, seller or both; defaults to buyer)

    Returns:
        dict: The created user (no password data). The access token is
        set as an HttpOnly cookie.

    Raises:
        HTTPException (400): Username or email already registered
    """
    if await storage.get_user_by_username(body.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if await storage.get_user_by_email(body.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    u = await storage.create_user({
        "username": body.username,
        "email": body.email,
        "password_hash": hash_password(body.password),
        "full_name": body.fullName,
        "role": body.role,
    })
    _set_token_cookie(response, u)
    return user_out(u)

@router.post("/login")
async def login(payload: LoginRequest, response: Response, storage: Storage = Depends(get_storage)):
    """
    Authenticate user and create access token.

    The token is returned in the response body and also set as an
    HttpOnly cookie for browser-based clients.

    Returns:
        dict: {"user": {...}, "accessToken": "<jwt>"}

    Raises:
        HTTPException (401): If credentials are invalid
    """
    user = await storage.get_user_by_username(payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
    token = _set_token_cookie(response, user)
    return {"user": user_out(user), "accessToken": token}

@router.post("/logout")
async def logout(response: Response):
    """
    Clear the access token cookie. The JWT itself stays valid until it expires.
    """
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return {"ok": True}

@router.get("/user")
async def current_user(user: User = Depends(get_current_user)):
    """Return the authenticated account."""
    return user_out(user)
