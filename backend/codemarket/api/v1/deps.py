# codemarket/api/v1/deps.py
from fastapi import Depends, Header, HTTPException, Request, status
from codemarket.config import Settings
from codemarket.core.security import ACCESS_TOKEN_COOKIE, decode_access_token
from codemarket.core.storage import Storage
from codemarket.models.user import User
from codemarket.services.payment_base import PaymentGateway
from codemarket.services.verification import VerificationQueue

# ----------------------------------------------------------------------
# Collaborators built by create_app() and kept on app.state
# ----------------------------------------------------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_storage(request: Request) -> Storage:
    return request.app.state.storage

def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway

def get_verification_queue(request: Request) -> VerificationQueue:
    return request.app.state.verification_queue

async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
    storage: Storage = Depends(get_storage),
) -> User:
    """
    Resolve the calling account from its access token.

    The token is read from `Authorization: Bearer <jwt>` first and from
    the accessToken cookie when no header is sent.

    Raises:
        HTTPException (401): AUTH_REQUIRED when no token was sent,
            AUTH_INVALID_TOKEN when it fails to decode or has expired,
            AUTH_USER_NOT_FOUND when the account no longer exists
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except Exception:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")

    user = await storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_USER_NOT_FOUND")
    return user
