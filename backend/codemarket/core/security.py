# codemarket/core/security.py
"""
Account credentials: Argon2 password hashes and signed access tokens.
"""
import datetime as dt
import os
from pathlib import Path

import jwt  # PyJWT
from dotenv import load_dotenv
from passlib.context import CryptContext

ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # override outside development
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
JWT_ALG = "HS256"

# Browser clients get the token in this HttpOnly cookie
ACCESS_TOKEN_COOKIE = "accessToken"

def hash_password(plain: str) -> str:
    """Salted Argon2 hash, safe to store in users.password_hash."""
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def create_access_token(user_id: int | str, role: str) -> str:
    """
    Sign an access token for a marketplace account.

    Args:
        user_id: Account id; JWT requires `sub` to be a string, so it is
            converted here and parsed back with int() on the way in
        role: "buyer", "seller" or "both"

    Returns:
        HS256 token with sub, role, iat and exp claims
    """
    issued = dt.datetime.now(dt.timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "iat": issued,
        "exp": issued + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALG)

def decode_access_token(token: str) -> dict:
    """
    Verify the signature and expiry of a token and return its claims.

    Raises:
        jwt.ExpiredSignatureError: Token is past its exp claim
        jwt.InvalidTokenError: Bad signature or malformed token
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
