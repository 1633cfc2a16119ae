# codemarket/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for registration and login.
"""
from typing import Literal
from pydantic import BaseModel, Field

class RegisterIn(BaseModel):
    """
    Request model for account registration.
    Username and email must be unique; the password is hashed server-side.
    """
    username: str = Field(min_length=1, max_length=256)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=256)
    password: str = Field(min_length=1)
    fullName: str = Field(min_length=1, max_length=256)
    role: Literal["buyer", "seller", "both"] = "buyer"

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    """
    username: str  # User login name
    password: str  # Plain text password, compared against the stored hash
