# codemarket/schemas/marketplace.py
"""
Pydantic schemas for purchase, review, message and report endpoints.
Field names follow the JSON contract used by the frontend (camelCase).
"""
from typing import Optional
from pydantic import BaseModel, Field

class PaymentIntentIn(BaseModel):
    """Start paying for a project."""
    projectId: int

class ConfirmPurchaseIn(BaseModel):
    """Record a purchase once the payment intent has succeeded."""
    paymentIntentId: str = Field(min_length=1)
    projectId: int

class ReviewIn(BaseModel):
    """Rating (1-5) and optional comment by a buyer of the project."""
    projectId: int
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None

class MessageIn(BaseModel):
    projectId: int
    receiverId: int
    content: str = Field(min_length=1)

class ReportIn(BaseModel):
    """
    Abuse report. sellerId is accepted for compatibility; the stored seller
    is always the project's seller and a new report always starts as pending.
    """
    projectId: int
    sellerId: Optional[int] = None
    reason: str = Field(min_length=1, max_length=256)
    description: Optional[str] = None
