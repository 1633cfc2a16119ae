# codemarket/api/v1/routers/purchases.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from codemarket.api.v1.deps import get_current_user, get_payment_gateway, get_settings, get_storage
from codemarket.config import Settings
from codemarket.core.serializers import purchase_out
from codemarket.core.storage import DuplicatePurchaseError, Storage
from codemarket.models.user import User
from codemarket.schemas.marketplace import ConfirmPurchaseIn, PaymentIntentIn
from codemarket.services.payment_base import PaymentGateway, minor_units

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["purchases"])


@router.post("/create-payment-intent")
async def create_payment_intent(
    body: PaymentIntentIn,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Start paying for a project.

    The amount is the project price in minor currency units. The caller is
    registered as a customer with the provider on their first payment.

    Returns:
        dict: {"clientSecret": str, "paymentIntentId": str}

    Raises:
        HTTPException (400): Caller already purchased the project
        HTTPException (404): If project does not exist
    """
    project = await storage.get_project(body.projectId)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if await storage.get_purchase(user.id, project.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project already purchased")

    if not user.payment_customer_id:
        customer_id = await gateway.create_customer(user.email, user.full_name)
        await storage.update_payment_customer_id(user.id, customer_id)

    intent = await gateway.create_intent(
        minor_units(project.price),
        settings.payment_currency,
        {"projectId": str(project.id), "buyerId": str(user.id)},
    )
    return {"clientSecret": intent.client_secret, "paymentIntentId": intent.id}


@router.post("/confirm-purchase")
async def confirm_purchase(
    body: ConfirmPurchaseIn,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Record a purchase after the provider reports the payment as succeeded.

    Returns:
        dict: {"purchase": {...}, "downloadUrl": str}

    Raises:
        HTTPException (400): Payment not completed, not for this project/buyer,
            or project already purchased
        HTTPException (404): If project does not exist
    """
    try:
        intent = await gateway.retrieve(body.paymentIntentId)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment not completed")
    if not intent.succeeded:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment not completed")
    expected = {"projectId": str(body.projectId), "buyerId": str(user.id)}
    if any(intent.metadata.get(k, v) != v for k, v in expected.items()):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment does not match this purchase")

    project = await storage.get_project(body.projectId)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    try:
        purchase = await storage.create_purchase({
            "buyer_id": user.id,
            "project_id": project.id,
            "amount": project.price,
            "payment_intent_id": body.paymentIntentId,
        })
    except DuplicatePurchaseError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project already purchased")
    logger.info("[purchase] user %s bought project %s", user.id, project.id)
    return {"purchase": purchase_out(purchase), "downloadUrl": project.code_file_url}


@router.get("/purchases")
async def list_purchases(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """Purchases of the caller, newest first, with the project nested."""
    return await storage.get_user_purchases(user.id)


@router.get("/purchases/{project_id}")
async def purchase_status(
    project_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Whether the caller owns the project.

    Returns:
        dict: {"purchased": bool, "purchase": {...} | None}
    """
    purchase = await storage.get_purchase(user.id, project_id)
    return {"purchased": purchase is not None, "purchase": purchase_out(purchase) if purchase else None}
