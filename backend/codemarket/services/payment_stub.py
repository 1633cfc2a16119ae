"""
In-memory payment gateway used until a real provider is integrated.
"""
import logging
import secrets
from typing import Dict, Optional

from .payment_base import PaymentGateway, PaymentIntent, SUCCEEDED

logger = logging.getLogger("uvicorn.error")


class StubPaymentGateway(PaymentGateway):
    """
    Payment gateway that never talks to a provider.

    Intents are kept in memory and start as "requires_payment_method".
    With auto_succeed (development default) every retrieved intent reports
    "succeeded", including ids this process never issued. Without it the
    stored status is returned until mark_succeeded() is called.
    """

    def __init__(self, auto_succeed: bool = True):
        self.auto_succeed = auto_succeed
        self._intents: Dict[str, PaymentIntent] = {}
        self._customers: Dict[str, str] = {}

    @property
    def name(self) -> str:
        return "Stub"

    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentIntent:
        intent_id = f"pi_stub_{secrets.token_hex(8)}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{secrets.token_hex(8)}",
            status="requires_payment_method",
            amount=amount_minor_units,
            currency=currency,
            metadata=dict(metadata or {}),
        )
        self._intents[intent_id] = intent
        logger.info("[payment] stub intent %s amount=%s %s", intent_id, amount_minor_units, currency)
        return intent

    async def retrieve(self, intent_id: str) -> PaymentIntent:
        intent = self._intents.get(intent_id)
        if self.auto_succeed:
            if intent is None:
                return PaymentIntent(id=intent_id, client_secret="", status=SUCCEEDED)
            intent.status = SUCCEEDED
            return intent
        if intent is None:
            raise LookupError(f"No such payment intent: {intent_id}")
        return intent

    def mark_succeeded(self, intent_id: str) -> None:
        self._intents[intent_id].status = SUCCEEDED

    async def create_customer(self, email: str, name: str) -> str:
        customer_id = self._customers.get(email)
        if customer_id is None:
            customer_id = f"cus_stub_{secrets.token_hex(6)}"
            self._customers[email] = customer_id
        return customer_id
