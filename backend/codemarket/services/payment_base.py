"""
Payment Gateway Abstract Interface

Provides a unified interface for payment providers. Purchases follow a
two-step protocol: create an intent for an amount, let the client pay it,
then retrieve the intent and only record the purchase once it succeeded.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional


SUCCEEDED = "succeeded"


@dataclass
class PaymentIntent:
    """A provider-side payment attempt"""
    id: str
    client_secret: str
    status: str  # requires_payment_method / processing / succeeded / canceled
    amount: Optional[int] = None  # Minor currency units (cents)
    currency: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED


def minor_units(price) -> int:
    """
    Convert a decimal price to minor currency units, rounding half up.

    e.g. Decimal("19.99") -> 1999, "0.005" -> 1
    """
    return int((Decimal(price) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway(ABC):
    """Payment Gateway Abstract Base Class"""

    @abstractmethod
    async def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentIntent:
        """
        Create a payment intent

        Parameters:
        - amount_minor_units: Amount in cents (or the currency's minor unit)
        - currency: ISO currency code, lower case (e.g., "usd")
        - metadata: Free-form string pairs stored with the intent

        Returns:
        - PaymentIntent: Contains the client secret handed to the browser
        """
        pass

    @abstractmethod
    async def retrieve(self, intent_id: str) -> PaymentIntent:
        """Fetch the current state of an intent"""
        pass

    @abstractmethod
    async def create_customer(self, email: str, name: str) -> str:
        """Register a customer with the provider and return its id"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., "Stub")"""
        pass
