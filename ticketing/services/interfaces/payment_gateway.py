"""
Payment gateway interface.
Allows swapping between a real gateway and a local one without touching
ticket issuance.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrder:
    """Order handle returned to the client to open checkout."""

    id: str
    amount: int  # minor units
    currency: str


class PaymentGateway(ABC):
    """
    Interface for payment gateways.

    Implementations:
    - OfflineGateway: generates order ids locally (development, tests)
    - RazorpayGateway: creates orders through the Razorpay REST API

    Gateways only create orders. Confirming a payment never calls the
    gateway: the client returns the gateway's HMAC signature and
    ``payment_proof.verify_payment_signature`` checks it locally.
    """

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Public key the browser checkout widget is opened with."""

    @abstractmethod
    async def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        """
        Create a gateway order.

        Args:
            amount: Total in minor units (paise, cents)
            currency: ISO currency code
            receipt: Merchant reference shown in the gateway dashboard

        Raises:
            PaymentError: If the gateway rejects the order or is unreachable
        """
        pass

    async def close(self) -> None:
        """Release network resources, if any."""
