"""
Payment gateway factory.
Configures which gateway implementation order creation uses.
"""

from typing import Optional

from ticketing.services.interfaces.payment_gateway import PaymentGateway
from ticketing.services.interfaces.offline_gateway import OfflineGateway
from ticketing.services.razorpay_gateway import RazorpayGateway
from ticketing.core.config import get_settings


def build_gateway() -> PaymentGateway:
    """
    Build the configured gateway.

    PAYMENT_GATEWAY selects it:
    - "offline": local order ids (default)
    - "razorpay": Razorpay REST API
    """
    settings = get_settings()
    if settings.PAYMENT_GATEWAY == "razorpay":
        return RazorpayGateway(
            key_id=settings.PAYMENT_KEY_ID,
            key_secret=settings.PAYMENT_KEY_SECRET,
            base_url=settings.PAYMENT_API_URL,
            timeout=settings.PAYMENT_API_TIMEOUT,
        )
    return OfflineGateway(key_id=settings.PAYMENT_KEY_ID)


# Singleton instance
_gateway: Optional[PaymentGateway] = None


def get_gateway() -> PaymentGateway:
    """Get payment gateway singleton (FastAPI dependency)."""
    global _gateway
    if _gateway is None:
        _gateway = build_gateway()
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.close()
        _gateway = None
