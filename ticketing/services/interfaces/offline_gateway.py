"""
Offline gateway - no network calls.
Order ids are generated locally; signatures are produced with the same
shared secret, so the full verify path can be exercised end to end.
"""

import uuid

from ticketing.services.interfaces.payment_gateway import GatewayOrder, PaymentGateway


class OfflineGateway(PaymentGateway):
    """
    Local order issuer.

    Use when:
    - Running without gateway credentials
    - Tests and load runs that must not reach the network
    """

    def __init__(self, key_id: str = "offline"):
        self._key_id = key_id

    @property
    def key_id(self) -> str:
        return self._key_id

    async def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        return GatewayOrder(id=f"order_{uuid.uuid4().hex[:20]}", amount=amount, currency=currency)
