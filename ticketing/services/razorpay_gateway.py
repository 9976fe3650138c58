"""
Razorpay order creation over the public REST API.
Implements PaymentGateway using httpx.

Only order creation talks to Razorpay. Payment confirmation is the
client-returned signature, verified locally with the key secret, so a
gateway outage can delay checkout but can never let an unpaid ticket in.
"""

from typing import Optional

import httpx

from ticketing.core.errors import ErrorCode, PaymentError
from ticketing.core.logging import get_logger
from ticketing.services.interfaces.payment_gateway import GatewayOrder, PaymentGateway

logger = get_logger(__name__)


class RazorpayGateway(PaymentGateway):
    """Creates orders with HTTP basic auth (key id / key secret)."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._key_id = key_id
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
        )

    @property
    def key_id(self) -> str:
        return self._key_id

    async def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        try:
            response = await self._client.post(
                "/orders",
                json={"amount": amount, "currency": currency, "receipt": receipt},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "gateway_order_rejected",
                status_code=e.response.status_code,
                receipt=receipt,
            )
            raise PaymentError(
                "Payment gateway rejected the order",
                code=ErrorCode.GATEWAY_UNAVAILABLE,
                status_code=502,
            ) from e
        except httpx.HTTPError as e:
            logger.error("gateway_unreachable", error=str(e), receipt=receipt)
            raise PaymentError(
                "Payment gateway is unavailable",
                code=ErrorCode.GATEWAY_UNAVAILABLE,
                status_code=503,
            ) from e

        body = response.json()
        logger.info("gateway_order_created", order_id=body["id"], amount=amount, receipt=receipt)
        return GatewayOrder(
            id=body["id"],
            amount=int(body.get("amount", amount)),
            currency=body.get("currency", currency),
        )

    async def close(self) -> None:
        await self._client.aclose()
