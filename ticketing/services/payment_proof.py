"""
Gateway payment signatures.

A successful checkout hands the client three values: the order id, the
payment id and the gateway's signature over them. The signature is
HMAC-SHA256 of ``"<order_id>|<payment_id>"`` keyed with the merchant's key
secret, hex encoded. Recomputing it here is the only proof of payment the
issuance path accepts; the gateway is never queried.
"""

import hashlib
import hmac
from dataclasses import dataclass

from fastapi import status

from ticketing.core.errors import ErrorCode, PaymentError


@dataclass(frozen=True)
class PaymentProof:
    order_id: str
    payment_id: str
    signature: str


def sign_payment(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(proof: PaymentProof, secret: str) -> None:
    """Raise PaymentError unless ``proof.signature`` is the gateway's signature."""
    if not (proof.order_id and proof.payment_id and proof.signature):
        raise PaymentError("Payment confirmation is incomplete", code=ErrorCode.PAYMENT_REQUIRED)

    expected = sign_payment(proof.order_id, proof.payment_id, secret)
    if not hmac.compare_digest(expected.encode("utf-8"), proof.signature.encode("utf-8")):
        raise PaymentError(
            "Invalid payment signature",
            code=ErrorCode.INVALID_PAYMENT_SIGNATURE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )
