"""
Tests for gateway payment signature verification.
"""

import hashlib
import hmac

import pytest

from ticketing.core.errors import ErrorCode, PaymentError
from ticketing.services.payment_proof import PaymentProof, sign_payment, verify_payment_signature


def test_signature_is_hmac_sha256_of_order_and_payment():
    expected = hmac.new(b"s", b"o1|p1", hashlib.sha256).hexdigest()
    assert sign_payment("o1", "p1", "s") == expected


def test_valid_signature_accepted():
    proof = PaymentProof(order_id="o1", payment_id="p1", signature=sign_payment("o1", "p1", "s"))
    verify_payment_signature(proof, "s")


@pytest.mark.parametrize(
    "signature",
    [
        "deadbeef",
        sign_payment("o1", "p2", "s"),
        sign_payment("o1", "p1", "other-secret"),
        sign_payment("o1", "p1", "s").upper(),
        sign_payment("o1", "p1", "s") + " ",
    ],
)
def test_any_other_signature_rejected(signature):
    proof = PaymentProof(order_id="o1", payment_id="p1", signature=signature)
    with pytest.raises(PaymentError) as exc_info:
        verify_payment_signature(proof, "s")
    assert exc_info.value.code == ErrorCode.INVALID_PAYMENT_SIGNATURE
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize(
    "proof",
    [
        PaymentProof(order_id="", payment_id="p1", signature="x"),
        PaymentProof(order_id="o1", payment_id="", signature="x"),
        PaymentProof(order_id="o1", payment_id="p1", signature=""),
    ],
)
def test_incomplete_proof_requires_payment(proof):
    with pytest.raises(PaymentError) as exc_info:
        verify_payment_signature(proof, "s")
    assert exc_info.value.code == ErrorCode.PAYMENT_REQUIRED
    assert exc_info.value.status_code == 402


def test_non_ascii_signature_rejected():
    proof = PaymentProof(order_id="o1", payment_id="p1", signature="é" * 64)
    with pytest.raises(PaymentError):
        verify_payment_signature(proof, "s")
