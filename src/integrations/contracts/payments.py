"""
Payment contracts.

Defines the request/response structures for the STK push flow:
- the push-payment envelope submitted to the gateway
- the asynchronous result notification the gateway posts back
- the acknowledgment we always return to the notifier

These contracts are used by both:
- clients/mocks/daraja.py (fake gateway for development/testing)
- clients/real_http/daraja.py (real Daraja API calls)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from .interfaces import PaymentStatus

RESULT_CODE_SUCCESS = 0
RESULT_CODE_CANCELLED_BY_USER = 1032

# Fixed acknowledgment returned to the notifier, whatever the payment outcome.
CALLBACK_ACK: Dict[str, Any] = {"ResultCode": 0, "ResultDesc": "Accepted"}


# ---------------------------------------------------------------------------
# Outbound envelope
# ---------------------------------------------------------------------------


@dataclass
class StkPushEnvelope:
    """Body of a Lipa na M-Pesa Online (STK push) request."""
    BusinessShortCode: str
    Password: str
    Timestamp: str
    TransactionType: str
    Amount: int
    PartyA: str                          # payer (debited party)
    PartyB: str                          # receiving merchant account
    PhoneNumber: str                     # device that receives the prompt
    CallBackURL: str
    AccountReference: str
    TransactionDesc: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Inbound notification
# ---------------------------------------------------------------------------


class CallbackItem(BaseModel):
    Name: str
    Value: Any = None


class StkCallback(BaseModel):
    # Only CheckoutRequestID and ResultCode are required; the rest is read loosely.
    MerchantRequestID: Any = None
    CheckoutRequestID: str
    ResultCode: int
    ResultDesc: Optional[Any] = None
    CallbackMetadata: Any = None

    def description(self) -> Optional[str]:
        return None if self.ResultDesc is None else str(self.ResultDesc)

    def metadata(self) -> Dict[str, Any]:
        """Flatten the Name/Value item list into a dict, skipping unusable items."""
        items = self.CallbackMetadata.get("Item") if isinstance(self.CallbackMetadata, dict) else None
        if not isinstance(items, list):
            return {}
        flattened: Dict[str, Any] = {}
        for raw in items:
            try:
                item = CallbackItem.model_validate(raw)
            except ValidationError:
                continue
            flattened[item.Name] = item.Value
        return flattened


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def status_for_result_code(result_code: int) -> PaymentStatus:
    if result_code == RESULT_CODE_SUCCESS:
        return PaymentStatus.SUCCESS
    if result_code == RESULT_CODE_CANCELLED_BY_USER:
        return PaymentStatus.CANCELLED
    return PaymentStatus.FAILED
