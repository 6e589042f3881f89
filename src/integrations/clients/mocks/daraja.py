"""
Safaricom Daraja — MOCK clients.

⚠️  This is a mock implementation for development and testing.
    No network calls are made. The gateway acknowledges every STK push with
    a fresh CheckoutRequestID; the result notification never arrives unless
    it is posted to the callback endpoint by hand (or by a test).
"""

import logging
import uuid
from typing import Any, Dict, List

from src.error_handler import UpstreamSubmissionError
from src.integrations.contracts.interfaces import PaymentGateway, TokenProvider

logger = logging.getLogger(__name__)


class MockTokenProvider(TokenProvider):
    def __init__(self, token: str = "mock-access-token") -> None:
        self._token = token
        self.calls = 0

    async def get_access_token(self) -> str:
        self.calls += 1
        return self._token


class MockDarajaGateway(PaymentGateway):
    """
    Mock STK push gateway.

    Parameters
    ----------
    reject_with : str
        When set, every submission fails with this gateway error message.
    """

    def __init__(self, reject_with: str = "") -> None:
        self._reject_with = reject_with
        self.submissions: List[Dict[str, Any]] = []
        logger.info("[DARAJA MOCK] Gateway initialised")

    def _new_checkout_id(self) -> str:
        return f"ws_CO_{uuid.uuid4().hex[:20].upper()}"

    async def submit_stk_push(self, envelope: Dict[str, Any], token: str) -> Dict[str, Any]:
        self.submissions.append(dict(envelope))
        if self._reject_with:
            logger.info("[DARAJA MOCK] Rejecting STK push: %s", self._reject_with)
            raise UpstreamSubmissionError(self._reject_with)

        checkout_id = self._new_checkout_id()
        logger.info("[DARAJA MOCK] STK push accepted id=%s amount=%s", checkout_id, envelope.get("Amount"))
        return {
            "MerchantRequestID": f"{uuid.uuid4().int % 100000}-{uuid.uuid4().int % 10000000}-1",
            "CheckoutRequestID": checkout_id,
            "ResponseCode": "0",
            "ResponseDescription": "Success. Request accepted for processing",
            "CustomerMessage": "Success. Request accepted for processing",
        }
