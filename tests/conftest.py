"""Pytest fixtures for the STK push payment flow."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from src.database.redis import PaymentStore
from src.error_handler import UpstreamAuthError
from src.integrations.clients.real_http.daraja import DarajaEnvelopeBuilder
from src.integrations.contracts.interfaces import PaymentGateway, TokenProvider
from src.integrations.policy.payment_service import PaymentServices
from src.utils.config_loader import PaymentsConfig


class FakeTokenProvider(TokenProvider):
    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.calls = 0

    async def get_access_token(self) -> str:
        self.calls += 1
        if self.fail_with:
            raise UpstreamAuthError(self.fail_with)
        return "test-token"


class FakeGateway(PaymentGateway):
    def __init__(self, ack: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.ack = ack if ack is not None else {
            "MerchantRequestID": "29115-34620561-1",
            "CheckoutRequestID": "ws_1",
            "ResponseCode": "0",
            "ResponseDescription": "Success. Request accepted for processing",
            "CustomerMessage": "Success. Request accepted for processing",
        }
        self.error = error
        self.submissions: List[Dict[str, Any]] = []
        self.tokens: List[str] = []

    async def submit_stk_push(self, envelope: Dict[str, Any], token: str) -> Dict[str, Any]:
        self.submissions.append(envelope)
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return self.ack


@pytest.fixture
def payments_config():
    return PaymentsConfig(
        consumer_key="key",
        consumer_secret="secret",
        shortcode="174379",
        passkey="passkey",
        callback_url="https://example.test/payments/callback",
        environment="sandbox",
    )


@pytest.fixture
def envelope_builder(payments_config):
    return DarajaEnvelopeBuilder(payments_config, clock=lambda: datetime(2024, 1, 2, 3, 4, 5))


@pytest.fixture
def store():
    return PaymentStore()


@pytest.fixture
def token_provider():
    return FakeTokenProvider()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def services(store, token_provider, envelope_builder, gateway, payments_config):
    return PaymentServices(
        store=store,
        token_provider=token_provider,
        envelope_builder=envelope_builder,
        gateway=gateway,
        default_description=payments_config.default_description,
    )


def stk_callback(checkout_id: str, result_code: Any, desc: str = "", items=None) -> Dict[str, Any]:
    callback: Dict[str, Any] = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout_id,
        "ResultCode": result_code,
        "ResultDesc": desc,
    }
    if items is not None:
        callback["CallbackMetadata"] = {"Item": items}
    return {"Body": {"stkCallback": callback}}


SUCCESS_ITEMS = [
    {"Name": "Amount", "Value": 11},
    {"Name": "MpesaReceiptNumber", "Value": "ABC123"},
    {"Name": "Balance"},
    {"Name": "TransactionDate", "Value": 20240102030405},
    {"Name": "PhoneNumber", "Value": 254700000000},
]


@pytest.fixture
def make_callback():
    return stk_callback


@pytest.fixture
def success_items():
    return [dict(item) for item in SUCCESS_ITEMS]
