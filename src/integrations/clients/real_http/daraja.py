"""
Real Daraja (Safaricom M-Pesa) HTTP clients.

Used when Daraja credentials are configured:
- DarajaTokenProvider: OAuth client-credentials token, cached until expiry
- DarajaEnvelopeBuilder: STK push envelope with timestamp + password
- DarajaGateway: submits the STK push request
"""

from __future__ import annotations

import base64
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import httpx

from src.error_handler import UpstreamAuthError, UpstreamSubmissionError
from src.integrations.contracts.interfaces import PaymentGateway, TokenProvider
from src.integrations.contracts.payments import StkPushEnvelope
from src.integrations.policy.response_wrappers import gateway_error_message
from src.utils.config_loader import PaymentsConfig

logger = logging.getLogger(__name__)

OAUTH_PATH = "/oauth/v1/generate"
STK_PUSH_PATH = "/mpesa/stkpush/v1/processrequest"

# Refresh this many seconds before Daraja's stated expiry.
_TOKEN_EXPIRY_MARGIN = 60.0


class DarajaTokenProvider(TokenProvider):
    def __init__(self, config: PaymentsConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = config.daraja_base_url
        self.consumer_key = config.consumer_key
        self.consumer_secret = config.consumer_secret
        self.timeout_seconds = config.timeout_seconds
        self._transport = transport
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0

    async def get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._expires_at:
            return self._access_token

        url = f"{self.base_url}{OAUTH_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(
                    url,
                    params={"grant_type": "client_credentials"},
                    auth=(self.consumer_key, self.consumer_secret),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Daraja token request rejected: %s %s", e.response.status_code, e.response.text)
            raise UpstreamAuthError(gateway_error_message(e.response)) from e
        except httpx.RequestError as e:
            logger.error("Daraja token request failed: %s", e)
            raise UpstreamAuthError(gateway_error_message(None)) from e
        except ValueError as e:
            logger.error("Daraja token response is not JSON: %s", e)
            raise UpstreamAuthError(gateway_error_message(None)) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise UpstreamAuthError(gateway_error_message(None), payload=data if isinstance(data, dict) else {})

        try:
            expires_in = float(data.get("expires_in", 3599))
        except (TypeError, ValueError):
            expires_in = 3599.0
        self._access_token = token
        self._expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0.0)
        return token


class DarajaEnvelopeBuilder:
    def __init__(self, config: PaymentsConfig, clock=None) -> None:
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def timestamp_and_password(self) -> Tuple[str, str]:
        timestamp = self._clock().strftime("%Y%m%d%H%M%S")
        raw = f"{self.config.shortcode}{self.config.passkey}{timestamp}"
        password = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return timestamp, password

    def build(self, payer_phone: str, amount: int, description: str) -> StkPushEnvelope:
        timestamp, password = self.timestamp_and_password()
        return StkPushEnvelope(
            BusinessShortCode=self.config.shortcode,
            Password=password,
            Timestamp=timestamp,
            TransactionType=self.config.transaction_type,
            Amount=amount,
            PartyA=payer_phone,
            PartyB=self.config.destination,
            PhoneNumber=payer_phone,
            CallBackURL=self.config.callback_url,
            AccountReference=self.config.account_reference,
            TransactionDesc=description,
        )


class DarajaGateway(PaymentGateway):
    def __init__(self, config: PaymentsConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.base_url = config.daraja_base_url
        self.timeout_seconds = config.timeout_seconds
        self._transport = transport

    async def submit_stk_push(self, envelope: Dict[str, Any], token: str) -> Dict[str, Any]:
        url = f"{self.base_url}{STK_PUSH_PATH}"
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {token}"}
        try:
            logger.info("Submitting STK push to %s amount=%s", url, envelope.get("Amount"))
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json=envelope, headers=headers)
                response.raise_for_status()
                data = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error("STK push rejected: %s %s", e.response.status_code, e.response.text)
            raise UpstreamSubmissionError(gateway_error_message(e.response)) from e
        except httpx.TimeoutException as e:
            logger.error("STK push timed out after %ss", self.timeout_seconds)
            raise UpstreamSubmissionError(gateway_error_message(None)) from e
        except httpx.RequestError as e:
            logger.error("STK push request error: %s", e)
            raise UpstreamSubmissionError(gateway_error_message(None)) from e
        except ValueError as e:
            logger.error("STK push acknowledgment is not JSON: %s", e)
            raise UpstreamSubmissionError(gateway_error_message(None)) from e

        if not isinstance(data, dict):
            raise UpstreamSubmissionError(gateway_error_message(None), payload={"raw": data})
        return data
