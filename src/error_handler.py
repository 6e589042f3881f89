"""Error taxonomy and handling helpers for the payment flow."""
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

FALLBACK_SUBMISSION_MESSAGE = "STK push failed. Please try again."


class PaymentError(Exception):
    status_code = 500

    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.client_message = message
        self.payload = payload or {}


class ValidationError(PaymentError):
    """Required client input is missing or unusable."""
    status_code = 400


class UpstreamAuthError(PaymentError):
    """The gateway access token could not be obtained."""


class UpstreamSubmissionError(PaymentError):
    """The gateway rejected, failed or timed out on the push request."""


class MalformedNotification(PaymentError):
    """A gateway notification lacks the expected nested structure. Never surfaced to the sender."""
    status_code = 200


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, ValidationError):
            logger.info("Rejected request: %s", exc)
            return {"errorMessage": exc.client_message}
        if isinstance(exc, PaymentError):
            logger.error("Payment request failed: %s context=%s payload=%s", exc, context or {}, exc.payload)
            return {"errorMessage": exc.client_message or FALLBACK_SUBMISSION_MESSAGE}
        logger.error("Unhandled exception in payment flow: %s", exc, exc_info=True)
        return {"errorMessage": FALLBACK_SUBMISSION_MESSAGE}
