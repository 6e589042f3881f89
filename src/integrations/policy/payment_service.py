"""
STK push payment lifecycle.

Two-phase protocol around one shared PaymentRecordStore:
- PaymentInitiator registers a `pending` record once the gateway acknowledges
  a push request with a CheckoutRequestID.
- ResultReconciler moves that record to its terminal state when the gateway's
  asynchronous notification arrives.
- StatusReader serves polls, treating unknown identifiers as `pending`.

The three only communicate through the store.
"""

import logging
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from src.error_handler import (
    FALLBACK_SUBMISSION_MESSAGE,
    MalformedNotification,
    PaymentError,
    ValidationError,
)
from src.integrations.contracts.interfaces import (
    PaymentGateway,
    PaymentRecord,
    PaymentRecordStore,
    PaymentStatus,
    TokenProvider,
)
from src.integrations.contracts.payments import CALLBACK_ACK, status_for_result_code
from src.integrations.policy.response_wrappers import correlation_id_from_ack, parse_stk_callback

logger = logging.getLogger(__name__)


class PaymentInitiator:
    def __init__(
        self,
        store: PaymentRecordStore,
        token_provider: TokenProvider,
        envelope_builder,
        gateway: PaymentGateway,
        default_description: str = "",
    ):
        self.store = store
        self.token_provider = token_provider
        self.envelope_builder = envelope_builder
        self.gateway = gateway
        self.default_description = default_description

    async def initiate(self, payer_phone: Optional[str], amount: Any, description: Optional[str] = None) -> Dict[str, Any]:
        """
        Submit an STK push and register the attempt as pending.

        Returns the gateway acknowledgment body unchanged. Raises
        ValidationError before any gateway call when input is missing, and
        UpstreamAuthError / UpstreamSubmissionError when the gateway fails;
        no record is created in either case.
        """
        if isinstance(payer_phone, str):
            payer_phone = payer_phone.strip()
        if not payer_phone or not amount:
            raise ValidationError("payerPhone and amount are required")
        submit_amount = self._round_up_amount(amount)

        try:
            token = await self.token_provider.get_access_token()
            envelope = self.envelope_builder.build(
                payer_phone=str(payer_phone),
                amount=submit_amount,
                description=description or self.default_description,
            )
            ack = await self.gateway.submit_stk_push(envelope.to_payload(), token)
        except PaymentError:
            raise
        except Exception as e:
            logger.exception("Unexpected error submitting STK push")
            raise PaymentError(FALLBACK_SUBMISSION_MESSAGE) from e

        checkout_id = correlation_id_from_ack(ack)
        if checkout_id:
            # The payer has already been prompted; a store failure must not hide the ack.
            try:
                created = self.store.create(checkout_id, PaymentRecord(status=PaymentStatus.PENDING))
            except Exception:
                logger.exception("Failed to register pending payment %s", checkout_id)
            else:
                if created:
                    logger.info("Registered pending payment %s amount=%s", checkout_id, submit_amount)
                else:
                    # The notification beat the registration; keep its terminal record.
                    logger.info("Payment %s already recorded before registration", checkout_id)
        else:
            logger.warning("Gateway acknowledged STK push without a CheckoutRequestID: %s", ack)
        return ack

    @staticmethod
    def _round_up_amount(amount: Any) -> int:
        if isinstance(amount, bool):
            raise ValidationError("amount must be a number")
        if isinstance(amount, int):
            return amount
        try:
            value = Decimal(str(amount).strip())
        except (InvalidOperation, TypeError, ValueError, OverflowError) as e:
            raise ValidationError("amount must be a number") from e
        if not value.is_finite():
            raise ValidationError("amount must be a number")
        return int(value.to_integral_value(rounding=ROUND_CEILING))


class ResultReconciler:
    def __init__(self, store: PaymentRecordStore):
        self.store = store

    def reconcile(self, body: Any) -> Dict[str, Any]:
        """Apply a gateway notification. Always returns the fixed acknowledgment."""
        try:
            callback = parse_stk_callback(body)
        except MalformedNotification as e:
            logger.warning("Unexpected callback payload (%s): %s", e, e.payload)
            return dict(CALLBACK_ACK)

        checkout_id = callback.CheckoutRequestID
        logger.info("Callback received - CheckoutID: %s, ResultCode: %s", checkout_id, callback.ResultCode)

        status = status_for_result_code(callback.ResultCode)
        if status == PaymentStatus.SUCCESS:
            meta = callback.metadata()
            record = PaymentRecord(
                status=status,
                amount=meta.get("Amount"),
                receipt=_as_text(meta.get("MpesaReceiptNumber")),
                payer_phone=_as_text(meta.get("PhoneNumber")),
                settled_at=_as_text(meta.get("TransactionDate")),
            )
        else:
            record = PaymentRecord(status=status, message=callback.description())

        try:
            existing = self.store.get(checkout_id)
            if existing is not None and existing.is_terminal:
                logger.warning(
                    "Ignoring duplicate callback for %s: already %s, got %s",
                    checkout_id, existing.status.value, status.value,
                )
                return dict(CALLBACK_ACK)
            self.store.update(checkout_id, record)
        except Exception:
            logger.exception("Failed to record callback for %s", checkout_id)
            return dict(CALLBACK_ACK)

        if status == PaymentStatus.SUCCESS:
            logger.info("Payment confirmed: %s receipt=%s", checkout_id, record.receipt)
        else:
            logger.info("Payment %s %s: %s", checkout_id, status.value, callback.description())
        return dict(CALLBACK_ACK)


class StatusReader:
    def __init__(self, store: PaymentRecordStore):
        self.store = store

    def get_status(self, checkout_id: Optional[str]) -> Dict[str, Any]:
        if not checkout_id or not checkout_id.strip():
            raise ValidationError("id required")
        record = self.store.get(checkout_id)
        if record is None:
            return PaymentRecord(status=PaymentStatus.PENDING).to_dict()
        return record.to_dict()


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class PaymentServices:
    """The three lifecycle roles wired to one store."""

    def __init__(
        self,
        store: PaymentRecordStore,
        token_provider: TokenProvider,
        envelope_builder,
        gateway: PaymentGateway,
        default_description: str = "",
        mode: str = "mock",
    ):
        self.store = store
        self.mode = mode
        self.initiator = PaymentInitiator(store, token_provider, envelope_builder, gateway, default_description)
        self.reconciler = ResultReconciler(store)
        self.reader = StatusReader(store)
