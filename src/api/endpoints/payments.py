import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from pydantic import AliasChoices, BaseModel, Field

from src.integrations.policy.payment_service import PaymentServices

logger = logging.getLogger(__name__)

api = APIRouter()
payments_api = api


class PaymentInitiateRequest(BaseModel):
    payer_phone: Optional[Union[str, int]] = Field(
        default=None,
        validation_alias=AliasChoices("payerPhone", "phone", "payer_phone"),
        description="Payer's MSISDN; receives the STK prompt",
    )
    amount: Optional[Any] = Field(default=None, description="Rounded up to a whole unit before submission")
    description: Optional[str] = Field(default=None, description="Transaction memo shown to the payer")


def get_payment_services(request: Request) -> PaymentServices:
    return request.app.state.payments


@api.post("/payments", tags=["Payments"])
@api.post("/stk-push", tags=["Payments"])
async def initiate_payment(
    payload: Optional[PaymentInitiateRequest] = None,
    services: PaymentServices = Depends(get_payment_services),
):
    """
    Send an STK push prompt to the payer's phone.
    Returns the gateway acknowledgment as-is; poll /payments/status with its CheckoutRequestID.
    """
    payload = payload or PaymentInitiateRequest()
    payer_phone = None if payload.payer_phone is None else str(payload.payer_phone)
    return await services.initiator.initiate(payer_phone, payload.amount, payload.description)


@api.post("/payments/callback", tags=["Payments"])
@api.post("/mpesa/callback", tags=["Payments"])
async def payment_callback(request: Request, services: PaymentServices = Depends(get_payment_services)):
    """
    Gateway result notification. Always acknowledged with ResultCode 0 so the
    gateway does not resend payloads we cannot use.
    """
    try:
        body = await request.json()
    except ValueError:
        raw = await request.body()
        logger.warning("Callback body is not JSON: %r", raw[:500])
        body = None
    return services.reconciler.reconcile(body)


@api.get("/payments/status", tags=["Payments"])
@api.get("/stk-status", tags=["Payments"])
async def payment_status(
    id: Optional[str] = Query(default=None, description="CheckoutRequestID returned by /payments"),
    checkout_id: Optional[str] = Query(default=None, alias="checkoutId"),
    services: PaymentServices = Depends(get_payment_services),
):
    return services.reader.get_status(id or checkout_id)
