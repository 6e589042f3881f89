"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.endpoints.payments import payments_api
from src.error_handler import ErrorHandler, PaymentError
from src.integrations.policy.payment_service import PaymentServices
from src.utils.config_loader import PaymentsConfig, load_payments_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


def build_payment_services(config: PaymentsConfig) -> PaymentServices:
    """Select store and gateway clients. The only place mock vs real is decided."""
    if os.getenv("REDIS_URL"):
        from src.database.redis_real import PaymentStore

        store = PaymentStore(url=os.environ["REDIS_URL"], record_ttl=config.record_ttl_seconds)
    else:
        from src.database.redis import PaymentStore

        store = PaymentStore()

    from src.integrations.clients.real_http.daraja import DarajaEnvelopeBuilder

    envelope_builder = DarajaEnvelopeBuilder(config)

    if config.use_real_gateway():
        from src.integrations.clients.real_http.daraja import DarajaGateway, DarajaTokenProvider

        token_provider = DarajaTokenProvider(config)
        gateway = DarajaGateway(config)
        mode = "real"
    else:
        from src.integrations.clients.mocks.daraja import MockDarajaGateway, MockTokenProvider

        token_provider = MockTokenProvider()
        gateway = MockDarajaGateway()
        mode = "mock"

    return PaymentServices(
        store=store,
        token_provider=token_provider,
        envelope_builder=envelope_builder,
        gateway=gateway,
        default_description=config.default_description,
        mode=mode,
    )


payments_config = load_payments_config()

# Initialize FastAPI app
app = FastAPI(
    title="M-Pesa STK Push API",
    description="Push-payment initiation, gateway callback reconciliation and status polling",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.payments = build_payment_services(payments_config)

# Register payments API router
app.include_router(payments_api)
app.include_router(payments_api, prefix="/api")

logger.info("Payments running in %s mode", app.state.payments.mode)
logger.info("Recipient number: %s", payments_config.recipient_phone)
logger.info("Callback URL: %s", payments_config.callback_url or "<not set>")


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    body = error_handler.handle_exception(exc, context={"path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check (payment store, gateway mode)."""
    services: PaymentServices = app.state.payments
    return {
        "status": "healthy",
        "store": "connected" if services.store.ping() else "unavailable",
        "gateway": services.mode,
        "timestamp": datetime.now().isoformat(),
    }
