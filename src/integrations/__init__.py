"""
Integrations layer.
This package contains all code used to communicate with the payment gateway
(Safaricom Daraja / M-Pesa) and the payment lifecycle built around it.

Key rule:
- Endpoints MUST NOT call the gateway directly.
- They go through the services under src/integrations/policy, which talk to
  clients under src/integrations/clients.
- We use MOCK clients during development and swap to REAL_HTTP clients when
  credentials are configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    PaymentGateway,
    PaymentRecord,
    PaymentRecordStore,
    PaymentStatus,
    TokenProvider,
)

__all__ = [
    "PaymentGateway",
    "PaymentRecord",
    "PaymentRecordStore",
    "PaymentStatus",
    "TokenProvider",
]
