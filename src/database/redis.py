"""
In-memory payment record store.

Process-wide map of CheckoutRequestID -> PaymentRecord. Used when no
REDIS_URL is configured. Records are never evicted and are lost on restart.
"""

from __future__ import annotations

from typing import Dict, Optional

from src.integrations.contracts.interfaces import PaymentRecord, PaymentRecordStore


class PaymentStore(PaymentRecordStore):
    def __init__(self) -> None:
        self._records: Dict[str, PaymentRecord] = {}

    def create(self, checkout_id: str, record: PaymentRecord) -> bool:
        if checkout_id in self._records:
            return False
        self._records[checkout_id] = record
        return True

    def update(self, checkout_id: str, record: PaymentRecord) -> None:
        self._records[checkout_id] = record

    def get(self, checkout_id: str) -> Optional[PaymentRecord]:
        return self._records.get(checkout_id)

    def __len__(self) -> int:
        return len(self._records)

    def ping(self) -> bool:
        """Always True so /health reports the store as connected in local/dev mode."""
        return True
