"""
Redis-backed payment record store for when REDIS_URL is set. Implements the
same interface as src.database.redis (in-memory store).
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import redis

from src.integrations.contracts.interfaces import PaymentRecord, PaymentRecordStore

logger = logging.getLogger(__name__)


class PaymentStore(PaymentRecordStore):
    """
    Redis-backed payment records. `record_ttl` (seconds) is applied to every
    write when set; by default records do not expire.
    """

    def __init__(self, url: str, record_ttl: Optional[int] = None, client=None) -> None:
        self._client = client if client is not None else redis.from_url(url, decode_responses=True)
        self._record_ttl = record_ttl

    def _key(self, checkout_id: str) -> str:
        return f"payment:{checkout_id}"

    def create(self, checkout_id: str, record: PaymentRecord) -> bool:
        payload = json.dumps(record.to_dict(), default=str)
        return bool(self._client.set(self._key(checkout_id), payload, nx=True, ex=self._record_ttl))

    def update(self, checkout_id: str, record: PaymentRecord) -> None:
        payload = json.dumps(record.to_dict(), default=str)
        self._client.set(self._key(checkout_id), payload, ex=self._record_ttl)

    def get(self, checkout_id: str) -> Optional[PaymentRecord]:
        raw = self._client.get(self._key(checkout_id))
        if not raw:
            return None
        try:
            return PaymentRecord.from_dict(json.loads(raw))
        except (json.JSONDecodeError, ValueError):
            logger.warning("Discarding unreadable payment record for %s", checkout_id)
            return None

    def ping(self) -> bool:
        try:
            return self._client.ping()
        except redis.RedisError:
            return False
