from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass
class PaymentRecord:
    status: PaymentStatus
    # success fields
    amount: Optional[float] = None
    receipt: Optional[str] = None
    payer_phone: Optional[str] = None
    settled_at: Optional[str] = None
    # failed / cancelled
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status.value}
        if self.status == PaymentStatus.SUCCESS:
            data["amount"] = self.amount
            data["receipt"] = self.receipt
            data["payerPhone"] = self.payer_phone
            data["settledAt"] = self.settled_at
        elif self.status in (PaymentStatus.FAILED, PaymentStatus.CANCELLED):
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            status=PaymentStatus(data.get("status", PaymentStatus.PENDING.value)),
            amount=data.get("amount"),
            receipt=data.get("receipt"),
            payer_phone=data.get("payerPhone"),
            settled_at=data.get("settledAt"),
            message=data.get("message"),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status != PaymentStatus.PENDING


# ---------------------------------------------------------------------------
# Abstract store interface
# ---------------------------------------------------------------------------

class PaymentRecordStore(ABC):
    """Shared map of correlation identifier -> PaymentRecord."""

    @abstractmethod
    def create(self, checkout_id: str, record: PaymentRecord) -> bool:
        """Insert a record if the identifier is absent. Return True if inserted."""

    @abstractmethod
    def update(self, checkout_id: str, record: PaymentRecord) -> None:
        """Write the record under the identifier, inserting it if absent."""

    @abstractmethod
    def get(self, checkout_id: str) -> Optional[PaymentRecord]:
        """Return the record, or None when the identifier is unknown."""

    def ping(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Gateway collaborators
# ---------------------------------------------------------------------------

class TokenProvider(ABC):
    @abstractmethod
    async def get_access_token(self) -> str:
        """Return a bearer token for the payment gateway."""


class PaymentGateway(ABC):
    @abstractmethod
    async def submit_stk_push(self, envelope: Dict[str, Any], token: str) -> Dict[str, Any]:
        """Submit a push-payment request and return the gateway's acknowledgment body."""
