"""Subscription lookup and the entitlement gate consulted before playback."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

from src.errors import StoreError
from .store import StoreClient

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_TABLE = "subscriptions"
ACTIVE = "active"

_FRACTION = re.compile(r"\.(\d+)")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SubscriptionRecord:
    id: str
    user_id: str
    status: str
    plan_name: str
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    amount: float
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "SubscriptionRecord":
        return cls(
            id=str(row.get("id", "")),
            user_id=str(row.get("user_id", "")),
            status=str(row.get("status", "")),
            plan_name=str(row.get("plan_name") or "premium"),
            start_date=parse_timestamp(row.get("start_date")),
            end_date=parse_timestamp(row.get("end_date")),
            amount=float(row.get("amount") or 0),
            razorpay_payment_id=row.get("razorpay_payment_id"),
            razorpay_order_id=row.get("razorpay_order_id"),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def is_current(self, now: datetime) -> bool:
        return self.status == ACTIVE and (self.end_date is None or self.end_date > now)


@dataclass(frozen=True)
class Entitlement:
    is_premium: bool
    expires_at: Optional[datetime] = None
    subscription: Optional[SubscriptionRecord] = None


NO_ENTITLEMENT = Entitlement(is_premium=False)


class SubscriptionService:
    """Derive the current user's entitlement from their latest active subscription."""

    def __init__(
        self,
        store: StoreClient,
        user_id: Optional[str],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._clock = clock

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    def latest_active(self) -> Optional[SubscriptionRecord]:
        if not self._user_id:
            return None
        rows = self._store.select(
            SUBSCRIPTIONS_TABLE,
            {"user_id": self._user_id, "status": ACTIVE},
            order="created_at",
            descending=True,
            limit=1,
        )
        return SubscriptionRecord.from_row(rows[0]) if rows else None

    def fetch_entitlement(self) -> Entitlement:
        try:
            record = self.latest_active()
        except StoreError as exc:
            logger.error("Error fetching subscription: %s", exc)
            return NO_ENTITLEMENT
        except (TypeError, ValueError) as exc:
            logger.error("Could not decode subscription row: %s", exc)
            return NO_ENTITLEMENT
        if record is None:
            return NO_ENTITLEMENT
        return Entitlement(
            is_premium=record.is_current(self._clock()),
            expires_at=record.end_date,
            subscription=record,
        )


class SubscriptionGate:
    """Entitlement gate that re-queries the store on every check."""

    def __init__(self, service: SubscriptionService) -> None:
        self._service = service

    def entitlement(self) -> Entitlement:
        return self._service.fetch_entitlement()

    def is_premium(self) -> bool:
        return self.entitlement().is_premium


class StaticGate:
    """Fixed entitlement, used when no backend is configured."""

    def __init__(self, premium: bool = False) -> None:
        self.premium = premium

    def entitlement(self) -> Entitlement:
        return Entitlement(is_premium=self.premium)

    def is_premium(self) -> bool:
        return self.premium


__all__ = [
    "Entitlement",
    "SubscriptionRecord",
    "SubscriptionService",
    "SubscriptionGate",
    "StaticGate",
    "parse_timestamp",
    "utcnow",
]
