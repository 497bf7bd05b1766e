"""Profile row access for the account dashboard."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .store import StoreClient
from .subscriptions import parse_timestamp

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
EDITABLE_FIELDS = ("name", "age", "sex", "mobile")


@dataclass(frozen=True)
class Profile:
    id: str
    user_id: str
    name: Optional[str] = None
    age: Optional[int] = None
    sex: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "Profile":
        age = row.get("age")
        return cls(
            id=str(row.get("id", "")),
            user_id=str(row.get("user_id", "")),
            name=row.get("name"),
            age=int(age) if age is not None else None,
            sex=row.get("sex"),
            email=row.get("email"),
            mobile=row.get("mobile"),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )


def _clean_changes(changes: Mapping[str, object]) -> dict:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    cleaned = {}
    for key, value in changes.items():
        if isinstance(value, str):
            value = value.strip() or None
        if key == "age" and value is not None:
            value = int(value)
            if value < 0:
                raise ValueError("Age must not be negative")
        cleaned[key] = value
    return cleaned


class ProfileService:
    def __init__(self, store: StoreClient, user_id: str) -> None:
        self._store = store
        self._user_id = user_id

    def fetch(self) -> Optional[Profile]:
        rows = self._store.select(PROFILES_TABLE, {"user_id": self._user_id}, limit=1)
        return Profile.from_row(rows[0]) if rows else None

    def update(self, **changes) -> Profile:
        """Apply ``changes`` (any of name, age, sex, mobile); empty strings clear a field."""
        values = _clean_changes(changes)
        rows = self._store.update(PROFILES_TABLE, values, {"user_id": self._user_id})
        if not rows:
            raise LookupError(f"No profile for user {self._user_id}")
        logger.info("Profile updated for user %s", self._user_id)
        return Profile.from_row(rows[0])


__all__ = ["Profile", "ProfileService", "EDITABLE_FIELDS"]
