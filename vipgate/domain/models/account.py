"""User account record stored in the key-value store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

SECONDS_PER_DAY = 86400


def normalize_username(username: str) -> str:
    return username.strip().lower()


@dataclass(slots=True)
class UserAccount:
    """
    Account entitled to use the client application.

    Attributes:
        username: Name as supplied at creation (lookups are case-insensitive)
        password_hash: bcrypt hash of the account password
        created_at: Creation time in epoch seconds
        trial_days: Days granted before the entitlement window has started
        expires_at: Absolute expiry in epoch seconds, None until activation
        bound_device_id: Device that completed the binding login
        first_login_at: Epoch second the entitlement window was started
    """

    username: str
    password_hash: str
    created_at: int
    trial_days: Optional[int] = None
    expires_at: Optional[int] = None
    bound_device_id: Optional[str] = None
    first_login_at: Optional[int] = None

    @property
    def key(self) -> str:
        return normalize_username(self.username)

    @property
    def is_activated(self) -> bool:
        # A zero expiry from legacy records means the window never started.
        return bool(self.expires_at)

    def is_expired(self, now: int) -> bool:
        return self.is_activated and now >= self.expires_at  # type: ignore[operator]

    def remaining_days(self, now: int) -> int:
        """Whole days left in the window, rounded up and never below one."""
        seconds_left = (self.expires_at or 0) - now
        days = -(-seconds_left // SECONDS_PER_DAY)
        return max(days, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "passwordHash": self.password_hash,
            "createdAt": self.created_at,
            "trialDays": self.trial_days,
            "expiresAt": self.expires_at,
            "boundDeviceId": self.bound_device_id,
            "firstLoginAt": self.first_login_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserAccount":
        return cls(
            username=data["username"],
            password_hash=data["passwordHash"],
            created_at=int(data["createdAt"]),
            trial_days=data.get("trialDays"),
            expires_at=data.get("expiresAt") or None,
            bound_device_id=data.get("boundDeviceId"),
            first_login_at=data.get("firstLoginAt"),
        )

    def __repr__(self) -> str:
        return (
            f"<UserAccount username={self.username} expires_at={self.expires_at} "
            f"trial_days={self.trial_days} device={self.bound_device_id}>"
        )
