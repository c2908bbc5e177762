"""Result types returned by the entitlement engine, one per operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class LoginKind(str, Enum):
    FIRST_LOGIN = "first_login"
    RE_LOGIN = "re_login"
    SUCCESS = "success"


class LoginFailure(str, Enum):
    MISSING_PARAMS = "missing_params"
    USER_NOT_FOUND = "user_not_found"
    WRONG_PASSWORD = "wrong_password"
    EXPIRED = "expired"
    MISSING_DEVICE_ID = "missing_device_id"
    DEVICE_CONFLICT = "device_conflict"


@dataclass(slots=True)
class LoginGranted:
    kind: LoginKind
    username: str
    expires_at: int
    remaining_days: Optional[int] = None
    device_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True

    def to_payload(self) -> Dict[str, Any]:
        # The client app reads "login"/"re_login" and a string expired_date.
        if self.kind is LoginKind.RE_LOGIN:
            return {
                "status": "re_login",
                "user": self.username,
                "expired_date": str(self.expires_at * 1000),
                "deviceId": self.device_id,
            }
        return {
            "status": "login",
            "user": self.username,
            "expired_date": str(self.remaining_days),
        }


@dataclass(slots=True)
class LoginRejected:
    reason: LoginFailure

    @property
    def ok(self) -> bool:
        return False

    def to_payload(self) -> Dict[str, Any]:
        return {"status": "fail", "message": self.reason.value}


LoginResult = Union[LoginGranted, LoginRejected]


@dataclass(slots=True)
class AccountStatus:
    """Existence probe used by clients to discard stale local state."""

    username: str
    active: bool
    expires_at: Optional[int]
    created_at: int
    trial_days: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": "success",
            "user": self.username,
            "active": self.active,
            "expiresAt": self.expires_at,
            "createdAt": self.created_at,
            "trialDays": self.trial_days,
        }


@dataclass(slots=True)
class AccountSummary:
    username: str
    expires_at: Optional[int]
    created_at: int
    expired: bool
    trial_days: Optional[int] = None
    bound_device_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "expiresAt": self.expires_at,
            "createdAt": self.created_at,
            "expired": self.expired,
            "trialDays": self.trial_days,
            "deviceId": self.bound_device_id,
        }
