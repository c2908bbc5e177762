"""Domain models for the VIP Gate service."""

from .account import SECONDS_PER_DAY, UserAccount, normalize_username
from .results import (
    AccountStatus,
    AccountSummary,
    LoginFailure,
    LoginGranted,
    LoginKind,
    LoginRejected,
    LoginResult,
)

__all__ = [
    "AccountStatus",
    "AccountSummary",
    "LoginFailure",
    "LoginGranted",
    "LoginKind",
    "LoginRejected",
    "LoginResult",
    "SECONDS_PER_DAY",
    "UserAccount",
    "normalize_username",
]
