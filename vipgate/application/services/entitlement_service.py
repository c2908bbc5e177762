"""Account entitlement engine: creation, renewal, activation and device binding."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from ...core.security import MAX_PASSWORD_BYTES, PasswordHasher
from ...domain.errors import AlreadyExists, InvalidInput, NotFound
from ...domain.models import (
    SECONDS_PER_DAY,
    AccountStatus,
    AccountSummary,
    LoginFailure,
    LoginGranted,
    LoginKind,
    LoginRejected,
    LoginResult,
    UserAccount,
)
from ...infrastructure.repositories.account_repository import AccountRepository

logger = logging.getLogger(__name__)


class ActivationPolicy(str, Enum):
    IMMEDIATE = "immediate"
    DEFERRED = "deferred"


@dataclass(slots=True)
class EntitlementPolicy:
    """
    Behaviour switches for the entitlement engine.

    Attributes:
        activation: Whether the window starts at creation or at first login
        default_trial_days: Days granted on activation when the record has none
        device_binding: Bind the account to the first device that logs in
        enforce_single_device: Reject logins from a device other than the bound one
    """

    activation: ActivationPolicy = ActivationPolicy.DEFERRED
    default_trial_days: int = 1
    device_binding: bool = False
    enforce_single_device: bool = True


class EntitlementService:
    """Owns the account lifecycle on top of the account repository.

    Every mutating operation is a read-modify-write of the whole record with no
    transaction around it. Two concurrent writes to the same username resolve
    as last-write-wins.
    """

    def __init__(
        self,
        repository: AccountRepository,
        policy: Optional[EntitlementPolicy] = None,
        password_hasher: Optional[PasswordHasher] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._repository = repository
        self._policy = policy or EntitlementPolicy()
        self._hasher = password_hasher or PasswordHasher()
        self._clock = clock

    @property
    def policy(self) -> EntitlementPolicy:
        return self._policy

    def _now(self) -> int:
        return int(self._clock())

    # ------------------------------------------------------------------
    def create(self, username: str, password: str, initial_days: int) -> UserAccount:
        username = (username or "").strip()
        password = (password or "").strip()
        if not username or not password:
            raise InvalidInput("username and password are required")
        if initial_days is None or initial_days <= 0:
            raise InvalidInput("days must be a positive integer")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInput("password is too long")
        if self._repository.exists(username):
            raise AlreadyExists()

        now = self._now()
        account = UserAccount(
            username=username,
            password_hash=self._hasher.hash(password),
            created_at=now,
        )
        if self._policy.activation is ActivationPolicy.IMMEDIATE:
            account.expires_at = now + initial_days * SECONDS_PER_DAY
        else:
            account.trial_days = initial_days
        self._repository.save(account)
        logger.info(
            "Created account %s (%s policy, %d days)",
            account.username,
            self._policy.activation.value,
            initial_days,
        )
        return account

    def renew(self, username: str, extra_days: int) -> UserAccount:
        account = self._require(username)
        if extra_days is None or extra_days <= 0:
            raise InvalidInput("days must be a positive integer")
        if not account.is_activated:
            account.trial_days = (account.trial_days or 0) + extra_days
        else:
            # A lapsed window restarts from now rather than from the old expiry.
            baseline = max(account.expires_at, self._now())  # type: ignore[type-var]
            account.expires_at = baseline + extra_days * SECONDS_PER_DAY
        self._repository.save(account)
        logger.info("Renewed account %s by %d days", account.username, extra_days)
        return account

    def login(self, username: str, password: str, device_id: Optional[str] = None) -> LoginResult:
        username = (username or "").strip()
        password = (password or "").strip()
        device_id = (device_id or "").strip() or None
        if not username or not password:
            return LoginRejected(LoginFailure.MISSING_PARAMS)

        account = self._repository.get(username)
        if account is None:
            return LoginRejected(LoginFailure.USER_NOT_FOUND)
        if not self._hasher.verify(password, account.password_hash):
            logger.warning("Rejected login for %s: wrong password", account.username)
            return LoginRejected(LoginFailure.WRONG_PASSWORD)

        now = self._now()
        if not account.is_activated:
            days = account.trial_days or self._policy.default_trial_days
            account.expires_at = now + days * SECONDS_PER_DAY
            account.first_login_at = now
            self._repository.save(account)
            logger.info("Activated account %s for %d days", account.username, days)

        if account.is_expired(now):
            return LoginRejected(LoginFailure.EXPIRED)

        if not self._policy.device_binding:
            return LoginGranted(
                kind=LoginKind.SUCCESS,
                username=account.username,
                expires_at=account.expires_at,  # type: ignore[arg-type]
                remaining_days=account.remaining_days(now),
            )

        if account.bound_device_id is None:
            if device_id is None:
                return LoginRejected(LoginFailure.MISSING_DEVICE_ID)
            account.bound_device_id = device_id
            self._repository.save(account)
            logger.info("Bound account %s to device %s", account.username, device_id)
            return LoginGranted(
                kind=LoginKind.FIRST_LOGIN,
                username=account.username,
                expires_at=account.expires_at,  # type: ignore[arg-type]
                remaining_days=account.remaining_days(now),
                device_id=device_id,
            )

        if self._policy.enforce_single_device and device_id != account.bound_device_id:
            logger.warning(
                "Rejected login for %s: device %s does not match bound device",
                account.username,
                device_id,
            )
            return LoginRejected(LoginFailure.DEVICE_CONFLICT)

        return LoginGranted(
            kind=LoginKind.RE_LOGIN,
            username=account.username,
            expires_at=account.expires_at,  # type: ignore[arg-type]
            remaining_days=account.remaining_days(now),
            device_id=account.bound_device_id,
        )

    def check_exists(self, username: str) -> AccountStatus:
        account = self._require(username)
        return AccountStatus(
            username=account.username,
            active=not account.is_expired(self._now()),
            expires_at=account.expires_at,
            created_at=account.created_at,
            trial_days=account.trial_days,
        )

    def reactivate(self, username: str, device_id: str, expiry_millis: int) -> UserAccount:
        """Overwrite device and expiry with values computed by the client.

        The device is trusted as the source of truth for its own expiry, which
        tolerates clock and timezone drift at the cost of server authority.
        """
        account = self._require(username)
        device_id = (device_id or "").strip()
        if not device_id:
            raise InvalidInput("deviceId is required")
        if expiry_millis is None or expiry_millis < 1000:
            raise InvalidInput("expiry must be a positive timestamp in milliseconds")
        account.bound_device_id = device_id
        account.expires_at = expiry_millis // 1000
        self._repository.save(account)
        logger.info(
            "Reactivated account %s on device %s until %d",
            account.username,
            device_id,
            account.expires_at,
        )
        return account

    def reset_device(self, username: str) -> UserAccount:
        account = self._require(username)
        account.bound_device_id = None
        self._repository.save(account)
        logger.info("Cleared device binding for %s", account.username)
        return account

    def delete(self, username: str) -> int:
        username = (username or "").strip()
        if not username:
            raise InvalidInput("missing username")
        removed = self._repository.delete(username)
        if removed:
            logger.info("Deleted account %s", username)
        return removed

    def list_accounts(self) -> Iterator[AccountSummary]:
        now = self._now()
        for account in self._repository.iter_all():
            yield self._summarize(account, now)

    def list_page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Tuple[List[AccountSummary], Optional[str]]:
        if limit is not None and limit <= 0:
            raise InvalidInput("limit must be positive")
        now = self._now()
        accounts, next_cursor = self._repository.page(cursor, limit)
        return [self._summarize(account, now) for account in accounts], next_cursor

    # ------------------------------------------------------------------
    def _require(self, username: str) -> UserAccount:
        username = (username or "").strip()
        if not username:
            raise InvalidInput("missing username")
        account = self._repository.get(username)
        if account is None:
            raise NotFound()
        return account

    @staticmethod
    def _summarize(account: UserAccount, now: int) -> AccountSummary:
        return AccountSummary(
            username=account.username,
            expires_at=account.expires_at,
            created_at=account.created_at,
            expired=account.is_expired(now),
            trial_days=account.trial_days,
            bound_device_id=account.bound_device_id,
        )
