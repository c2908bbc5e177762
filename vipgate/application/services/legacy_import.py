"""Import of the account list kept by the previous worker deployment.

That deployment stored every account in a single ``users`` JSON array with
plaintext passwords, ``initialDays``, ``firstLoginAt`` and ``expireAt``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ...core.security import MAX_PASSWORD_BYTES, PasswordHasher
from ...domain.models import UserAccount
from ...infrastructure.repositories.account_repository import AccountRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportReport:
    imported: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    invalid: int = 0


def import_legacy_users(
    records: Iterable[Dict[str, Any]],
    repository: AccountRepository,
    password_hasher: PasswordHasher,
) -> ImportReport:
    report = ImportReport()
    for record in records:
        if not isinstance(record, dict):
            report.invalid += 1
            continue
        username = str(record.get("username") or "").strip()
        password = str(record.get("password") or "").strip()
        if not username or not password or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            report.invalid += 1
            continue
        if repository.exists(username):
            report.skipped.append(username)
            continue
        try:
            expires_at = _optional_int(record.get("expireAt"))
            created_at = _optional_int(record.get("createdAt")) or 0
            first_login_at = _optional_int(record.get("firstLoginAt"))
            initial_days = _optional_int(record.get("initialDays"))
        except (TypeError, ValueError):
            logger.warning("Skipping legacy record %s: malformed timestamps", username)
            report.invalid += 1
            continue
        account = UserAccount(
            username=username,
            password_hash=password_hasher.hash(password),
            created_at=created_at,
            trial_days=None if expires_at else initial_days,
            expires_at=expires_at,
            first_login_at=first_login_at,
        )
        repository.save(account)
        report.imported.append(username)
    logger.info(
        "Legacy import finished: %d imported, %d skipped, %d invalid",
        len(report.imported),
        len(report.skipped),
        report.invalid,
    )
    return report


def _optional_int(value: Any) -> Optional[int]:
    # Zero and missing values both mean "unset" in the old records.
    if value is None or value == "" or value == 0:
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    return int(value)
