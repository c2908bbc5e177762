from __future__ import annotations

import hmac
import logging
from typing import Optional

from ...domain.errors import Unauthorized

logger = logging.getLogger(__name__)


class AdminAuthService:
    """Checks the shared admin secret and the device pre-shared key."""

    def __init__(self, admin_secret: Optional[str], device_key: Optional[str] = None) -> None:
        if not admin_secret:
            logger.warning("ADMIN_SECRET is not configured; admin endpoints will reject every request.")
        self._admin_secret = admin_secret or ""
        self._device_key = device_key or ""

    def is_admin(self, presented: Optional[str]) -> bool:
        return _matches(self._admin_secret, presented)

    def is_device(self, presented: Optional[str]) -> bool:
        return _matches(self._device_key, presented)

    def require_admin(self, presented: Optional[str]) -> None:
        if not self.is_admin(presented):
            raise Unauthorized()

    def require_admin_or_device(self, admin_secret: Optional[str], device_key: Optional[str]) -> None:
        if not (self.is_admin(admin_secret) or self.is_device(device_key)):
            raise Unauthorized()


def _matches(expected: str, presented: Optional[str]) -> bool:
    # An unset secret never matches, not even an empty header.
    if not expected or not presented:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))
