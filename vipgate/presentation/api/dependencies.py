from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.admin_auth_service import AdminAuthService
from ...core.dependencies import get_admin_auth_service

_bearer_scheme = HTTPBearer(auto_error=False)


def _presented_admin_secret(
    header_secret: Optional[str], credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if header_secret:
        return header_secret
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


def require_admin(
    x_admin_secret: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    admin_service: AdminAuthService = Depends(get_admin_auth_service),
) -> None:
    admin_service.require_admin(_presented_admin_secret(x_admin_secret, credentials))


def require_admin_or_device(
    x_admin_secret: Optional[str] = Header(None),
    x_device_key: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    admin_service: AdminAuthService = Depends(get_admin_auth_service),
) -> None:
    admin_service.require_admin_or_device(
        _presented_admin_secret(x_admin_secret, credentials), x_device_key
    )
