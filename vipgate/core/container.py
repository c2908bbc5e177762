from dataclasses import dataclass

from ..application.services.admin_auth_service import AdminAuthService
from ..application.services.entitlement_service import EntitlementService
from ..domain.ports.persistence import KeyValueStore
from ..infrastructure.repositories.account_repository import AccountRepository
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    store: KeyValueStore
    account_repository: AccountRepository
    entitlement_service: EntitlementService
    admin_auth_service: AdminAuthService
