import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..application.services.entitlement_service import ActivationPolicy, EntitlementPolicy

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.admin_secret = os.getenv("ADMIN_SECRET", "")
        self.device_shared_key = os.getenv("DEVICE_SHARED_KEY", "")
        self.activation_policy = self._get_choice(
            "ACTIVATION_POLICY", ActivationPolicy, default=ActivationPolicy.DEFERRED
        )
        self.default_trial_days = self._get_int("DEFAULT_TRIAL_DAYS", default=1)
        self.device_binding = self._get_bool("DEVICE_BINDING", default=False)
        self.enforce_single_device = self._get_bool("ENFORCE_SINGLE_DEVICE", default=True)
        self.store_backend = os.getenv("STORE_BACKEND", "sqlite").strip().lower()
        if self.store_backend not in ("sqlite", "memory"):
            raise RuntimeError("STORE_BACKEND must be 'sqlite' or 'memory'")
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/vipgate.db")).resolve()
        self.list_page_size = self._get_int("LIST_PAGE_SIZE", default=100)
        self.password_hash_rounds = self._get_int("PASSWORD_HASH_ROUNDS", default=12)
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]
        if self.list_page_size <= 0:
            raise RuntimeError("LIST_PAGE_SIZE must be positive")
        if not 4 <= self.password_hash_rounds <= 31:
            raise RuntimeError("PASSWORD_HASH_ROUNDS must be between 4 and 31")
        if self.default_trial_days <= 0:
            raise RuntimeError("DEFAULT_TRIAL_DAYS must be positive")

    def entitlement_policy(self) -> EntitlementPolicy:
        return EntitlementPolicy(
            activation=self.activation_policy,
            default_trial_days=self.default_trial_days,
            device_binding=self.device_binding,
            enforce_single_device=self.enforce_single_device,
        )

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise RuntimeError(f"Environment variable {key} must be a boolean")

    @staticmethod
    def _get_choice(key: str, enum_type, default):
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return enum_type(value.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(item.value for item in enum_type)
            raise RuntimeError(f"Environment variable {key} must be one of: {allowed}") from exc
