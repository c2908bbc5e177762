"""Pydantic schemas for account endpoints.

Field aliases accept both the current camelCase names and the names sent by
older client builds.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class _AccountRequest(BaseModel):
    username: str = Field(default="", validation_alias=AliasChoices("username", "user"))

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value


class CreateAccountRequest(_AccountRequest):
    """Admin request creating an account with an initial grant of days."""

    password: str = ""
    days: int = Field(validation_alias=AliasChoices("days", "initialDays", "initial_days"))


class RenewAccountRequest(_AccountRequest):
    extra_days: int = Field(validation_alias=AliasChoices("extraDays", "extra_days", "days"))


class DeleteAccountRequest(_AccountRequest):
    username: str = Field(
        default="", validation_alias=AliasChoices("username", "usernameToDelete")
    )


class AccountLookupRequest(_AccountRequest):
    pass


class ListAccountsRequest(BaseModel):
    cursor: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=1000)


class LoginRequest(_AccountRequest):
    """Client login; empty fields are reported as ``missing_params``."""

    password: str = ""
    device_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("deviceId", "device_id")
    )


class ReactivateRequest(_AccountRequest):
    device_id: str = Field(default="", validation_alias=AliasChoices("deviceId", "device_id"))
    expiry_millis: int = Field(
        validation_alias=AliasChoices(
            "expiredDateMillis", "expired_date", "expiredDate", "expiresAtMillis"
        )
    )
