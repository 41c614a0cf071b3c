"""Token responses and the credential forms posted to token endpoints."""

from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..foundation.errors import TokenAcquisitionError


class TokenResult(BaseModel):
    """OAuth token endpoint response.

    `issued_at` is stamped by the provider from its clock when the token is
    received; expiry is measured from it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    error: str | None = None
    error_description: str | None = None
    issued_at: float = Field(default_factory=time.monotonic)

    @property
    def expires_at(self) -> float | None:
        return None if self.expires_in is None else self.issued_at + self.expires_in

    def is_success(self) -> bool:
        return bool(self.access_token) and self.error is None

    def is_expired(self, now: float, skew: float = 0.0) -> bool:
        """Whether the token is expired at `now`, counting `skew` seconds early.

        Tokens without expires_in never expire.
        """
        expires_at = self.expires_at
        return expires_at is not None and now + skew >= expires_at

    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    def ensure_success(self, provider: str) -> TokenResult:
        if not self.is_success():
            raise TokenAcquisitionError.from_remote(provider, self.error or "invalid_token",
                                                    self.error_description or "no access_token in response")
        return self

    @property
    def authorization(self) -> str:
        """Authorization header value, e.g. `Bearer abc`."""
        return f"{self.token_type or 'Bearer'} {self.access_token}"


class ClientCredentials(BaseModel):
    """client_credentials grant form."""

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["client_credentials"] = "client_credentials"
    client_id: str | None = None
    client_secret: str | None = None
    scope: str | None = None


class PasswordCredentials(BaseModel):
    """password grant form."""

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["password"] = "password"
    client_id: str | None = None
    client_secret: str | None = None
    username: str | None = None
    password: str | None = None
    scope: str | None = None


class RefreshTokenCredentials(BaseModel):
    """refresh_token grant form."""

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["refresh_token"] = "refresh_token"
    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str
    scope: str | None = None
