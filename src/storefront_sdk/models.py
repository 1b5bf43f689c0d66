"""Pydantic models for the Storefront SDK.

Frozen models for immutability; the credential pair in particular is only
ever replaced wholesale, never mutated field by field.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CredentialPair(BaseModel):
    """Access and refresh credentials held by the credential store."""

    model_config = ConfigDict(frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither credential is present."""
        return self.access_token is None and self.refresh_token is None


class Identity(BaseModel):
    """Signed-in user as reported by the API or read from a token."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    email: str | None = None
    name: str | None = None
    role: str = "user"

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Numeric ids are normalised to strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_admin(self) -> bool:
        """Whether the identity carries the admin role."""
        return self.role == "admin"


class AuthData(BaseModel):
    """Login or registration result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    user: Identity
    access_token: str = Field(..., alias="accessToken", min_length=1)
    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class RequestDescriptor(BaseModel):
    """A single API call as handed to the request gateway."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str = Field(..., min_length=1)
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    json_body: Any = Field(default=None, alias="json")
    content: bytes | str | None = None
    params: dict[str, Any] | None = None

    @field_validator("method")
    @classmethod
    def normalise_method(cls, v: str) -> str:
        """HTTP methods are sent upper-case."""
        return v.upper()

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Paths are relative to the configured base URL."""
        if not v.startswith("/"):
            msg = "Request path must start with '/'"
            raise ValueError(msg)
        return v

    @field_validator("params")
    @classmethod
    def drop_empty_params(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        """Query parameters set to None are omitted."""
        if v is None:
            return None
        return {key: value for key, value in v.items() if value is not None}


def unwrap_envelope(body: Any) -> Any:
    """Strip the API's ``{"statusCode", "data", "message"}`` envelope.

    ``data`` is either a single object or a list whose first element is the
    result. Bodies without an envelope are returned unchanged.
    """
    if not isinstance(body, dict) or "data" not in body:
        return body
    data = body["data"]
    if isinstance(data, list):
        return data[0] if data else None
    return data
