"""Pydantic models for persisted identity data."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CredentialRecord(BaseModel):
    """Identity bundle kept between launches."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True, extra="forbid", frozen=True)

    server_address: str = Field(..., min_length=1, description="Base URL of the server, no trailing slash")
    username: str = Field(..., min_length=1, description="Login name")
    password: str = Field(..., min_length=1, description="Login password, stored as entered")
    role: str = Field(..., min_length=1, description="Server-assigned role label")
    session_token: Optional[str] = Field(None, description="Cookie pair from the last successful login")

    @field_validator("server_address")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("session_token", mode="before")
    @classmethod
    def empty_token_is_absent(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def __repr__(self) -> str:
        token = "set" if self.session_token else "none"
        return f"CredentialRecord(server_address={self.server_address!r}, username={self.username!r}, role={self.role!r}, session_token={token})"

    __str__ = __repr__
