"""Pydantic models for authentication API requests and responses.

Authentication payloads use camelCase field names on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from iam.application.value_objects import AuthSuccess, PrincipalView


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(_CamelModel):
    """Request model for registering a principal."""

    email: str = Field(..., min_length=1, max_length=256)
    password: str = Field(..., min_length=1)
    confirm_password: str | None = Field(
        default=None, description="Must equal password when given"
    )
    user_name: str | None = Field(default=None, max_length=256)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def passwords_match(self) -> RegisterRequest:
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(_CamelModel):
    """Request model for signing in with email and password."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(_CamelModel):
    """Request model for exchanging a refresh token."""

    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(_CamelModel):
    """Request model for changing the caller's password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    confirm_new_password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def passwords_match(self) -> ChangePasswordRequest:
        if self.confirm_new_password != self.new_password:
            raise ValueError("Passwords do not match")
        return self


class PrincipalResponse(_CamelModel):
    """The authenticated principal."""

    id: str
    email: str
    user_name: str
    first_name: str | None = None
    last_name: str | None = None
    tenant_id: str
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_view(cls, principal: PrincipalView) -> PrincipalResponse:
        return cls(
            id=principal.id,
            email=principal.email,
            user_name=principal.username,
            first_name=principal.first_name,
            last_name=principal.last_name,
            tenant_id=principal.tenant_id,
            roles=list(principal.roles),
        )


class AuthResponse(_CamelModel):
    """Tokens issued by login, registration or refresh."""

    access_token: str
    refresh_token: str
    access_token_expiration: datetime
    refresh_token_expiration: datetime
    principal: PrincipalResponse

    @classmethod
    def from_result(cls, result: AuthSuccess) -> AuthResponse:
        return cls(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            access_token_expiration=result.access_token_expiration,
            refresh_token_expiration=result.refresh_token_expiration,
            principal=PrincipalResponse.from_view(result.principal),
        )


class ErrorResponse(BaseModel):
    """Body of a refused authentication request."""

    errors: list[str]
