"""Authenticated user as stored by the session."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.domain.value_objects import UserRole


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class SessionUser(BaseModel):
    """User profile returned by the login endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(None, alias="_id", description="User ID")
    username: str | None = Field(None, description="Login name")
    name: str | None = Field(None, description="Display name")
    role: str = Field("", description="ADMIN, MANAGER or STAFF")
    branch_id: str | None = Field(None, alias="branchId", description="Assigned branch")

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v: Any) -> str:
        """Roles compare case-insensitively."""
        return UserRole.normalize(v)

    @field_validator("id", "username", "name", "branch_id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        """Profiles come from the auth API; numeric logins and ids are kept as text."""
        return _as_text(v)

    @property
    def is_staff(self) -> bool:
        """STAFF users are locked to their branch."""
        return self.role == UserRole.STAFF.value

    @property
    def display_name(self) -> str:
        return self.name or self.username or ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape kept in storage."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def branch_scope(cls, user: SessionUser | Mapping[str, Any] | None) -> tuple[str, str | None]:
        """Role and branch only, without validating the rest of the profile."""
        if user is None:
            return "", None
        if isinstance(user, cls):
            return user.role, user.branch_id
        if isinstance(user, Mapping):
            branch = user.get("branchId", user.get("branch_id"))
            return UserRole.normalize(user.get("role")), _as_text(branch)
        raise TypeError(f"Unsupported user type: {type(user).__name__}")

    @classmethod
    def coerce(cls, user: SessionUser | Mapping[str, Any] | None) -> SessionUser | None:
        """Accept a model, a raw mapping or None."""
        if user is None or isinstance(user, cls):
            return user
        if isinstance(user, Mapping):
            return cls.model_validate(dict(user))
        raise TypeError(f"Unsupported user type: {type(user).__name__}")
