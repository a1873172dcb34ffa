"""Pydantic model for an authenticated workspace."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from ..errors import WorkspaceValidationError, WorkspaceValidationKind
from .record import TokenRecord


class TokenKind(Enum):
    """Token class, derived from the token prefix."""

    BOT = "xoxb-"
    SESSION = "xoxc-"  # Browser session token, needs the "d" cookie
    USER = "xoxp-"


# Characters that would let a name escape the config directory
_INVALID_NAME_CHARS = ("/", "\\", "\x00")


def normalize_name(name: str) -> str:
    """Canonical form of a workspace name, as stored and looked up."""
    return name.strip()


# Used when pydantic rejects a field before our validators run (wrong type, missing)
_FIELD_FALLBACK_KINDS = {
    "name": WorkspaceValidationKind.INVALID_NAME,
    "token": WorkspaceValidationKind.INVALID_TOKEN_PREFIX,
    "cookie": WorkspaceValidationKind.UNSAFE_COOKIE,
}


class Workspace(BaseModel):
    """A validated, immutable workspace name with its credentials.

    All fields are checked at construction. Invalid input raises
    ``WorkspaceValidationError``; the token and cookie are kept out of both the
    error message and ``repr()``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Workspace identifier")
    token: str = Field(..., repr=False, description="API token (xoxb-, xoxc- or xoxp-)")
    cookie: Optional[str] = Field(None, repr=False, description="Value of the 'd' session cookie")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            # Not chained: pydantic's own error text includes the rejected input
            raise _workspace_error(e) from None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = normalize_name(v)
        if not v:
            raise PydanticCustomError("empty_name", "Workspace name cannot be empty")
        if any(ch in v for ch in _INVALID_NAME_CHARS):
            raise PydanticCustomError("invalid_name", "Workspace name contains invalid characters")
        return v

    @field_validator("token")
    @classmethod
    def check_token(cls, v: str) -> str:
        if not any(v.startswith(kind.value) for kind in TokenKind):
            raise PydanticCustomError(
                "invalid_token_prefix",
                "Invalid token format (expected an xoxb-, xoxc- or xoxp- token)",
            )
        return v

    @field_validator("cookie")
    @classmethod
    def check_cookie(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and ("\r" in v or "\n" in v):
            raise PydanticCustomError("unsafe_cookie", "Cookie cannot contain newlines")
        return v

    @model_validator(mode="after")
    def check_cookie_pairing(self) -> "Workspace":
        if self.token_kind is TokenKind.SESSION and not self.cookie:
            raise PydanticCustomError("missing_cookie", "xoxc tokens require a cookie")
        return self

    @property
    def token_kind(self) -> TokenKind:
        for kind in TokenKind:
            if self.token.startswith(kind.value):
                return kind
        raise AssertionError("token prefix is validated at construction")

    @property
    def is_bot(self) -> bool:
        return self.token_kind is TokenKind.BOT

    @property
    def is_session(self) -> bool:
        return self.token_kind is TokenKind.SESSION

    @property
    def is_user(self) -> bool:
        return self.token_kind is TokenKind.USER

    def headers(self) -> Dict[str, str]:
        """HTTP headers the API client sends for this workspace."""
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        if self.cookie:
            headers["Cookie"] = f"d={self.cookie}"
        return headers

    def to_record(self) -> TokenRecord:
        return TokenRecord(token=self.token, cookie=self.cookie)

    @classmethod
    def from_record(cls, name: str, record: TokenRecord) -> "Workspace":
        return cls(name=name, token=record.token, cookie=record.cookie)

    def __str__(self) -> str:
        return self.name


def _workspace_error(exc: PydanticValidationError) -> WorkspaceValidationError:
    """Translate the first pydantic error into a workspace validation error."""
    first = exc.errors()[0]
    try:
        kind = WorkspaceValidationKind(first["type"])
    except ValueError:
        field = first["loc"][0] if first["loc"] else None
        if field == "name" and first["type"] == "missing":
            kind = WorkspaceValidationKind.EMPTY_NAME
        else:
            kind = _FIELD_FALLBACK_KINDS.get(field, WorkspaceValidationKind.INVALID_NAME)
    return WorkspaceValidationError(f"Invalid workspace: {first['msg']}", kind)
