"""Stored form of a single workspace credential."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenRecord(BaseModel):
    """One entry of the credential map, keyed by workspace name."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: str = Field(..., repr=False)
    cookie: Optional[str] = Field(None, repr=False)

    def to_storage_dict(self) -> Dict[str, Any]:
        """Serialize for the token files; ``cookie`` is left out when unset."""
        return self.model_dump(exclude_none=True)
