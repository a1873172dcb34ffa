"""JSON encoding of the credential map."""

from __future__ import annotations

import json
from typing import Dict

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..models import TokenRecord

# Workspace name -> record, in insertion order
CredentialMap = Dict[str, TokenRecord]

_MAP_ADAPTER = TypeAdapter(CredentialMap)


class CredentialParseError(ValueError):
    """Token file content is not a JSON object of ``{"token": ..., "cookie": ...}`` records."""


def parse_credential_map(text: str) -> CredentialMap:
    """Parse token file content.

    Raises:
        CredentialParseError: invalid JSON or unexpected shape. The message
            describes the problem without quoting the content.
    """
    try:
        return _MAP_ADAPTER.validate_json(text)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        detail = f"{first['msg']} at {location}" if location else first["msg"]
        raise CredentialParseError(detail) from None


def serialize_credential_map(credentials: CredentialMap, pretty: bool = True) -> str:
    data = {name: record.to_storage_dict() for name, record in credentials.items()}
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data, separators=(",", ":"))
