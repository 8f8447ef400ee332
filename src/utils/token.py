"""
Best-effort reading of the bearer token's payload.

The signature is never checked, so whatever comes out of here is a display
hint (which menu to show, which order filter to pre-select). Anything that
needs to be enforced is enforced by the backend on every call.
"""

from __future__ import annotations

import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jwt.utils import base64url_decode

ROLE_CUSTOMER = 1
ROLE_MERCHANT = 2

ROLE_NAMES = {ROLE_CUSTOMER: "Customer", ROLE_MERCHANT: "Merchant"}


@dataclass(frozen=True)
class Identity:
    user_id: int
    user_type: int

    @property
    def is_merchant(self) -> bool:
        return self.user_type == ROLE_MERCHANT

    @property
    def role_name(self) -> str:
        return ROLE_NAMES.get(self.user_type, f"Unknown ({self.user_type})")


def decode_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode the payload segment of a token without verifying it.

    Only the middle segment is read; header and signature are ignored.
    Returns None for anything that is not three non-empty dot separated
    segments with a base64url encoded JSON object in the middle.
    """
    if not token or not isinstance(token, str):
        return None
    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        return None

    try:
        payload = json.loads(base64url_decode(segments[1]))
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def _to_int(val) -> Optional[int]:
    if isinstance(val, bool):
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def identity_from_token(token: Optional[str]) -> Optional[Identity]:
    """Project a decoded payload onto (user_id, user_type); None if unusable."""
    payload = decode_token(token)
    if payload is None:
        return None

    user_id = _to_int(payload.get("user_id"))
    if user_id is None or user_id <= 0:
        return None
    user_type = _to_int(payload.get("user_type"))
    return Identity(user_id=user_id, user_type=user_type or 0)
