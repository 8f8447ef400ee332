# talks to the storefront backend, unwraps the baseResp envelope
import asyncio
from typing import Any, Dict, Optional

import requests

from db import storage
from utils.config import settings
from utils.logger import get_logger

_logger = get_logger(__name__)

BASE_URL = settings.api_url
TIMEOUT = settings.api_timeout
AUTH_HEADER = settings.auth_header

SUCCESS_CODE = 0
UNKNOWN_CODE = -1

_session = requests.Session()
_session.headers.update({"Content-Type": "application/json"})


class ApiError(Exception):
    """The backend answered, but with a non-zero baseResp code."""

    def __init__(self, code: int, msg: str) -> None:
        super().__init__(msg or f"request failed with code {code}")
        self.code = code
        self.msg = msg


class TransportError(Exception):
    """The request never produced a usable answer (network, timeout, bad body)."""


def unwrap(body: Any, require_envelope: bool = True) -> Dict[str, Any]:
    """
    Check the envelope and return the body.

    A missing baseResp is a failure unless require_envelope is False, which
    only the catalog listings use since they answer with bare bodies.
    """
    if not isinstance(body, dict):
        raise TransportError("Unexpected response body.")
    base_resp = body.get("baseResp")
    if base_resp is None:
        if require_envelope:
            raise ApiError(UNKNOWN_CODE, "unknown error")
        return body
    if not isinstance(base_resp, dict):
        raise TransportError("Malformed baseResp.")
    code = base_resp.get("code", UNKNOWN_CODE)
    if code != SUCCESS_CODE:
        raise ApiError(code, base_resp.get("msg") or "")
    return body


async def _auth_headers() -> Dict[str, str]:
    token = await storage.get_item(storage.TOKEN_KEY)
    return {AUTH_HEADER: token} if token else {}


async def call(
    path: str,
    payload: Optional[Dict[str, Any]] = None,
    require_envelope: bool = True,
) -> Dict[str, Any]:
    """POST one JSON request and return the unwrapped body. No retries."""
    url = BASE_URL + path
    headers = await _auth_headers()
    _logger.debug(f"POST {path}")
    try:
        resp = await asyncio.to_thread(
            _session.post,
            url,
            json=payload or {},
            headers=headers,
            timeout=TIMEOUT,
        )
        resp.raise_for_status()
        body = resp.json()
    except requests.RequestException as e:
        # also covers JSONDecodeError raised by resp.json()
        _logger.error(f"POST {path} failed: {e}")
        raise TransportError(str(e)) from e

    try:
        return unwrap(body, require_envelope)
    except ApiError as e:
        _logger.warning(f"POST {path} rejected: code={e.code} msg={e.msg}")
        raise
