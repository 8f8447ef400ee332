from __future__ import annotations

from typing import Callable, List, Optional

import aiosqlite

from db import storage
from utils.logger import get_logger
from utils.token import Identity, identity_from_token

_logger = get_logger(__name__)

SessionListener = Callable[[bool], None]


class SessionStore:
    """
    Single source of truth for "is somebody logged in".

    The flag mirrors the token slot in local storage. Every mutator (sign_in,
    logout) updates storage and then calls refresh(), which re-reads the slot
    and broadcasts to all listeners. Changes made by another client sharing the
    storage file are picked up by reconcile().
    """

    def __init__(self) -> None:
        self._logged_in = False
        self._token: Optional[str] = None
        self._listeners: List[SessionListener] = []

    def is_logged_in(self) -> bool:
        return self._logged_in

    @property
    def token(self) -> Optional[str]:
        return self._token

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener; the returned callable removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _read_token(self) -> Optional[str]:
        try:
            token = await storage.get_item(storage.TOKEN_KEY)
        except (aiosqlite.Error, OSError) as e:
            _logger.warning(f"Could not read session token: {e}")
            return None
        return token or None

    def _broadcast(self) -> None:
        for listener in list(self._listeners):
            listener(self._logged_in)

    async def refresh(self) -> bool:
        """Re-read storage, then notify every listener whether or not it changed."""
        self._token = await self._read_token()
        self._logged_in = self._token is not None
        _logger.debug(f"Session refreshed, logged_in={self._logged_in}")
        self._broadcast()
        return self._logged_in

    async def reconcile(self) -> bool:
        """
        Re-read storage and notify listeners only if the flag diverged.
        Returns True if a broadcast happened.
        """
        token = await self._read_token()
        logged_in = token is not None
        self._token = token
        if logged_in == self._logged_in:
            return False
        _logger.info(f"Session changed elsewhere, logged_in={logged_in}")
        self._logged_in = logged_in
        self._broadcast()
        return True

    def identity(self) -> Optional[Identity]:
        return identity_from_token(self._token)

    async def sign_in(self, token: str) -> Optional[Identity]:
        """Persist a freshly issued token and its identity hints."""
        await storage.set_item(storage.TOKEN_KEY, token)
        identity = identity_from_token(token)
        if identity:
            await storage.set_item(storage.USER_ID_KEY, str(identity.user_id))
            await storage.set_item(storage.USER_TYPE_KEY, str(identity.user_type))
        await self.refresh()
        return identity

    async def logout(self) -> None:
        await storage.remove_items(*storage.SESSION_KEYS)
        await self.refresh()
        _logger.info("Logged out.")

    async def resolve_identity(self) -> Optional[Identity]:
        """
        Identity of the stored token, or None after clearing an unusable one.
        Callers treat None as "not authenticated" and go back to login.
        """
        await self.reconcile()
        identity = self.identity()
        if identity is None and self._token is not None:
            _logger.warning("Stored token could not be decoded, clearing it.")
            await storage.remove_items(storage.TOKEN_KEY)
            await self.refresh()
        return identity
