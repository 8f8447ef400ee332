from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from flows.order_commit import DraftRegistry
from utils.session import SessionStore
from utils.token import Identity


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - session: login state, backed by local storage
      - drafts: order drafts waiting for confirmation, keyed by draft id
      - pending_order_id: order to open when the orders screen is shown next
    """

    session: SessionStore = field(default_factory=SessionStore)
    drafts: DraftRegistry = field(default_factory=DraftRegistry)
    pending_order_id: Optional[str] = None

    @property
    def identity(self) -> Optional[Identity]:
        return self.session.identity()

    def take_pending_order(self) -> Optional[str]:
        order_id, self.pending_order_id = self.pending_order_id, None
        return order_id
