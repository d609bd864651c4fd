# -----------------------------------------------------------------------------
# Formula Store
# Purpose: owned, read-through cache of the registry's formula list.
#   - reload() is the single writer: wholesale replacement, never a merge
#   - create/update/delete pass straight to the registry and DO NOT touch the
#     cache; callers reload afterwards (mutate-then-reload)
#   - concurrent reloads are ordered by ticket: a response older than the one
#     already applied is discarded
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Callable, List, Optional, Tuple

from .client import RemoteClient
from .errors import ClientError
from .logger import get_logger
from .notifications import NotificationQueue
from .types import Formula

logger = get_logger(__name__)

Listener = Callable[[Tuple[Formula, ...]], None]


class FormulaStore:
    def __init__(self, client: RemoteClient, notifications: NotificationQueue):
        self._client = client
        self._notifications = notifications
        self._formulas: Tuple[Formula, ...] = ()
        self._issued = 0    # last ticket handed out
        self._applied = 0   # ticket of the response currently in the cache
        self._listeners: List[Listener] = []

    # ---------------- read-only accessors ----------------

    @property
    def formulas(self) -> Tuple[Formula, ...]:
        return self._formulas

    def names(self) -> List[str]:
        return [f.name for f in self._formulas]

    def find_by_name(self, name: str | None) -> Optional[Formula]:
        if not name:
            return None
        return next((f for f in self._formulas if f.name == name), None)

    def __len__(self) -> int:
        return len(self._formulas)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ---------------- single writer ----------------

    async def reload(self) -> bool:
        """
        Fetch the full list and replace the cache. Returns False when the fetch
        failed (old cache kept); a response superseded by a newer one still counts.
        """
        self._issued += 1
        ticket = self._issued
        try:
            formulas = await self._client.list_formulas()
        except ClientError as e:
            self._notifications.error("Failed to Load Formulas", e.message)
            return False

        if ticket < self._applied:
            logger.debug("Discarding stale reload #%d (cache holds #%d)", ticket, self._applied)
            return True

        self._applied = ticket
        self._formulas = tuple(formulas)
        logger.info("Loaded %d formulas", len(self._formulas))
        for listener in list(self._listeners):
            listener(self._formulas)
        return True

    # ---------------- registry pass-through ----------------

    async def fetch(self, name: str) -> Formula:
        return await self._client.get_formula(name)

    async def create(self, formula: Formula) -> Optional[Formula]:
        return await self._client.create_formula(formula)

    async def update(self, original_name: str, formula: Formula) -> Optional[Formula]:
        return await self._client.update_formula(original_name, formula)

    async def delete(self, name: str) -> None:
        await self._client.delete_formula(name)
