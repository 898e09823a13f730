"""
CollectionStore - last fetched ordered list of one collection

Refresh policy: whole-list reload once on mount and after every successful
mutation. No optimistic patching; the previous list stays visible until the
reload resolves, and a failed reload keeps it (stale but available).

A store that has been detached (its panel unmounted or the tab switched)
discards any response that arrives afterwards instead of applying it.
"""
import logging
from typing import Callable, Iterator, List, Tuple

from ..exceptions import StoreError
from ..models.domain.content import CollectionKind, ContentRecord
from ..repositories.content_repository import ContentRepository

logger = logging.getLogger(__name__)

Subscriber = Callable[[Tuple[ContentRecord, ...]], None]


class CollectionStore:
    """In-memory cache of one collection, starting empty"""

    def __init__(self, repository: ContentRepository):
        self.repository = repository
        self._items: Tuple[ContentRecord, ...] = ()
        self._subscribers: List[Subscriber] = []
        self._attached = True
        self._latest_request = 0
        self.loaded = False

    @property
    def kind(self) -> CollectionKind:
        return self.repository.kind

    @property
    def items(self) -> Tuple[ContentRecord, ...]:
        """Current ordered list (read-only snapshot)"""
        return self._items

    @property
    def attached(self) -> bool:
        return self._attached

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ContentRecord]:
        return iter(self._items)

    def find(self, record_id: str) -> ContentRecord:
        for record in self._items:
            if record.id == record_id:
                return record
        raise KeyError(record_id)

    async def reload(self) -> bool:
        """
        Replace the cached list with a fresh fetch.

        Returns:
            True if the fetched list was applied, False if it was discarded
            (store detached, or a newer reload was issued meanwhile)

        Raises:
            StoreError if the fetch failed; the previous list is kept
        """
        self._latest_request += 1
        request = self._latest_request

        try:
            records = await self.repository.list()
        except StoreError:
            if not self._attached or request != self._latest_request:
                logger.debug(f"Dropping superseded {self.kind.value} reload failure")
                return False
            logger.warning(f"Reload of {self.kind.value} failed, keeping {len(self._items)} cached rows")
            raise

        if not self._attached or request != self._latest_request:
            logger.debug(f"Discarding stale {self.kind.value} reload")
            return False

        self._items = tuple(records)
        self.loaded = True
        self._publish()
        return True

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback(items)` after every applied reload; returns unsubscribe"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def detach(self) -> None:
        """Stop applying responses; called when the owning panel goes away"""
        self._attached = False
        self._subscribers.clear()

    def _publish(self) -> None:
        for callback in list(self._subscribers):
            callback(self._items)
