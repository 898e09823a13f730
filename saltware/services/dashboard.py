"""
DashboardController - admin panel state

Owns the active tab, that tab's CollectionStore and at most one EditSession.
User actions never raise SaltwareError subclasses: the message is kept in
`error` for display and prior state is left as it was.

Flow:
    mount() -> gate check -> select_tab() loads the list
    begin_create()/begin_edit() -> set_field()* -> save() | cancel()
    save()/remove() -> repository mutation -> list reload
"""
import logging
from typing import Any, Awaitable, Mapping, Optional, Tuple, Union

from ..exceptions import SaltwareError, ValidationError
from ..models.domain.content import CollectionKind, ContentRecord
from ..repositories.content_repository import ContentRepository
from .access_gate import AccessGate, EntryDecision
from .collection_store import CollectionStore
from .edit_session import EditSession

logger = logging.getLogger(__name__)

TABS: Tuple[CollectionKind, ...] = tuple(CollectionKind)


class DashboardController:
    """
    One admin dashboard instance.

    Starting a new edit while one is open discards the open draft without
    contacting the backend (last write wins).
    """

    def __init__(
        self,
        gate: AccessGate,
        repositories: Mapping[CollectionKind, ContentRepository],
    ):
        self.gate = gate
        self.repositories = dict(repositories)
        self.active_tab: Optional[CollectionKind] = None
        self.collection: Optional[CollectionStore] = None
        self.session: Optional[EditSession] = None
        self.error: Optional[str] = None
        self.failure: Optional[SaltwareError] = None
        self.mounted = False

    # =========================================================================
    # VIEW STATE
    # =========================================================================

    @property
    def items(self) -> Tuple[ContentRecord, ...]:
        return self.collection.items if self.collection else ()

    @property
    def draft(self) -> Optional[ContentRecord]:
        return self.session.draft if self.session else None

    @property
    def is_new(self) -> bool:
        return bool(self.session and self.session.is_new)

    def _fail(self, error: SaltwareError) -> None:
        logger.warning(f"Dashboard action failed: {error.message}")
        self.error = error.message
        self.failure = error

    def _clear_error(self) -> None:
        self.error = None
        self.failure = None

    async def _run(self, action: Awaitable[Any], collection: Optional[CollectionStore]) -> bool:
        """Await `action`; its outcome is shown only if `collection` is still the active panel"""
        try:
            await action
        except SaltwareError as e:
            if self.collection is collection:
                self._fail(e)
            return False
        if self.collection is collection:
            self._clear_error()
        return True

    def _require_tab(self) -> Tuple[ContentRepository, CollectionStore]:
        if not self.mounted or self.collection is None:
            raise ValidationError("Dashboard is not open")
        return self.repositories[self.collection.kind], self.collection

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def mount(self, tab: Union[CollectionKind, str] = CollectionKind.SERVICES) -> EntryDecision:
        """
        Enter the dashboard. Re-checks the gate every time.

        Returns:
            ALLOW (tab loaded), WAIT (session resolving) or REDIRECT
        """
        decision = self.gate.entry_decision()
        if decision is not EntryDecision.ALLOW:
            logger.info(f"Dashboard entry refused ({decision.value}), gate state {self.gate.state.value}")
            return decision

        self.mounted = True
        await self.select_tab(tab)
        return decision

    def unmount(self) -> None:
        """Leave the dashboard; in-flight responses are dropped"""
        if self.collection is not None:
            self.collection.detach()
        self.collection = None
        self.session = None
        self.active_tab = None
        self.mounted = False

    async def select_tab(self, tab: Union[CollectionKind, str]) -> bool:
        """Switch collection: the previous panel and any open draft go away"""
        kind = CollectionKind(tab)
        if not self.mounted:
            self._fail(ValidationError("Dashboard is not open"))
            return False

        if self.collection is not None:
            self.collection.detach()
        self.session = None
        self.active_tab = kind
        collection = CollectionStore(self.repositories[kind])
        self.collection = collection
        return await self._run(collection.reload(), collection)

    # =========================================================================
    # EDITING
    # =========================================================================

    def begin_create(self) -> Optional[EditSession]:
        try:
            repository, collection = self._require_tab()
        except ValidationError as e:
            self._fail(e)
            return None
        self.cancel()
        self.session = EditSession.begin_create(repository, collection)
        self._clear_error()
        return self.session

    def begin_edit(self, record: Union[ContentRecord, str]) -> Optional[EditSession]:
        """Open an existing record (or its id) for editing"""
        try:
            repository, collection = self._require_tab()
            if isinstance(record, str):
                try:
                    record = collection.find(record)
                except KeyError:
                    raise ValidationError(f"No {collection.kind.value} row with id {record}", field="id")
            session = EditSession.begin_edit(repository, collection, record)
            self.cancel()
            self.session = session
        except ValidationError as e:
            self._fail(e)
            return None
        self._clear_error()
        return self.session

    def set_field(self, name: str, value: Any) -> bool:
        if self.session is None:
            self._fail(ValidationError("No edit in progress"))
            return False
        try:
            self.session.set_field(name, value)
        except ValidationError as e:
            self._fail(e)
            return False
        return True

    def cancel(self) -> None:
        if self.session is not None:
            self.session.cancel()
        self.session = None

    async def save(self) -> bool:
        """
        Commit the open draft.

        On failure before the write, the draft stays open for retry. If the
        write succeeded but the reload failed, the draft is closed and the
        reload error is shown.
        """
        session = self.session
        if session is None:
            return False
        collection = self.collection

        try:
            self.gate.require_admin()
            await session.commit()
        except SaltwareError as e:
            if self.collection is collection:
                if session.closed and self.session is session:
                    self.session = None
                self._fail(e)
            return False

        if self.session is session:
            self.session = None
        if self.collection is collection:
            self._clear_error()
        return True

    async def remove(self, record_id: str) -> bool:
        """Delete a row, then reload the list"""
        collection = self.collection
        try:
            repository, collection = self._require_tab()
            self.gate.require_admin()
            await repository.delete(record_id)
            await collection.reload()
        except SaltwareError as e:
            if self.collection is collection:
                self._fail(e)
            return False

        if self.collection is collection:
            self._clear_error()
        return True

    # =========================================================================
    # SESSION
    # =========================================================================

    async def sign_out(self) -> None:
        self.unmount()
        await self.gate.sign_out()
