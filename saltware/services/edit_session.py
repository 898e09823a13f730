"""
EditSession - single-record draft for create or update

A session holds one complete candidate record. Field edits only touch the
draft; the backend is contacted on commit alone, and the record is always
written whole (insert, or full-replace update by id).
"""
from enum import Enum
from typing import Any

from ..exceptions import StoreError, ValidationError
from ..models.domain.content import ContentRecord
from ..repositories.content_repository import ContentRepository
from .collection_store import CollectionStore


class EditMode(str, Enum):
    NEW = "new"
    EXISTING = "existing"


def field_label(name: str) -> str:
    """'sort_order' -> 'Sort order'"""
    return name.replace('_', ' ').capitalize()


class EditSession:
    """
    Draft for exactly one collection.

    Lifecycle: begin_create / begin_edit -> set_field* -> commit | cancel.
    A failed commit leaves the session open with its edits so the user can
    retry; a successful one closes it and reloads the collection.
    """

    def __init__(
        self,
        repository: ContentRepository,
        collection: CollectionStore,
        mode: EditMode,
        draft: ContentRecord,
    ):
        self.repository = repository
        self.collection = collection
        self.mode = mode
        self.draft = draft
        self.closed = False

    @classmethod
    def begin_create(
        cls,
        repository: ContentRepository,
        collection: CollectionStore,
    ) -> 'EditSession':
        """New draft with default values, placed after the current list"""
        draft = repository.record_cls(sort_order=len(collection) + 1)
        return cls(repository, collection, EditMode.NEW, draft)

    @classmethod
    def begin_edit(
        cls,
        repository: ContentRepository,
        collection: CollectionStore,
        record: ContentRecord,
    ) -> 'EditSession':
        """Draft copied from an existing record"""
        if not isinstance(record, repository.record_cls):
            raise TypeError(
                f"Cannot edit {type(record).__name__} in {repository.table}"
            )
        if not record.id:
            raise ValidationError("Record has no id to update", field="id")
        return cls(repository, collection, EditMode.EXISTING, record.copy())

    @property
    def is_new(self) -> bool:
        return self.mode is EditMode.NEW

    @property
    def active(self) -> bool:
        return not self.closed

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValidationError("No edit in progress")

    def set_field(self, name: str, value: Any) -> None:
        """Set one draft column from form input (numeric columns are coerced)"""
        self._ensure_open()
        if name == "id" or name not in self.repository.record_cls.field_names():
            raise ValidationError(f"Unknown field: {name}", field=name)
        setattr(self.draft, name, self.repository.record_cls.coerce(name, value))

    def update_fields(self, values: dict) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    def validate(self) -> None:
        """Required columns must be non-empty"""
        for name in self.draft.required_fields:
            value = getattr(self.draft, name)
            if value is None or not str(value).strip():
                raise ValidationError(f"{field_label(name)} is required", field=name)

    async def commit(self) -> ContentRecord:
        """
        Write the draft to the backend.

        Returns:
            The stored record

        Raises:
            ValidationError before any network call
            StoreError from the mutation (session stays open unless the
            error is marked applied) or from the follow-up reload (session
            already closed, mutation applied)
        """
        self._ensure_open()
        self.validate()

        try:
            if self.is_new:
                saved = await self.repository.insert(self.draft)
            else:
                saved = await self.repository.update(self.draft.id, self.draft)
        except StoreError as e:
            if e.applied:
                # The row is written; retrying would duplicate it
                self.closed = True
                await self.collection.reload()
            raise

        self.closed = True
        await self.collection.reload()
        return saved

    def cancel(self) -> None:
        """Discard the draft unconditionally"""
        self.closed = True
