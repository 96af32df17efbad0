"""
Generic repositories over PersistentStore.

An EntityRepository owns one flat, insertion-ordered list stored under one key.
Reads seed, migrate and parse; writes operate on the raw stored list so records
that fail parsing are never discarded as a side effect of an unrelated write.
"""

from __future__ import annotations

import dataclasses
import logging
import random
import string
from dataclasses import dataclass
from datetime import datetime
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Set,
    Type,
    TypeVar,
    Union,
)

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from jobtrack.models import now_utc
from jobtrack.storage.store import PersistentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

RawRecord = Dict[str, Any]
Migrator = Callable[[List[Any]], List[Any]]
Clock = Callable[[], datetime]

_ID_ALPHABET = string.digits + string.ascii_lowercase


class RecordValidationError(ValueError):
    """Raised when a create/update would store a record that fails its schema."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Invalid {key} record: {reason}")
        self.key = key
        self.reason = reason


@dataclass
class ParseResult(Generic[T]):
    """Outcome of parsing one stored record: an entity, or the raw data and why it failed."""
    raw: Any
    entity: Optional[T] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.entity is not None

    @property
    def record_id(self) -> Optional[str]:
        if isinstance(self.raw, dict):
            value = self.raw.get("id")
            return value if isinstance(value, str) else None
        return None


def generate_id(clock: Clock = now_utc) -> str:
    """`{epoch_ms}-{9 base36 chars}`: unique enough for a single local writer."""
    millis = int(clock().timestamp() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{millis}-{suffix}"


def describe_errors(error: ValidationError, limit: int = 3) -> str:
    """Compact one-line summary of a pydantic ValidationError."""
    parts = []
    for err in error.errors()[:limit]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    extra = error.error_count() - limit
    if extra > 0:
        parts.append(f"(+{extra} more)")
    return "; ".join(parts)


def to_plain(data: Any) -> RawRecord:
    """Convert an entity or mapping into JSON-ready primitives."""
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a mapping or a record, got {type(data).__name__}")
    return to_jsonable_python(dict(data))


class EntityRepository(Generic[T]):
    """
    CRUD over one entity collection.

    Args:
        store: Backing PersistentStore
        key: Logical storage key
        entity_type: Dataclass whose annotations are the field schema
        seed: Factory for the default collection written when the key is empty
        migrator: Optional raw-list transform applied on every load
        clock: Source of "now" (ids and time-relative queries)
    """

    def __init__(
        self,
        store: PersistentStore,
        key: str,
        entity_type: Type[T],
        seed: Optional[Callable[[], List[Any]]] = None,
        migrator: Optional[Migrator] = None,
        clock: Clock = now_utc,
    ):
        self.store = store
        self.key = key
        self.entity_type = entity_type
        self._seed = seed or list
        self.migrator = migrator
        self.clock = clock
        self._adapter: TypeAdapter[T] = TypeAdapter(entity_type)

    # ----------------------------- schema -----------------------------

    def parse(self, raw: Any) -> ParseResult[T]:
        """Validate one raw record against the entity schema."""
        try:
            entity = self._adapter.validate_python(raw)
        except ValidationError as e:
            return ParseResult(raw=raw, reason=describe_errors(e))
        return ParseResult(raw=raw, entity=entity)

    def to_raw(self, entity: T) -> RawRecord:
        """Canonical stored form of an entity (ISO-8601 dates, enum values)."""
        return self._adapter.dump_python(entity, mode="json")

    # ----------------------------- raw list -----------------------------

    def _seed_raw(self) -> List[Any]:
        return [to_plain(item) for item in self._seed()]

    def _save_raw(self, records: List[Any]) -> bool:
        return self.store.set(self.key, records)

    def _migrate(self, records: List[Any]) -> List[Any]:
        if self.migrator is None or not records:
            return records
        try:
            return self.migrator(records)
        except Exception as e:
            # A broken migration must not make the collection unreadable
            logger.warning("Migration of %s failed, using stored form: %s", self.key, e)
            return records

    def load_raw(self) -> List[Any]:
        """Stored list after seeding and migration (migrated form is persisted)."""
        data = self.store.get(self.key, revive_dates=False)
        if not isinstance(data, list) or not data:
            seeded = self._seed_raw()
            if seeded != data:
                self._save_raw(seeded)
            data = seeded

        migrated = self._migrate(data)
        if migrated != data:
            self._save_raw(migrated)
        return migrated

    @staticmethod
    def _index_of(records: List[Any], item_id: str) -> Optional[int]:
        for index, record in enumerate(records):
            if isinstance(record, dict) and record.get("id") == item_id:
                return index
        return None

    # ----------------------------- reads -----------------------------

    def parse_all(self) -> List[ParseResult[T]]:
        """One ParseResult per stored record, valid or not."""
        return [self.parse(record) for record in self.load_raw()]

    def get_all(self) -> List[T]:
        """
        All valid entities in insertion order.

        Records failing the schema are left in storage, excluded here and
        logged; use `parse_all()` / `invalid_records()` to inspect them.
        """
        items: List[T] = []
        for result in self.parse_all():
            if result.ok:
                items.append(result.entity)
            else:
                logger.warning(
                    "Skipping invalid %s record %s: %s",
                    self.key, result.record_id or "<no id>", result.reason,
                )
        return items

    def invalid_records(self) -> List[ParseResult[T]]:
        return [result for result in self.parse_all() if not result.ok]

    def get_by_id(self, item_id: str) -> Optional[T]:
        for item in self.get_all():
            if getattr(item, "id", None) == item_id:
                return item
        return None

    def count(self) -> int:
        return len(self.get_all())

    # ----------------------------- writes -----------------------------

    def _new_id(self, taken: Set[Any]) -> str:
        new_id = generate_id(self.clock)
        while new_id in taken:
            new_id = generate_id(self.clock)
        return new_id

    def _prepare(self, record: RawRecord) -> RawRecord:
        """Hook for subclasses to fill defaults on a new record before parsing."""
        return record

    def _validate_record(self, record: RawRecord) -> T:
        migrated = self._migrate([record])[0]
        result = self.parse(migrated)
        if not result.ok:
            raise RecordValidationError(self.key, result.reason)
        return result.entity

    def create(self, data: Union[Mapping[str, Any], T]) -> T:
        """
        Append a new record with a generated id.

        Any `id` in `data` is discarded. Raises RecordValidationError (and
        writes nothing) if the result does not fit the schema.
        """
        fields = to_plain(data)
        fields.pop("id", None)

        records = self.load_raw()
        taken = {r.get("id") for r in records if isinstance(r, dict)}
        record = self._prepare({**fields, "id": self._new_id(taken)})
        entity = self._validate_record(record)

        records.append(self.to_raw(entity))
        self._save_raw(records)
        logger.debug("Created %s record %s", self.key, getattr(entity, "id", ""))
        return entity

    def update(self, item_id: str, partial: Union[Mapping[str, Any], T]) -> Optional[T]:
        """
        Shallow-merge `partial` onto the record with `item_id`.

        Returns None (no write) when the id is unknown. The id itself is never
        changed. A stored record that currently fails the schema can be repaired
        this way.
        """
        records = self.load_raw()
        index = self._index_of(records, item_id)
        if index is None:
            return None

        changes = to_plain(partial)
        changes.pop("id", None)
        entity = self._validate_record({**records[index], **changes})

        records[index] = self.to_raw(entity)
        self._save_raw(records)
        return entity

    def delete(self, item_id: str) -> bool:
        """Remove the record with `item_id`. Writes only if something was removed."""
        records = self.load_raw()
        kept = [
            r for r in records
            if not (isinstance(r, dict) and r.get("id") == item_id)
        ]
        if len(kept) < len(records):
            self._save_raw(kept)
            return True
        return False

    def purge_invalid(self) -> int:
        """Drop records that fail the schema from storage. Returns how many."""
        records = self.load_raw()
        kept = [r for r in records if self.parse(r).ok]
        removed = len(records) - len(kept)
        if removed:
            self._save_raw(kept)
            logger.info("Purged %d invalid %s record(s)", removed, self.key)
        return removed


class SingletonRepository(Generic[T]):
    """A single record (profile, cached stats) stored as one JSON object."""

    def __init__(
        self,
        store: PersistentStore,
        key: str,
        entity_type: Type[T],
        default: Callable[[], T],
    ):
        self.store = store
        self.key = key
        self.entity_type = entity_type
        self._default = default
        self._adapter: TypeAdapter[T] = TypeAdapter(entity_type)

    def get(self) -> T:
        """Stored record, or the default (persisted) when absent or unreadable."""
        data = self.store.get(self.key, revive_dates=False)
        if isinstance(data, dict):
            try:
                return self._adapter.validate_python(data)
            except ValidationError as e:
                logger.warning("Stored %s is invalid, using default: %s", self.key, describe_errors(e))
                return self._default()
        entity = self._default()
        self.save(entity)
        return entity

    def save(self, entity: T) -> bool:
        return self.store.set(self.key, self._adapter.dump_python(entity, mode="json"))

    def update(self, partial: Union[Mapping[str, Any], T]) -> T:
        """Shallow-merge `partial` onto the stored record and persist it."""
        current = self._adapter.dump_python(self.get(), mode="json")
        changes = to_plain(partial) if partial else {}
        try:
            entity = self._adapter.validate_python({**current, **changes})
        except ValidationError as e:
            raise RecordValidationError(self.key, describe_errors(e)) from e
        self.save(entity)
        return entity
