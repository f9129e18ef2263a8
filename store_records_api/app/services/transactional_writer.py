"""
Save an edited aggregate document back to the tabular store.

The tabular store has no multi-statement transactions, so the save is
a pseudo-transaction made of ordered phases:

1. **resolve** – look up the ``StoreID`` of ``storeName``.  A save never
   creates a store.
2. **delete** – for each child table, in ``CHILD_TABLES`` order, find
   every row carrying the ``StoreID`` and delete them by ``ID`` in one
   call per table.
3. **update** – if the document carries parent columns, stamp them with
   the ``StoreID`` and send one ``Edit`` to ``Stores``.
4. **insert** – for each child table with submitted rows, stamp every
   row with the ``StoreID`` and send one ``Add`` per table.  A submitted
   ``ID`` is kept only if the delete phase just removed it from this
   store; any other ``ID`` is dropped and the remote store assigns one.

All calls are sequential; every delete has landed before the first
insert is sent.

The save is NOT atomic.  The first failure stops the remaining phases
and nothing is rolled back, so a failure after the delete phase has
started leaves the store partially updated (for example child rows
deleted but not yet re-inserted).  The failure is reported with the
phase and table it happened in so the user can retry the save.
Two concurrent saves of the same store are not serialised and may
interleave.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ..clients.record_service import RecordServiceClient, filter_selector
from ..core.errors import StoreRecordsError, WriteError
from ..schemas.store import (
    CHILD_KEY,
    CHILD_TABLES,
    STORE_KEY,
    STORE_TABLE,
    ChildRow,
    KeyValue,
    SaveResult,
    StoreDataSave,
)
from .store_resolver import StoreResolver

logger = logging.getLogger(__name__)

PHASE_RESOLVE = "resolve"
PHASE_DELETE = "delete"
PHASE_UPDATE = "update"
PHASE_INSERT = "insert"


@dataclass
class WriteResult:
    """Outcome of :meth:`TransactionalWriter.write_aggregate`."""

    success: bool
    error: Optional[WriteError] = None

    def to_response(self) -> SaveResult:
        if self.success:
            return SaveResult(success=True)
        return SaveResult(success=False, error=str(self.error))


class TransactionalWriter:
    """Replace a store's child record sets and update its parent record."""

    def __init__(self, client: RecordServiceClient, resolver: StoreResolver) -> None:
        self.client = client
        self.resolver = resolver

    def write_aggregate(self, document: StoreDataSave) -> WriteResult:
        """Run the save phases in order; never raises.

        Returns a successful ``WriteResult`` only when every phase
        completed.  Otherwise the result carries a ``WriteError`` naming
        the phase and table that failed.
        """
        phase, table = PHASE_RESOLVE, STORE_TABLE
        try:
            store_id = self.resolver.resolve(document.store_name).store_id

            phase = PHASE_DELETE
            deleted: Dict[str, Set[str]] = {}
            for table in CHILD_TABLES:
                deleted[table] = self._delete_children(table, store_id)

            phase, table = PHASE_UPDATE, STORE_TABLE
            self._update_parent(document, store_id)

            phase = PHASE_INSERT
            for table in CHILD_TABLES:
                self._insert_children(table, store_id, document.children(table), deleted[table])
        except StoreRecordsError as exc:
            return self._failed(document.store_name, phase, table, exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while saving store %r", document.store_name)
            return self._failed(document.store_name, phase, table, exc)

        logger.info("Saved store %r (%s=%s)", document.store_name, STORE_KEY, store_id)
        return WriteResult(success=True)

    def _delete_children(self, table: str, store_id: KeyValue) -> Set[str]:
        """Delete the store's rows in ``table`` and return the ``ID``s removed."""
        existing = self.client.find(table, filter_selector(table, STORE_KEY, store_id))
        keys = [{CHILD_KEY: row[CHILD_KEY]} for row in existing if row.get(CHILD_KEY) not in (None, "")]
        if len(keys) < len(existing):
            logger.warning(
                "%d rows of %s for %s=%s have no %s and cannot be deleted",
                len(existing) - len(keys),
                table,
                STORE_KEY,
                store_id,
                CHILD_KEY,
            )
        if not keys:
            return set()
        self.client.delete(table, keys)
        logger.debug("Deleted %d rows from %s for %s=%s", len(keys), table, STORE_KEY, store_id)
        return {str(key[CHILD_KEY]) for key in keys}

    def _update_parent(self, document: StoreDataSave, store_id: KeyValue) -> None:
        if document.store is None:
            return
        row = document.store.to_row()
        if not row:
            return
        row[STORE_KEY] = store_id
        self.client.edit(STORE_TABLE, [row])
        logger.debug("Updated %s row %s=%s", STORE_TABLE, STORE_KEY, store_id)

    def _insert_children(
        self, table: str, store_id: KeyValue, records: List[ChildRow], deleted: Set[str]
    ) -> None:
        if not records:
            return
        rows: List[Dict[str, Any]] = []
        for record in records:
            row = record.to_row()
            row[STORE_KEY] = store_id
            # Only keys this save just freed may be reused; anything else
            # could belong to another store's row.
            if CHILD_KEY in row and str(row[CHILD_KEY]) not in deleted:
                logger.debug("Dropping foreign %s %r from %s row", CHILD_KEY, row.pop(CHILD_KEY), table)
            rows.append(row)
        self.client.add(table, rows)
        logger.debug("Inserted %d rows into %s for %s=%s", len(rows), table, STORE_KEY, store_id)

    def _failed(self, store_name: str, phase: str, table: str, exc: Exception) -> WriteResult:
        error = WriteError(phase, table, exc)
        if phase != PHASE_RESOLVE:
            logger.error(
                "Save of store %r aborted during %s of %s; the store may be partially updated: %s",
                store_name,
                phase,
                table,
                exc,
            )
        else:
            logger.error("Save of store %r aborted: %s", store_name, exc)
        return WriteResult(success=False, error=error)
