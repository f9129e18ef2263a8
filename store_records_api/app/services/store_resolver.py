"""
Resolution of store names to their system key.

The form identifies a store by its ``StoreName``; the child tables
reference it by ``StoreID``.  Every read and write resolves the name
again because the tabular store is the single source of truth and may
change between calls, so nothing is cached here.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ..clients.record_service import RecordServiceClient, filter_selector
from ..core.errors import DuplicateKey, NotFound
from ..schemas.store import STORE_KEY, STORE_NAME_COLUMN, STORE_TABLE, KeyValue

logger = logging.getLogger(__name__)


@dataclass
class ResolvedStore:
    """The system key of a store and the full record it was read from."""

    store_id: KeyValue
    record: Dict[str, Any]


class StoreResolver:
    """Map a store's display name to its unique ``StoreID``."""

    def __init__(self, client: RecordServiceClient) -> None:
        self.client = client

    def resolve(self, store_name: str) -> ResolvedStore:
        """Return the single store called ``store_name``.

        Raises ``NotFound`` when no store matches and ``DuplicateKey``
        when several do.  ``RemoteCallFailed`` from the lookup itself
        propagates unchanged.
        """
        rows = self.client.find(STORE_TABLE, filter_selector(STORE_TABLE, STORE_NAME_COLUMN, store_name))
        if not rows:
            raise NotFound(store_name)
        if len(rows) > 1:
            logger.error("Store name %r matches %d records", store_name, len(rows))
            raise DuplicateKey(store_name, len(rows))
        record = rows[0]
        store_id = record.get(STORE_KEY)
        if store_id in (None, ""):
            # A row without its key cannot be used to reach child records.
            logger.error("Store %r has no %s", store_name, STORE_KEY)
            raise NotFound(store_name)
        logger.debug("Resolved store %r to %s=%s", store_name, STORE_KEY, store_id)
        return ResolvedStore(store_id=store_id, record=record)
