"""
Entry points used by the store form.

``StoreService`` bundles the three operations the form calls:

* :meth:`StoreService.get_stores_list` – every store, projected to the
  columns the form's selector shows and renamed to its naming.
* :meth:`StoreService.get_store_data_by_store_name` – the aggregate
  document of one store.  Errors propagate to the caller.
* :meth:`StoreService.save_store_data` – save an edited document.
  Never raises; the result is ``{"success": true}`` or
  ``{"success": false, "error": "<message>"}``.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from ..clients.record_service import RecordServiceClient
from ..core.config import Settings
from ..schemas.store import (
    STORE_LIST_COLUMNS,
    STORE_TABLE,
    AggregateDocument,
    SaveResult,
    StoreDataSave,
    StoreSummary,
)
from .aggregate_reader import AggregateReader
from .store_resolver import StoreResolver
from .transactional_writer import TransactionalWriter

logger = logging.getLogger(__name__)


class StoreService:
    """Facade over the resolver, reader and writer."""

    def __init__(self, client: RecordServiceClient) -> None:
        self.client = client
        self.resolver = StoreResolver(client)
        self.reader = AggregateReader(client, self.resolver)
        self.writer = TransactionalWriter(client, self.resolver)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreService":
        return cls(RecordServiceClient.from_settings(settings))

    def get_stores_list(self) -> List[StoreSummary]:
        """Return all stores with their columns renamed for the form."""
        rows = self.client.find(STORE_TABLE)
        stores = [
            StoreSummary(**{ui: _as_text(row.get(remote)) for remote, ui in STORE_LIST_COLUMNS.items()})
            for row in rows
        ]
        logger.info("Listed %d stores", len(stores))
        return stores

    def get_store_data_by_store_name(self, store_name: str) -> AggregateDocument:
        logger.info("Loading store %r", store_name)
        return self.reader.read_aggregate(store_name)

    def save_store_data(self, document: Any) -> Dict[str, Any]:
        """Save ``document`` and return the form's success/failure value."""
        try:
            if not isinstance(document, StoreDataSave):
                document = StoreDataSave.model_validate(document)
        except ValidationError as exc:
            logger.warning("Rejected malformed save request: %s", exc)
            return SaveResult(success=False, error=f"Invalid store data: {exc}").model_dump(exclude_none=True)
        if not document.store_name:
            return SaveResult(success=False, error="Store name is required").model_dump(exclude_none=True)

        logger.info("Saving store %r", document.store_name)
        result = self.writer.write_aggregate(document)
        return result.to_response().model_dump(exclude_none=True)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
