"""
Read a store together with all of its dependent record sets.

After resolving the store, the four child tables are queried with one
``Find`` each.  The queries are independent, so they are dispatched as
a single concurrent batch and joined before anything is assembled.
The read is all-or-nothing: if any child query fails the whole read
fails with ``PartialFetchFailure`` and no partial document is returned.
"""

import logging
from typing import Dict, List

from pydantic import ValidationError

from ..clients.record_service import ACTION_FIND, RecordServiceClient, filter_selector
from ..core.errors import PartialFetchFailure
from ..schemas.store import CHILD_MODELS, CHILD_TABLES, STORE_KEY, AggregateDocument, ChildRecord, lower_camel
from .store_resolver import StoreResolver

logger = logging.getLogger(__name__)


class AggregateReader:
    """Build the aggregate document of one store."""

    def __init__(self, client: RecordServiceClient, resolver: StoreResolver) -> None:
        self.client = client
        self.resolver = resolver

    def read_aggregate(self, store_name: str) -> AggregateDocument:
        resolved = self.resolver.resolve(store_name)

        descriptors = [
            self.client.build_batch_request(
                table,
                self.client.build_payload(
                    ACTION_FIND, selector=filter_selector(table, STORE_KEY, resolved.store_id)
                ),
            )
            for table in CHILD_TABLES
        ]
        responses = self.client.fetch_all(descriptors)

        failed = [response for response in responses if not response.ok]
        if failed:
            first = failed[0]
            logger.error(
                "Reading store %r failed on %s",
                store_name,
                ", ".join(f"{r.table} ({r.status_code})" for r in failed),
            )
            raise PartialFetchFailure(first.table, first.status_code, [r.table for r in failed])

        children: Dict[str, List[ChildRecord]] = {}
        for response in responses:
            model = CHILD_MODELS[response.table]
            try:
                children[lower_camel(response.table)] = [model.model_validate(row) for row in response.rows]
            except ValidationError as exc:
                # Rows without their keys cannot be saved back; treat the fetch as failed.
                logger.error("Malformed %s rows for store %r: %s", response.table, store_name, exc)
                raise PartialFetchFailure(response.table, response.status_code, [response.table]) from exc

        logger.info(
            "Read store %r (%s=%s): %s",
            store_name,
            STORE_KEY,
            resolved.store_id,
            ", ".join(f"{table}={len(rows)}" for table, rows in children.items()),
        )
        return AggregateDocument(store=resolved.record, **children)
