"""
Store endpoints for API v1.

These routes are what the store form calls: the list of stores for
its selector, the full document of one store and the save of an
edited document.

Read errors become HTTP errors (404 for an unknown store, 409 for a
name shared by several stores, 502 when the tabular store fails).  A
save always answers 200 with ``{"success": ...}`` so the form can show
the message; see ``TransactionalWriter`` for what a failed save may
leave behind.

The handlers are plain ``def`` functions because the record service
client blocks on network I/O; FastAPI runs them in its thread pool.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, status

from store_records_api.app.api.dependencies import get_store_service
from store_records_api.app.core.errors import (
    DuplicateKey,
    NotFound,
    PartialFetchFailure,
    RemoteCallFailed,
)
from store_records_api.app.core.security import require_api_token
from store_records_api.app.schemas.store import AggregateDocument, SaveResult, StoreSummary
from store_records_api.app.services.store_service import StoreService

router = APIRouter(dependencies=[Depends(require_api_token)])


@router.get("/", response_model=List[StoreSummary])
def list_stores(service: StoreService = Depends(get_store_service)) -> List[StoreSummary]:
    """Return every store with the columns shown in the form's selector."""
    try:
        return service.get_stores_list()
    except RemoteCallFailed as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("/{store_name:path}", response_model=AggregateDocument)
def get_store(store_name: str, service: StoreService = Depends(get_store_service)) -> AggregateDocument:
    """Return the store called ``store_name`` and all of its child records."""
    try:
        return service.get_store_data_by_store_name(store_name)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DuplicateKey as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except (PartialFetchFailure, RemoteCallFailed) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.put("/{store_name:path}", response_model=SaveResult, response_model_exclude_none=True)
def save_store(
    store_name: str,
    document: Any = Body(None),
    service: StoreService = Depends(get_store_service),
) -> Dict[str, Any]:
    """Replace the child records of ``store_name`` and update its parent columns.

    The store name in the path wins over any ``storeName`` in the body.
    Validation problems in the body, including a body that is missing
    or not a JSON object, are reported in the result rather than as
    HTTP 422, like every other save failure.  The path is matched with
    the ``path`` converter so store names containing ``/`` resolve.
    """
    if isinstance(document, dict):
        document = {**document, "storeName": store_name}
    return service.save_store_data(document)
