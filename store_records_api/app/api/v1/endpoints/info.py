"""
Information endpoint for API v1.

Returns the service name and version together with the tables the
service reads and writes, so that an operator can check which
deployment the form is talking to.  Publicly accessible.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from store_records_api.app.api.dependencies import get_settings
from store_records_api.app.core.config import Settings
from store_records_api.app.schemas.store import CHILD_TABLES, STORE_TABLE

router = APIRouter()


@router.get("/", response_model=Dict[str, Any])
def get_info(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return {
        "name": settings.project_name,
        "version": settings.api_version,
        "parentTable": STORE_TABLE,
        "childTables": list(CHILD_TABLES),
    }
