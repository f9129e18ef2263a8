"""
FastAPI dependencies shared by the routers.

The application keeps its ``Settings`` and ``StoreService`` on
``app.state`` (set up by ``main.create_app``); routes reach them
through these helpers instead of importing module-level globals.
"""

from fastapi import Request

from ..core.config import Settings
from ..services.store_service import StoreService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store_service(request: Request) -> StoreService:
    return request.app.state.store_service
