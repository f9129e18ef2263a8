"""
Top‑level router for version 1 of the API.

Aggregates the area routers under a unified prefix.  When new
endpoints are added, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import info, stores

router = APIRouter()

router.include_router(stores.router, prefix="/stores", tags=["stores"])
router.include_router(info.router, prefix="/info", tags=["info"])
