"""
Top‑level package for the Store Records API.

This file makes ``store_records_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``store_records_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
