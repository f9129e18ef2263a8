"""
Error taxonomy for the store records layer.

Every failure the orchestration layer can report is a subclass of
``StoreRecordsError`` and carries the structured fields a caller needs
to render a message (table name, action, status code, phase).  The
read path lets these propagate; the write path converts them into a
``WriteResult`` at its boundary.
"""

from typing import Iterable, List, Optional


class StoreRecordsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationMissing(StoreRecordsError):
    """Required settings are absent at start-up."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names: List[str] = list(names)
        super().__init__(f"Missing required configuration: {', '.join(self.names)}")


class RemoteCallFailed(StoreRecordsError):
    """The tabular store answered with a non-success status or was unreachable."""

    def __init__(
        self,
        table: str,
        action: str,
        status_code: Optional[int],
        detail: str = "",
    ) -> None:
        self.table = table
        self.action = action
        self.status_code = status_code
        self.detail = detail
        status = status_code if status_code is not None else "no response"
        message = f"{action} on {table} failed ({status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NotFound(StoreRecordsError):
    """No store matched the requested name."""

    def __init__(self, store_name: str) -> None:
        self.store_name = store_name
        super().__init__(f"Store not found: {store_name}")


class DuplicateKey(StoreRecordsError):
    """More than one store matched a name that must be unique."""

    def __init__(self, store_name: str, count: int) -> None:
        self.store_name = store_name
        self.count = count
        super().__init__(f"Store name is not unique: {store_name} ({count} records)")


class PartialFetchFailure(StoreRecordsError):
    """At least one of the concurrent child-table fetches failed.

    ``table`` and ``status_code`` describe the first failing table in
    child-table order; ``failed_tables`` lists all of them.
    """

    def __init__(
        self,
        table: str,
        status_code: Optional[int],
        failed_tables: Optional[Iterable[str]] = None,
    ) -> None:
        self.table = table
        self.status_code = status_code
        self.failed_tables: List[str] = list(failed_tables) if failed_tables else [table]
        status = status_code if status_code is not None else "no response"
        super().__init__(f"Failed to fetch {table} ({status})")


class WriteError(StoreRecordsError):
    """A phase of the multi-table write failed; remaining phases were skipped."""

    def __init__(self, phase: str, table: str, cause: Exception) -> None:
        self.phase = phase
        self.table = table
        self.cause = cause
        self.status_code: Optional[int] = getattr(cause, "status_code", None)
        super().__init__(f"Save failed during {phase} of {table}: {cause}")
