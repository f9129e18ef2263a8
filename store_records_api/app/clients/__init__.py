"""
Clients for external services.
"""

from .record_service import BatchResponse, RecordServiceClient, RequestDescriptor, filter_selector

__all__ = ["BatchResponse", "RecordServiceClient", "RequestDescriptor", "filter_selector"]
