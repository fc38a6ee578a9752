"""
Data source services.

Services responsible for opening recorded datasets and resolving jet collections.
"""

from .event_source import EventStreamHandle, open_event_stream
from .collection_provider import CollectionProvider, BranchCollectionProvider

__all__ = [
    "EventStreamHandle",
    "open_event_stream",
    "CollectionProvider",
    "BranchCollectionProvider",
]
