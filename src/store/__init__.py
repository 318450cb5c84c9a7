"""Document store adapters.

The Cassandra backend is not exported here so that importing the package does
not load the Cassandra driver; import it from ``src.store.cassandra``.
"""

from .base import DocumentStore, Filters, Record, matches
from .memory import InMemoryDocumentStore
from .retry import RetryingDocumentStore


__all__ = [
    "DocumentStore",
    "Filters",
    "InMemoryDocumentStore",
    "Record",
    "RetryingDocumentStore",
    "matches",
]
