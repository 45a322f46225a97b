"""Clients for the content store and compute-session provider."""

from vfpipe.clients.compute import HttpComputeSessionClient
from vfpipe.clients.content_store import HttpContentStoreClient
from vfpipe.clients.protocols import ComputeSessionClient, ContentStoreClient

__all__ = [
    "ComputeSessionClient",
    "ContentStoreClient",
    "HttpComputeSessionClient",
    "HttpContentStoreClient",
]
