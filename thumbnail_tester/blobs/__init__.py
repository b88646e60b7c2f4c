"""
Blob store implementations.

Provides implementations of the BlobStore interface for thumbnail images.

Available implementations:
- DirectoryBlobStore: Files below a root directory, served from a base URL
- MemoryBlobStore: Process-local payloads, for tests and dry runs
"""

from .data_url import DecodedImage, decode_data_url, encode_data_url
from .directory_blobs import DirectoryBlobStore
from .memory_blobs import MemoryBlobStore

__all__ = [
    "DecodedImage",
    "DirectoryBlobStore",
    "MemoryBlobStore",
    "decode_data_url",
    "encode_data_url",
]
