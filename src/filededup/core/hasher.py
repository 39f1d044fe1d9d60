"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements content fingerprinting for file sources.
Uses SHA-256 over the full byte stream, read in fixed-size chunks.

This implementation ensures predictable behavior:
- The digest depends only on the bytes, never on name, path or metadata
- Any open/read failure becomes UnreadableSource for that one file
- Streams are always closed, including on cancellation
"""

import hashlib
from typing import Callable, Optional

from filededup.core.exceptions import ScanCancelled, UnreadableSource
from filededup.core.interfaces import HashAlgorithm, Fingerprinter
from filededup.core.models import FileSource

DEFAULT_CHUNK_SIZE = 1024 * 1024


class SHA256AlgorithmImpl(HashAlgorithm):
    """SHA-256, rendered as 64 lowercase hex characters."""
    name = "sha256"

    def new(self):
        return hashlib.sha256()


class HasherImpl(Fingerprinter):
    """
    Concrete implementation of Fingerprinter.
    Uses an injected HashAlgorithm instance for flexibility and testability.
    """

    def __init__(self, algorithm: Optional[HashAlgorithm] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm or SHA256AlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_digest(
        self,
        source: FileSource,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> str:
        """
        Computes the digest of the entire byte stream of `source`.

        Raises:
            UnreadableSource: If opening or reading the stream fails
            ScanCancelled: If stopped_flag returns True between chunks
        """
        hasher = self.algorithm.new()
        try:
            with source.open() as stream:
                while True:
                    if stopped_flag and stopped_flag():
                        raise ScanCancelled(f"Cancelled while reading {source.path}")
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    hasher.update(chunk)
        except ScanCancelled:
            raise
        except Exception as e:
            # The opener is caller-supplied, so any failure counts as unreadable
            raise UnreadableSource(source.path, str(e)) from e
        return hasher.hexdigest()

    def digest_bytes(self, data: bytes) -> str:
        """Digest of in-memory content."""
        hasher = self.algorithm.new()
        hasher.update(data)
        return hasher.hexdigest()
