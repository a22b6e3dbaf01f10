# src/ttlsweep/core/blob_store.py
"""
Filesystem blob store holding record payloads.

Uses content-addressable storage (hash-based) so that:
- Blob ids are derived from content and can be validated by shape
- Deletion is idempotent: removing an absent blob is not an error
- Retrieval verifies integrity against the id
"""

import hashlib
import hmac
import re
from pathlib import Path

__all__ = ["BlobIntegrityError", "FilesystemBlobStore"]

# SHA-256 hex digest: exactly 64 lowercase hex characters
_SHA256_HEX_PATTERN = re.compile(r"^[a-f0-9]{64}$")


class BlobIntegrityError(Exception):
    """Raised when blob content doesn't match its id."""

    pass


class FilesystemBlobStore:
    """Filesystem-based blob store.

    Stores blobs in a directory structure using the first 2 characters
    of the id as subdirectory for better file distribution.

    Structure: base_path/ab/abcdef123...
    """

    def __init__(self, base_path: Path) -> None:
        """Initialize filesystem store.

        Args:
            base_path: Root directory for blob storage (created if missing)
        """
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for_id(self, blob_id: str) -> Path:
        """Get filesystem path for a blob id.

        Raises:
            ValueError: If blob_id is not a valid SHA-256 hex digest
                        or if the resolved path escapes base_path
        """
        if not _SHA256_HEX_PATTERN.match(blob_id):
            raise ValueError(f"Invalid blob_id: must be 64 lowercase hex characters, got {repr(blob_id)[:50]}")

        path = self.base_path / blob_id[:2] / blob_id

        try:
            resolved = path.resolve()
            base_resolved = self.base_path.resolve()
            if not resolved.is_relative_to(base_resolved):
                raise ValueError(f"Invalid blob_id: path traversal detected, resolved path {resolved} is not under {base_resolved}")
        except (OSError, ValueError) as e:
            raise ValueError(f"Invalid blob_id: path resolution failed for {repr(blob_id)[:50]}") from e

        return path

    def store(self, content: bytes) -> str:
        """Store content and return its blob id.

        Raises:
            BlobIntegrityError: If an existing file doesn't match the id
        """
        blob_id = hashlib.sha256(content).hexdigest()
        path = self._path_for_id(blob_id)

        if path.exists():
            existing = path.read_bytes()
            actual_id = hashlib.sha256(existing).hexdigest()
            if not hmac.compare_digest(actual_id, blob_id):
                raise BlobIntegrityError(f"Blob integrity check failed on store: existing file has hash {actual_id}, expected {blob_id}")
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        return blob_id

    def retrieve(self, blob_id: str) -> bytes:
        """Retrieve content by id with integrity verification.

        Raises:
            KeyError: If blob not found
            BlobIntegrityError: If content doesn't match the id
        """
        path = self._path_for_id(blob_id)
        if not path.exists():
            raise KeyError(f"Blob not found: {blob_id}")

        content = path.read_bytes()
        actual_id = hashlib.sha256(content).hexdigest()
        if not hmac.compare_digest(actual_id, blob_id):
            raise BlobIntegrityError(f"Blob integrity check failed: expected {blob_id}, got {actual_id}")

        return content

    def exists(self, blob_id: str) -> bool:
        """Check if a blob exists."""
        return self._path_for_id(blob_id).exists()

    def delete_blob(self, blob_id: str) -> bool:
        """Delete a blob by id.

        Returns:
            True if the blob was deleted, False if not found
        """
        path = self._path_for_id(blob_id)
        try:
            path.unlink()
        except FileNotFoundError:
            # Concurrent workers may race on the same blob
            return False
        return True
