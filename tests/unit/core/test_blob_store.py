"""Tests for the filesystem blob store."""

import hashlib
from pathlib import Path

import pytest

from ttlsweep.core.blob_store import BlobIntegrityError, FilesystemBlobStore


class TestFilesystemBlobStore:
    def test_store_returns_sha256_id(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = blob_store.store(b"payload")
        assert blob_id == hashlib.sha256(b"payload").hexdigest()
        assert blob_store.retrieve(blob_id) == b"payload"

    def test_layout_uses_two_char_prefix(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = blob_store.store(b"payload")
        assert (blob_store.base_path / blob_id[:2] / blob_id).exists()

    def test_store_is_idempotent(self, blob_store: FilesystemBlobStore) -> None:
        assert blob_store.store(b"same") == blob_store.store(b"same")

    def test_delete_blob(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = blob_store.store(b"payload")
        assert blob_store.delete_blob(blob_id) is True
        assert not blob_store.exists(blob_id)

    def test_delete_missing_blob_returns_false(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = hashlib.sha256(b"never stored").hexdigest()
        assert blob_store.delete_blob(blob_id) is False

    def test_delete_twice(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = blob_store.store(b"payload")
        assert blob_store.delete_blob(blob_id) is True
        assert blob_store.delete_blob(blob_id) is False

    @pytest.mark.parametrize("bad_id", ["", "abc", "../" + "a" * 61, "A" * 64, "g" * 64])
    def test_malformed_ids_rejected(self, blob_store: FilesystemBlobStore, bad_id: str) -> None:
        with pytest.raises(ValueError, match="Invalid blob_id"):
            blob_store.delete_blob(bad_id)

    def test_retrieve_missing_raises_key_error(self, blob_store: FilesystemBlobStore) -> None:
        with pytest.raises(KeyError):
            blob_store.retrieve(hashlib.sha256(b"x").hexdigest())

    def test_retrieve_detects_corruption(self, blob_store: FilesystemBlobStore) -> None:
        blob_id = blob_store.store(b"payload")
        (blob_store.base_path / blob_id[:2] / blob_id).write_bytes(b"tampered")
        with pytest.raises(BlobIntegrityError):
            blob_store.retrieve(blob_id)

    def test_creates_base_path(self, tmp_path: Path) -> None:
        base = tmp_path / "nested" / "blobs"
        FilesystemBlobStore(base)
        assert base.is_dir()
