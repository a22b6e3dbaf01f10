# tests/fixtures/__init__.py
"""Shared pytest fixtures for ttlsweep tests.

Available fixtures:
- metadata_db, sql_metadata_store: fresh in-memory SQL metadata store
- blob_store: filesystem blob store under tmp_path
- call_log, fake_blob_store, fake_metadata_store: in-memory store doubles
  sharing one call log for ordering assertions
"""
