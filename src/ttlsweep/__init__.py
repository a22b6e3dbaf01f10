"""
ttlsweep: background TTL expiry sweeper.

Periodically removes records that have outlived a retention window from
both a blob store and a metadata store.
"""

__version__ = "0.1.0"
