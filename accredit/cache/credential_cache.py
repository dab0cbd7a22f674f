"""Credential cache over a storage backend.

Lookups return the newest active row for a key; inserts always append.
A cache failure never changes a verdict: a failed lookup behaves like a miss
and a failed insert is only logged.
"""

from __future__ import annotations

import logging

from accredit.cache.keys import CacheKey, EmccKey, IcfKey
from accredit.errors import StorageError
from accredit.models import VerifiedCredential
from accredit.storage.base import Storage

logger = logging.getLogger(__name__)


class CredentialCache:
    """Keyed lookup of previously confirmed credentials."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def lookup(self, key: CacheKey) -> VerifiedCredential | None:
        if isinstance(key, EmccKey):
            if not key.reference:
                return None
        elif isinstance(key, IcfKey):
            if not key.name.strip():
                return None
        else:
            raise TypeError(f"Unsupported cache key: {key!r}")

        try:
            rows = self._storage.find_credentials(key.body, key.credential_number, active_only=True)
        except StorageError as exc:
            logger.warning("Cache lookup failed for %s %s: %s", key.body.value, key.credential_number, exc)
            return None

        if not rows:
            logger.debug("Cache miss: %s %s", key.body.value, key.credential_number)
            return None
        logger.info("Cache hit: %s %s", key.body.value, key.credential_number)
        return rows[0]

    def insert(self, record: VerifiedCredential) -> None:
        try:
            self._storage.add_credential(record)
        except StorageError as exc:
            logger.error("Failed to cache credential %s %s: %s",
                         record.body.value, record.credential_number, exc)
            return
        logger.info("Cached credential %s %s", record.body.value, record.credential_number)
