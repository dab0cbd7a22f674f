"""Credential cache - tagged cache keys and the append-only cache itself."""

from accredit.cache.keys import CacheKey, EmccKey, IcfKey
from accredit.cache.credential_cache import CredentialCache

__all__ = ["CacheKey", "EmccKey", "IcfKey", "CredentialCache"]
