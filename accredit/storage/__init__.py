"""Storage backends for the credential cache and coach verification state.

    Storage          - Protocol both backends satisfy
    InMemoryStorage  - Dict-based store for tests and demos
    SqlStorage       - SQLAlchemy store for any configured database
"""

from accredit.storage.base import Storage
from accredit.storage.memory import InMemoryStorage
from accredit.storage.sql import SqlStorage


def build_storage(database_url: str = "") -> Storage:
    """Return the backend selected by *database_url* (empty means in-memory)."""
    if not database_url:
        return InMemoryStorage()
    storage = SqlStorage(database_url)
    storage.create_all_tables()
    return storage


__all__ = ["Storage", "InMemoryStorage", "SqlStorage", "build_storage"]
