"""In-memory storage backend for credentials and coach records."""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Any

from accredit.models import AccreditationBody, CoachRecord, VerifiedCredential

_CREDENTIAL = "credential"
_COACH = "coach"


class InMemoryStorage:
    """Thread-safe dict-based storage.

    Records are stored by (record_type, record_id) tuples.  Credential rows
    get a fresh id on every insert, so the credential table is append-only.
    """

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], dict[str, Any]] = {}
        self._lock = threading.Lock()

    # -- Generic records -------------------------------------------------------

    def put(self, record_type: str, record_id: str, data: dict[str, Any]) -> None:
        """Store or overwrite a record."""
        with self._lock:
            self._store[(record_type, record_id)] = copy.deepcopy(data)

    def get(self, record_type: str, record_id: str) -> dict[str, Any] | None:
        """Retrieve a record, or None if not found."""
        with self._lock:
            record = self._store.get((record_type, record_id))
            return copy.deepcopy(record) if record is not None else None

    def find(self, record_type: str, **attrs: Any) -> list[dict[str, Any]]:
        """Return records of *record_type* matching all given attribute values."""
        results: list[dict[str, Any]] = []
        with self._lock:
            for (rt, _), v in self._store.items():
                if rt != record_type:
                    continue
                if all(v.get(k) == val for k, val in attrs.items()):
                    results.append(copy.deepcopy(v))
        return results

    def count(self, record_type: str | None = None) -> int:
        """Count records, optionally filtered by type."""
        with self._lock:
            if record_type is None:
                return len(self._store)
            return sum(1 for (rt, _) in self._store if rt == record_type)

    def clear(self) -> None:
        """Remove all records."""
        with self._lock:
            self._store.clear()

    # -- Credentials ----------------------------------------------------------

    def add_credential(self, record: VerifiedCredential) -> None:
        self.put(_CREDENTIAL, uuid.uuid4().hex, record.to_dict())

    def find_credentials(
        self,
        body: AccreditationBody,
        credential_number: str,
        *,
        active_only: bool = True,
    ) -> list[VerifiedCredential]:
        attrs: dict[str, Any] = {
            "accreditation_body": body.value,
            "credential_number": credential_number,
        }
        if active_only:
            attrs["is_active"] = True
        rows = [VerifiedCredential.from_dict(d) for d in self.find(_CREDENTIAL, **attrs)]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    # -- Coaches --------------------------------------------------------------

    def get_coach(self, coach_id: str) -> CoachRecord | None:
        data = self.get(_COACH, coach_id)
        return CoachRecord.from_dict(data) if data is not None else None

    def save_coach(self, record: CoachRecord) -> None:
        self.put(_COACH, record.coach_id, record.to_dict())

    def find_coaches(
        self,
        body: AccreditationBody,
        *,
        verified: bool | None = None,
        level: str | None = None,
        name_contains: str | None = None,
        profile_url: str | None = None,
        exclude_id: str | None = None,
    ) -> list[CoachRecord]:
        attrs: dict[str, Any] = {"accreditation_body": body.value}
        if verified is not None:
            attrs["verified"] = verified
        if level is not None:
            attrs["accreditation_level"] = level
        if profile_url is not None:
            attrs["profile_url"] = profile_url

        coaches = [CoachRecord.from_dict(d) for d in self.find(_COACH, **attrs)]
        if name_contains:
            needle = name_contains.lower()
            coaches = [c for c in coaches if needle in c.name.lower()]
        if exclude_id is not None:
            coaches = [c for c in coaches if c.coach_id != exclude_id]
        return coaches

    def ping(self) -> bool:
        return True
