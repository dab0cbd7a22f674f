"""Storage interface shared by the in-memory and SQL backends."""

from __future__ import annotations

from typing import Protocol

from accredit.models import AccreditationBody, CoachRecord, VerifiedCredential


class Storage(Protocol):
    """Durable state the verification core reads and writes.

    Credentials are append-only: ``add_credential`` never replaces an
    existing row, so several rows may share a key.
    """

    def add_credential(self, record: VerifiedCredential) -> None: ...

    def find_credentials(
        self,
        body: AccreditationBody,
        credential_number: str,
        *,
        active_only: bool = True,
    ) -> list[VerifiedCredential]: ...

    def get_coach(self, coach_id: str) -> CoachRecord | None: ...

    def save_coach(self, record: CoachRecord) -> None: ...

    def find_coaches(
        self,
        body: AccreditationBody,
        *,
        verified: bool | None = None,
        level: str | None = None,
        name_contains: str | None = None,
        profile_url: str | None = None,
        exclude_id: str | None = None,
    ) -> list[CoachRecord]: ...

    def ping(self) -> bool: ...
