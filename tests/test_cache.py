"""Tests for cache keys, the credential cache and the in-memory store."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from accredit.cache import CredentialCache, EmccKey, IcfKey
from accredit.errors import StorageError
from accredit.models import AccreditationBody, CoachRecord, VerifiedBy, VerifiedCredential
from accredit.storage import InMemoryStorage, build_storage


def _credential(number="EIA20230480", name="Jane Doe", body=AccreditationBody.EMCC, **kwargs):
    return VerifiedCredential(body=body, credential_number=number, full_name=name, **kwargs)


class TestCacheKeys:
    def test_emcc_key_normalises_reference(self):
        key = EmccKey(" eia 20230480")
        assert key.reference == "EIA20230480"
        assert key.credential_number == "EIA20230480"
        assert key.body == AccreditationBody.EMCC

    def test_icf_key_is_name_and_location(self):
        key = IcfKey(" Jane Doe ", "London, UK ")
        assert key.credential_number == "JANE DOE_LONDON, UK"
        assert key.body == AccreditationBody.ICF

    def test_icf_key_without_location(self):
        assert IcfKey("Jane Doe").credential_number == "JANE DOE_"

    def test_keys_are_hashable_values(self):
        assert EmccKey("eia1") == EmccKey("EIA1")
        assert len({IcfKey("a", "b"), IcfKey("a", "b")}) == 1


class TestCredentialCache:
    def test_miss_on_empty_store(self, storage):
        assert CredentialCache(storage).lookup(EmccKey("EIA1")) is None

    def test_hit_after_insert(self, storage):
        cache = CredentialCache(storage)
        cache.insert(_credential())
        hit = cache.lookup(EmccKey("eia20230480"))
        assert hit is not None
        assert hit.full_name == "Jane Doe"

    def test_lookup_ignores_other_body(self, storage):
        cache = CredentialCache(storage)
        cache.insert(_credential(number="JANE DOE_LONDON", body=AccreditationBody.ICF))
        assert cache.lookup(EmccKey("JANE DOE_LONDON")) is None
        assert cache.lookup(IcfKey("Jane Doe", "London")) is not None

    def test_inactive_rows_are_ignored(self, storage):
        cache = CredentialCache(storage)
        cache.insert(_credential(is_active=False))
        assert cache.lookup(EmccKey("EIA20230480")) is None

    def test_insert_appends_and_newest_wins(self, storage):
        cache = CredentialCache(storage)
        now = datetime.now(timezone.utc)
        cache.insert(_credential(name="Old Name", created_at=now - timedelta(days=1)))
        cache.insert(_credential(name="New Name", created_at=now))
        assert storage.count("credential") == 2
        assert cache.lookup(EmccKey("EIA20230480")).full_name == "New Name"

    def test_empty_key_is_a_miss(self, storage):
        assert CredentialCache(storage).lookup(EmccKey("  ")) is None
        assert CredentialCache(storage).lookup(IcfKey("", "London")) is None

    def test_unknown_key_type_rejected(self, storage):
        with pytest.raises(TypeError):
            CredentialCache(storage).lookup("EIA1")

    def test_storage_failure_on_lookup_is_a_miss(self):
        broken = MagicMock()
        broken.find_credentials.side_effect = StorageError("db down")
        assert CredentialCache(broken).lookup(EmccKey("EIA1")) is None

    def test_storage_failure_on_insert_is_swallowed(self):
        broken = MagicMock()
        broken.add_credential.side_effect = StorageError("db down")
        CredentialCache(broken).insert(_credential())
        broken.add_credential.assert_called_once()


class TestInMemoryStorage:
    def test_build_storage_defaults_to_memory(self):
        assert isinstance(build_storage(""), InMemoryStorage)

    def test_records_are_copied(self, storage):
        storage.put("thing", "1", {"items": [1]})
        record = storage.get("thing", "1")
        record["items"].append(2)
        assert storage.get("thing", "1") == {"items": [1]}

    def test_credential_round_trip_keeps_provenance(self, storage):
        storage.add_credential(_credential(verified_by=VerifiedBy.url, level="Practitioner"))
        (row,) = storage.find_credentials(AccreditationBody.EMCC, "EIA20230480")
        assert row.verified_by == VerifiedBy.url
        assert row.level == "Practitioner"

    def test_find_coaches_filters(self, storage):
        storage.save_coach(CoachRecord("a", "Carole Adams", AccreditationBody.EMCC, verified=True,
                                       level="Senior Practitioner"))
        storage.save_coach(CoachRecord("b", "Tom Adamson", AccreditationBody.EMCC, verified=False,
                                       level="Senior Practitioner"))
        storage.save_coach(CoachRecord("c", "Jo Adams", AccreditationBody.ICF, verified=True, level="PCC"))

        found = storage.find_coaches(AccreditationBody.EMCC, verified=True, name_contains="adams")
        assert [c.coach_id for c in found] == ["a"]
        assert storage.find_coaches(AccreditationBody.EMCC, name_contains="Adams", exclude_id="a")[0].coach_id == "b"
        assert storage.find_coaches(AccreditationBody.ICF, level="ACC") == []

    def test_save_coach_overwrites(self, storage):
        storage.save_coach(CoachRecord("a", "Carole Adams"))
        storage.save_coach(CoachRecord("a", "Carole Adams", verified=True))
        assert storage.get_coach("a").verified is True
        assert storage.count("coach") == 1

    def test_clear(self, storage):
        storage.add_credential(_credential())
        storage.clear()
        assert storage.count() == 0
