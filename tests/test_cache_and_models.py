"""Тесты кэша групп и вспомогательных функций моделей."""
from datetime import date, datetime, timezone

from edusign_api.cache import GroupCache
from edusign_api.models import (
    envelope_from_payload, is_professor_hidden, is_student_hidden,
    merge_uids, pending_signers, to_iso,
)


# ============================================================================
# КЭШ ГРУПП
# ============================================================================


class TestGroupCache:

    def test_set_and_get(self, sample_group):
        cache = GroupCache(max_size=2)
        cache.set("g1", sample_group)

        assert "g1" in cache
        assert cache.get("g1") == sample_group
        assert cache.get("unknown") is None

    def test_get_returns_copy(self, sample_group):
        """Изменение полученной группы не портит кэш."""
        cache = GroupCache()
        cache.set("g1", sample_group)

        group = cache.get("g1")
        group["STUDENTS"].append("s99")

        assert cache.get("g1")["STUDENTS"] == ["s1", "s2"]

    def test_evicts_least_recently_used(self):
        cache = GroupCache(max_size=2)
        cache.set("g1", {"ID": "g1"})
        cache.set("g2", {"ID": "g2"})
        cache.get("g1")
        cache.set("g3", {"ID": "g3"})

        assert len(cache) == 2
        assert "g1" in cache
        assert "g2" not in cache
        assert "g3" in cache

    def test_invalidate_and_clear(self):
        cache = GroupCache()
        cache.set("g1", {"ID": "g1"})
        cache.set("g2", {"ID": "g2"})

        cache.invalidate("g1")
        cache.invalidate("missing")
        assert "g1" not in cache
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0

    def test_zero_size_disables_cache(self):
        cache = GroupCache(max_size=0)
        cache.set("g1", {"ID": "g1"})

        assert cache.get("g1") is None
        assert len(cache) == 0


# ============================================================================
# МОДЕЛИ
# ============================================================================


class TestModels:

    def test_envelope_from_payload(self):
        envelope = envelope_from_payload({"status": "success", "result": [1, 2]})

        assert envelope.ok
        assert envelope.message is None
        assert envelope.result == [1, 2]

    def test_student_hidden_flag(self):
        assert is_student_hidden({"ID": "s1", "HIDDEN": 1})
        assert not is_student_hidden({"ID": "s1", "HIDDEN": 0})
        assert not is_student_hidden({"ID": "s1"})

    def test_professor_hidden_list(self):
        """У преподавателя HIDDEN это список ID."""
        assert is_professor_hidden({"ID": "p1", "HIDDEN": ["p0", "p1"]})
        assert not is_professor_hidden({"ID": "p1", "HIDDEN": ["p0"]})
        assert not is_professor_hidden({"ID": "p1", "HIDDEN": []})
        assert not is_professor_hidden({"ID": "p1", "HIDDEN": 0})
        assert not is_professor_hidden({"ID": "p1"})

    def test_pending_signers(self, sample_course):
        assert pending_signers(sample_course) == ["s2", "s3"]
        assert pending_signers({"STUDENTS": None}) == []
        assert pending_signers({}) == []

    def test_merge_uids_keeps_order_and_drops_duplicates(self):
        assert merge_uids(["s1", "s2"], ["s2", "s3", "s3"]) == ["s1", "s2", "s3"]
        assert merge_uids(None, ["s1"]) == ["s1"]
        assert merge_uids(["s1"], None) == ["s1"]

    def test_to_iso(self):
        moment = datetime(2024, 3, 1, 9, 0, 0, 123456, tzinfo=timezone.utc)

        assert to_iso(moment) == "2024-03-01T09:00:00+00:00"
        assert to_iso(date(2024, 3, 1)) == "2024-03-01"
        assert to_iso("2024-03-01") == "2024-03-01"
        assert to_iso(None) is None
