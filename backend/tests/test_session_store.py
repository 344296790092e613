"""
Unit tests for LocalStorage and SessionStore.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from serenemind.core.exceptions import CorruptRecord, SessionNotFound, StorageUnavailable
from serenemind.models import Evaluation, Session
from serenemind.storage import LocalStorage, SessionStore


def make_evaluation(score=70, risk="low", **overrides):
    data = dict(
        wellness_score=score,
        emotional_state="Calm",
        risk_level=risk,
        key_concerns=["Sleep"],
        recommendations=["Keep a journal"],
        summary="Stable overall.",
    )
    data.update(overrides)
    return Evaluation(**data)


class TestLocalStorage:
    """Tests for the filesystem storage backend."""

    def test_creates_base_dir(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "nested" / "root"))
        assert storage.base_dir.is_dir()

    def test_unwritable_base_dir_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageUnavailable):
            LocalStorage(str(blocker / "data"))

    @pytest.mark.asyncio
    async def test_save_load_delete(self, storage):
        assert await storage.save("docs/a.json", '{"a": 1}') is True
        assert await storage.exists("docs/a.json")
        assert await storage.load("docs/a.json") == b'{"a": 1}'
        assert await storage.delete("docs/a.json") is True
        assert await storage.load("docs/a.json") is None
        assert await storage.delete("docs/a.json") is False

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_files(self, storage):
        await storage.save("docs/a.json", "one")
        await storage.save("docs/a.json", "two")
        assert [p.name for p in (storage.base_dir / "docs").iterdir()] == ["a.json"]
        assert await storage.list("docs") == ["docs/a.json"]

    @pytest.mark.asyncio
    async def test_list_missing_dir_is_empty(self, storage):
        assert await storage.list("nowhere") == []

    @pytest.mark.asyncio
    async def test_list_with_pattern(self, storage):
        await storage.save("docs/a.json", "{}")
        await storage.save("docs/notes.txt", "x")
        assert await storage.list("docs", pattern="*.json") == ["docs/a.json"]

    @pytest.mark.asyncio
    async def test_path_traversal_rejected(self, storage):
        with pytest.raises(ValueError, match="path traversal"):
            await storage.save("../escape.json", "{}")


class TestSessionStore:
    """Tests for SessionStore."""

    @pytest.mark.asyncio
    async def test_create_returns_distinct_ids(self, store):
        first = await store.create()
        second = await store.create()
        assert first != second
        assert first.startswith("session_")

    @pytest.mark.asyncio
    async def test_create_persists_empty_session(self, store, storage):
        session_id = await store.create()
        session = await store.get(session_id)
        assert session.id == session_id
        assert session.messages == []
        assert session.evaluation is None
        assert session.created_at == session.updated_at

        on_disk = json.loads((storage.base_dir / "sessions" / f"{session_id}.json").read_text())
        assert set(on_disk) == {"id", "messages", "createdAt", "updatedAt"}

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self, store):
        assert await store.get("session_0_missing") is None

    @pytest.mark.asyncio
    async def test_get_rejects_path_like_ids(self, store):
        assert await store.get("../secrets") is None
        assert await store.get("") is None

    @pytest.mark.asyncio
    async def test_get_corrupt_record_raises(self, store, storage):
        await storage.save("sessions/session_1_bad.json", "{not json")
        with pytest.raises(CorruptRecord):
            await store.get("session_1_bad")

    @pytest.mark.asyncio
    async def test_append_message_keeps_order_and_updates_timestamp(self, store):
        session_id = await store.create()
        created = (await store.get(session_id)).updated_at

        await store.append_message(session_id, "user", "hello")
        await store.append_message(session_id, "assistant", "hi there")

        session = await store.get(session_id)
        assert [(m.role, m.content) for m in session.messages] == [
            ("user", "hello"),
            ("assistant", "hi there"),
        ]
        assert session.updated_at >= created
        assert session.updated_at == session.messages[-1].timestamp

    @pytest.mark.asyncio
    async def test_append_to_missing_session_raises(self, store):
        with pytest.raises(SessionNotFound):
            await store.append_message("session_0_gone", "user", "hello")

    @pytest.mark.asyncio
    async def test_set_evaluation_replaces_previous(self, store):
        session_id = await store.create()
        await store.set_evaluation(session_id, make_evaluation(score=40, risk="medium"))
        await store.set_evaluation(session_id, make_evaluation(score=85, risk="low"))

        session = await store.get(session_id)
        assert session.evaluation.wellness_score == 85
        assert session.evaluation.risk_level == "low"

    @pytest.mark.asyncio
    async def test_set_evaluation_on_missing_session_raises(self, store):
        with pytest.raises(SessionNotFound):
            await store.set_evaluation("session_0_gone", make_evaluation())

    @pytest.mark.asyncio
    async def test_round_trip_is_field_for_field(self, store):
        session_id = await store.create()
        await store.append_message(session_id, "user", "I feel anxious today")
        await store.append_message(session_id, "assistant", "Tell me more. 😊")
        written = await store.set_evaluation(session_id, make_evaluation())

        loaded = await store.get(session_id)
        assert loaded == written

    @pytest.mark.asyncio
    async def test_list_all_sorted_by_updated_desc(self, store):
        older = await store.create()
        newer = await store.create()
        await store.append_message(older, "user", "bump")

        ids = [s.id for s in await store.list_all()]
        assert ids == [older, newer]

    @pytest.mark.asyncio
    async def test_list_all_skips_corrupt_files(self, store, storage):
        good = await store.create()
        await storage.save("sessions/session_2_bad.json", '{"id": 3}')

        sessions = await store.list_all()
        assert [s.id for s in sessions] == [good]

    @pytest.mark.asyncio
    async def test_list_all_skips_link_outside_storage_root(self, store, storage, tmp_path):
        good = await store.create()
        outside = tmp_path / "outside.json"
        outside.write_text('{"id": "session_9_outside", "messages": []}')
        (storage.base_dir / "sessions" / "session_link.json").symlink_to(outside)

        sessions = await store.list_all()
        assert [s.id for s in sessions] == [good]
        assert (await store.stats()).total == 1

    @pytest.mark.asyncio
    async def test_list_all_skips_file_that_fails_to_read(self, store, storage, monkeypatch):
        good = await store.create()
        bad = await store.create()
        real_load = storage.load

        async def flaky_load(path):
            if bad in path:
                raise StorageUnavailable(f"Cannot read {path}: permission denied")
            return await real_load(path)

        monkeypatch.setattr(storage, "load", flaky_load)

        sessions = await store.list_all()
        assert [s.id for s in sessions] == [good]

    @pytest.mark.asyncio
    async def test_delete(self, store):
        session_id = await store.create()
        assert await store.delete(session_id) is True
        assert await store.get(session_id) is None
        assert await store.delete(session_id) is False

    @pytest.mark.asyncio
    async def test_delete_all_empties_store(self, store):
        for _ in range(3):
            await store.create()
        assert await store.delete_all() == 3
        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_not_lost(self, store):
        session_id = await store.create()
        await asyncio.gather(*[
            store.append_message(session_id, "user", f"message {i}")
            for i in range(20)
        ])
        session = await store.get(session_id)
        assert session.message_count == 20

    @pytest.mark.asyncio
    async def test_locks_are_not_kept_after_use(self, store):
        session_ids = [await store.create() for _ in range(5)]
        for session_id in session_ids:
            await store.append_message(session_id, "user", "hello")
            await store.set_evaluation(session_id, make_evaluation())
        await store.delete(session_ids[0])
        await store.get("session_0_unknown")

        assert len(store._locks) == 0

    @pytest.mark.asyncio
    async def test_stats(self, store):
        a = await store.create()
        b = await store.create()
        await store.create()
        await store.set_evaluation(a, make_evaluation(score=30, risk="high"))
        await store.set_evaluation(b, make_evaluation(score=70, risk="low"))

        stats = await store.stats()
        assert stats.total == 3
        assert stats.with_evaluations == 2
        assert stats.high_risk == 1
        assert stats.low_risk == 1
        assert stats.medium_risk == 0
        assert stats.average_wellness_score == 50

    @pytest.mark.asyncio
    async def test_stats_empty(self, store):
        stats = await store.stats()
        assert stats.total == 0
        assert stats.average_wellness_score is None


class TestSessionModel:
    """Serialization details of the Session model."""

    def test_camel_case_keys(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        session = Session(
            id="session_1_abc",
            evaluation=make_evaluation(evaluated_at=now),
            created_at=now,
            updated_at=now + timedelta(minutes=1),
        )
        data = session.to_json_dict()
        assert data["createdAt"].startswith("2024-05-01T12:00:00")
        assert data["evaluation"]["wellnessScore"] == 70
        assert data["evaluation"]["keyConcerns"] == ["Sleep"]

    def test_evaluation_rejects_out_of_range_score(self):
        with pytest.raises(ValueError):
            make_evaluation(score=0)
        with pytest.raises(ValueError):
            make_evaluation(score=101)

    def test_evaluation_rejects_unknown_risk(self):
        with pytest.raises(ValueError):
            make_evaluation(risk="severe")
