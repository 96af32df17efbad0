"""Tests for PersistentStore: best-effort I/O, namespacing, notification, snapshots."""

import logging
from datetime import datetime, timezone

from jobtrack.models import Stage
from jobtrack.repositories import ApplicationRepository
from jobtrack.storage.store import PersistentStore, StorageKeys, revive_date_strings

from tests.conftest import FIXED_NOW


class TestReadWrite:

    def test_set_then_get_revives_dates(self, store):
        assert store.set("settings", {"when": FIXED_NOW, "stage": Stage.OFFER, "n": 3})
        value = store.get("settings")
        assert value["when"] == FIXED_NOW
        assert isinstance(value["when"], datetime)
        assert value["stage"] == "offer"
        assert value["n"] == 3

    def test_get_without_revival_keeps_strings(self, store):
        store.set("settings", {"when": FIXED_NOW})
        value = store.get("settings", revive_dates=False)
        assert isinstance(value["when"], str)

    def test_missing_key_is_none(self, store):
        assert store.get("applications") is None
        assert store.exists("applications") is False

    def test_exists_after_set(self, store):
        store.set("applications", [])
        assert store.exists("applications") is True

    def test_remove(self, store):
        store.set("applications", [1, 2])
        store.remove("applications")
        assert store.get("applications") is None

    def test_keys_lists_namespace(self, store):
        store.set("applications", [])
        store.set("companies", [])
        assert store.keys() == ["applications", "companies"]


class TestFaults:

    def test_unserializable_value_returns_false(self, store, caplog):
        with caplog.at_level(logging.ERROR):
            assert store.set("settings", {"bad": object()}) is False
        assert "Error setting settings" in caplog.text
        assert store.get("settings") is None

    def test_cyclic_value_returns_false(self, store):
        cyclic = []
        cyclic.append(cyclic)
        assert store.set("settings", cyclic) is False

    def test_corrupt_json_reads_as_absent(self, store):
        conn = store._get_conn()
        conn.execute(
            "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (store.key("applications"), "{not json", "x"),
        )
        conn.commit()
        assert store.get("applications") is None

    def test_deeply_nested_json_reads_as_absent(self, store):
        conn = store._get_conn()
        conn.execute(
            "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (store.key("applications"), "[" * 100000 + "]" * 100000, "x"),
        )
        conn.commit()
        assert store.get("applications") is None
        assert store.get("applications", revive_dates=False) is None
        assert ApplicationRepository(store).get_all() == []

    def test_uninitialized_store_never_raises(self):
        s = PersistentStore(":memory:")
        try:
            assert s.get("applications") is None
            assert s.exists("applications") is False
            assert s.set("applications", []) is False
            s.remove("applications")
            s.clear()
        finally:
            s.teardown()

    def test_failed_write_does_not_notify(self, store):
        seen = []
        store.subscribe(seen.append)
        store.set("settings", {"bad": object()})
        assert seen == []


class TestNamespacing:

    def test_clear_only_touches_own_prefix(self, tmp_path):
        path = str(tmp_path / "shared.db")
        ours = PersistentStore(path, prefix="jobtrack_")
        theirs = PersistentStore(path, prefix="other_")
        try:
            ours.init()
            theirs.init()
            ours.set("applications", [1])
            theirs.set("applications", [2])

            ours.clear()

            assert ours.get("applications") is None
            assert theirs.get("applications") == [2]
        finally:
            ours.teardown()
            theirs.teardown()

    def test_data_survives_reopen(self, tmp_path):
        path = str(tmp_path / "nested" / "jobtrack.db")
        first = PersistentStore(path)
        first.init()
        first.set("applications", [{"id": "a"}])
        first.teardown()

        second = PersistentStore(path)
        second.init()
        try:
            assert second.get("applications") == [{"id": "a"}]
        finally:
            second.teardown()


class TestNotification:

    def test_listener_sees_set_remove_and_clear(self, store):
        seen = []
        store.subscribe(seen.append)
        store.set("applications", [])
        store.set("companies", [])
        store.remove("applications")
        store.clear()
        assert seen == ["applications", "companies", "applications", "companies"]

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        assert store.listener_count == 1
        unsubscribe()
        unsubscribe()
        assert store.listener_count == 0
        store.set("applications", [])
        assert seen == []

    def test_listener_errors_do_not_reach_writer(self, store):
        def broken(key):
            raise RuntimeError("boom")

        seen = []
        store.subscribe(broken)
        store.subscribe(seen.append)
        assert store.set("applications", []) is True
        assert seen == ["applications"]

    def test_teardown_drops_listeners(self, store):
        store.subscribe(lambda key: None)
        store.teardown()
        assert store.listener_count == 0


class TestSnapshots:

    def test_snapshot_and_restore(self, store):
        store.set("applications", [{"id": "a"}])
        snap = store.snapshot(["applications", "activities"])
        assert snap["activities"] is None

        store.set("applications", [{"id": "b"}])
        store.set("activities", [{"id": "x"}])
        assert store.restore_snapshot(snap)

        assert store.get("applications") == [{"id": "a"}]
        assert store.get("activities") is None

    def test_dump_and_load_only_known_keys(self, store):
        store.set("applications", [{"id": "a"}])
        store.set("scratch", 1)
        backup = store.dump()
        assert set(backup) == {"applications"}

        store.clear()
        written = store.load({**backup, "unknown": 5})
        assert written == 1
        assert store.get("applications") == [{"id": "a"}]
        assert store.get("unknown") is None

    def test_storage_keys_cover_every_collection(self):
        assert StorageKeys.APPLICATIONS in StorageKeys.all()
        assert len(set(StorageKeys.all())) == 10


class TestReviveDateStrings:

    def test_nested_structures(self):
        value = revive_date_strings({"a": ["2025-06-18T12:00:00Z", "plain"], "b": None})
        assert value["a"][0] == datetime(2025, 6, 18, 12, tzinfo=timezone.utc)
        assert value["a"][1] == "plain"
        assert value["b"] is None

    def test_naive_timestamp_is_utc(self):
        assert revive_date_strings("2025-06-18T12:00:00").tzinfo is not None

    def test_lookalike_that_fails_to_parse_stays_string(self):
        assert revive_date_strings("2025-13-45T99:99:99 nonsense") == "2025-13-45T99:99:99 nonsense"
