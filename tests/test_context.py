"""Tests for TrackerContext wiring, lifecycle and backup/restore."""

import json

import pytest

from jobtrack.config import Settings
from jobtrack.context import TrackerContext
from jobtrack.storage.store import PersistentStore

from tests.conftest import FIXED_NOW, application_data


def test_nothing_opened_until_init(settings, tmp_path):
    db = tmp_path / "lazy.db"
    ctx = TrackerContext(settings=settings.model_copy(update={"db_path": str(db)}))
    assert not db.exists()
    with ctx:
        assert db.exists()


def test_initialize_seeds_defaults(ctx):
    ctx.initialize()
    assert len(ctx.goals.get_all()) == 3
    assert ctx.profile.get().name == "Job Seeker"
    assert ctx.applications.get_all() == []
    assert ctx.last_sync() == FIXED_NOW


def test_last_sync_absent(ctx):
    assert ctx.last_sync() is None


def test_reset_clears_user_data(ctx):
    ctx.applications.create(application_data())
    ctx.profile.update({"name": "Ada"})
    ctx.reset()
    assert ctx.applications.get_all() == []
    assert ctx.profile.get().name == "Job Seeker"
    assert len(ctx.goals.get_all()) == 3


def test_demo_seed(store, clock):
    ctx = TrackerContext(settings=Settings(_env_file=None, seed_demo_data=True), store=store, clock=clock)
    apps = ctx.applications.get_all()
    assert len(apps) == 5
    assert {a.stage.value for a in apps} == {"applied", "screening", "interview", "offer", "rejected"}
    assert len(ctx.companies.get_all()) == 5


def test_backup_and_restore_file(ctx, tmp_path, clock):
    app = ctx.applications.create(application_data())
    ctx.initialize()
    path = str(tmp_path / "backup.json")

    saved = ctx.backup_to_file(path)
    assert saved >= 3
    with open(path, encoding="utf-8") as f:
        assert json.load(f)["version"] == 1

    ctx.applications.delete(app.id)
    restored = ctx.restore_from_file(path)

    assert restored == saved
    assert ctx.applications.get_by_id(app.id) == app


def test_restore_into_other_store(ctx, clock):
    ctx.applications.create(application_data())
    payload = ctx.backup()

    other_store = PersistentStore(":memory:")
    other_store.init()
    try:
        other = TrackerContext(settings=ctx.settings, store=other_store, clock=clock)
        other.restore(payload)
        assert [a.position for a in other.applications.get_all()] == ["Backend Engineer"]
    finally:
        other_store.teardown()


def test_restore_rejects_non_backup(ctx):
    with pytest.raises(ValueError):
        ctx.restore({"applications": []})


def test_status_feed_uses_settings_ttl(ctx):
    assert ctx.status.ttl.total_seconds() == ctx.settings.status_ttl_s


def test_window_uses_settings(store, clock):
    settings = Settings(_env_file=None, overscan=2, virtualization_threshold=0)
    ctx = TrackerContext(settings=settings, store=store, clock=clock)
    for n in range(3):
        ctx.applications.create(application_data(position=f"Role {n}"))

    window = ctx.window(ctx.applications.get_all(), viewport_height=56)

    assert window.is_virtualized
    assert window.overscan == 2
    assert (window.range.start_index, window.range.end_index) == (0, 3)
