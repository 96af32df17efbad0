"""Tests for the stage-change business rule (default and all-or-nothing modes)."""

import pytest

from jobtrack.models import ActivityType, Stage
from jobtrack.workflows import change_stage

from tests.conftest import application_data


@pytest.fixture
def app(ctx):
    return ctx.applications.create(application_data(position="Engineer"))


def _fail_writes_to(store, monkeypatch, failing_key):
    real_set = store.set

    def flaky_set(name, value):
        if name == failing_key:
            return False
        return real_set(name, value)

    monkeypatch.setattr(store, "set", flaky_set)


class TestUpdateStage:

    def test_appends_exactly_one_activity(self, ctx, app):
        updated = ctx.applications.update_stage(app.id, "interview")

        assert updated.stage == Stage.INTERVIEW
        activities = ctx.activities.get_all()
        assert len(activities) == 1
        activity = activities[0]
        assert activity.application.id == app.id
        assert activity.type == ActivityType.INTERVIEW
        assert "Interview" in activity.title
        assert "Interview" in activity.details

    def test_unknown_id_writes_nothing(self, ctx, app, write_counter):
        ctx.activities.get_all()
        write_counter.clear()
        assert ctx.applications.update_stage("missing", "offer") is None
        assert write_counter == []
        assert ctx.activities.get_all() == []

    def test_invalid_stage_rejected(self, ctx, app):
        with pytest.raises(ValueError):
            ctx.applications.update_stage(app.id, "ghosted")


class TestChangeStage:

    def test_default_mode(self, ctx, app):
        result = change_stage(ctx.applications, ctx.activities, app.id, Stage.OFFER)
        assert result.complete
        assert result.application.stage == Stage.OFFER
        assert result.activity.type == ActivityType.OFFER

    def test_unknown_id(self, ctx, app):
        result = change_stage(ctx.applications, ctx.activities, "missing", Stage.OFFER, atomic=True)
        assert result.application is None
        assert result.activity is None
        assert ctx.activities.get_all() == []

    def test_non_atomic_keeps_partial_change(self, ctx, store, app, monkeypatch):
        ctx.activities.get_all()
        _fail_writes_to(store, monkeypatch, "activities")

        result = change_stage(ctx.applications, ctx.activities, app.id, Stage.REJECTED)

        assert result.application.stage == Stage.REJECTED
        assert result.activity is None
        assert ctx.applications.get_by_id(app.id).stage == Stage.REJECTED
        assert ctx.activities.get_all() == []

    def test_atomic_rolls_back_when_activity_fails(self, ctx, store, app, monkeypatch):
        ctx.activities.get_all()
        _fail_writes_to(store, monkeypatch, "activities")

        result = change_stage(ctx.applications, ctx.activities, app.id, Stage.REJECTED, atomic=True)

        assert not result.complete
        assert ctx.applications.get_by_id(app.id).stage == Stage.APPLIED
        assert ctx.activities.get_all() == []

    def test_atomic_rolls_back_on_exception(self, ctx, store, app, monkeypatch):
        def explode(application, stage):
            raise RuntimeError("activity log unavailable")

        monkeypatch.setattr(ctx.activities, "add_stage_change_activity", explode)

        with pytest.raises(RuntimeError):
            change_stage(ctx.applications, ctx.activities, app.id, Stage.OFFER, atomic=True)
        assert ctx.applications.get_by_id(app.id).stage == Stage.APPLIED
