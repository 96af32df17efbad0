"""Tests for the ephemeral status feed."""

from jobtrack.status import StatusFeed


def test_updates_expire_after_ttl(clock):
    feed = StatusFeed(ttl_s=3.0, clock=clock)
    update = feed.push("Moved to Interview", app_id="a1")
    assert feed.active() == [update]

    clock.advance(seconds=2.9)
    assert feed.for_application("a1") == [update]

    clock.advance(seconds=0.2)
    assert feed.active() == []


def test_dismiss_and_clear(clock):
    feed = StatusFeed(clock=clock)
    first = feed.push("one")
    feed.push("two")
    assert feed.dismiss(first.id) is True
    assert feed.dismiss(first.id) is False
    assert [u.message for u in feed.active()] == ["two"]
    feed.clear()
    assert feed.active() == []
