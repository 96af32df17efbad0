"""Tests for virtual window computation and the live VirtualWindow."""

import math
from types import SimpleNamespace

import pytest

from jobtrack.config import Settings
from jobtrack.window import Density, Signal, VirtualWindow, compute_window, row_height_for


def _visible_rows(count, height, viewport, scroll):
    """Rows intersecting [scroll, scroll + viewport)."""
    return [i for i in range(count) if i * height < scroll + viewport and (i + 1) * height > scroll]


class TestComputeWindow:

    def test_sixty_rows_at_top(self):
        r = compute_window(60, 56, 600, 0, overscan=5, threshold=50)
        assert r.start_index == 0
        assert r.end_index == 21
        assert r.offset_y == 0
        assert r.total_height == 60 * 56

    def test_small_lists_render_everything(self):
        r = compute_window(50, 56, 600, 2000, threshold=50)
        assert (r.start_index, r.end_index) == (0, 50)
        assert compute_window(0, 56, 600, 0).size == 0

    def test_offset_tracks_start(self):
        r = compute_window(1000, 56, 600, 56 * 100)
        assert r.start_index == 95
        assert r.offset_y == 95 * 56

    def test_end_clamped_to_count(self):
        r = compute_window(60, 56, 600, 56 * 59)
        assert r.end_index == 60
        assert r.start_index <= 59

    def test_scroll_past_the_end(self):
        r = compute_window(60, 56, 600, 10 ** 6)
        assert r.start_index <= r.end_index == 60

    @pytest.mark.parametrize("height", [44.8, 56, 78.4])
    @pytest.mark.parametrize("viewport", [0, 100, 600, 1013])
    @pytest.mark.parametrize("scroll", [0, 1, 27.5, 55.9, 560, 3333, 55000])
    def test_coverage_and_bound(self, height, viewport, scroll):
        count, overscan = 1000, 5
        r = compute_window(count, height, viewport, scroll, overscan=overscan, threshold=50)
        for row in _visible_rows(count, height, viewport, scroll):
            assert r.start_index <= row < r.end_index
        assert r.size <= math.ceil(viewport / height) + 2 * overscan + 1

    def test_rejects_bad_row_height(self):
        with pytest.raises(ValueError):
            compute_window(100, 0, 600, 0)


class TestDensity:

    @pytest.mark.parametrize("density, expected", [
        (Density.COMPACT, 44.8),
        (Density.COMFORTABLE, 56),
        (Density.SPACIOUS, 78.4),
    ])
    def test_row_heights(self, density, expected):
        assert row_height_for(density) == pytest.approx(expected)


def _rows(n):
    return [SimpleNamespace(id=f"app-{i}") for i in range(n)]


class TestVirtualWindow:

    def test_scroll_and_resize(self):
        window = VirtualWindow(_rows(200), viewport_height=560)
        assert window.is_virtualized
        window.on_scroll(56 * 50)
        assert window.range.start_index == 45
        window.on_resize(1120)
        assert window.range.end_index >= 50 + 20

    def test_visible_items_keyed_by_id(self):
        window = VirtualWindow(_rows(200), viewport_height=112, overscan=1)
        window.on_scroll(56 * 10)
        pairs = window.visible_items()
        assert [i for i, _ in pairs] == list(range(9, 13))
        assert [window.row_key(item) for _, item in pairs][0] == "app-9"

    def test_density_changes_row_height(self):
        window = VirtualWindow(_rows(200))
        window.set_density("spacious")
        assert window.row_height == pytest.approx(78.4)
        assert window.range.total_height == pytest.approx(200 * 78.4)

    def test_small_collection_not_virtualized(self):
        window = VirtualWindow(_rows(10))
        assert not window.is_virtualized
        assert len(window.visible_items()) == 10
        window.set_items(_rows(80))
        assert window.is_virtualized

    def test_mount_and_unmount_leave_no_listeners(self):
        scroll, resize = Signal(), Signal()
        window = VirtualWindow(_rows(500), viewport_height=600)

        for _ in range(3):
            window.mount(scroll, resize)
            assert window.mounted
            scroll.emit(56 * 100)
            assert window.range.start_index == 95
            window.unmount()

        assert scroll.listener_count == 0
        assert resize.listener_count == 0
        assert not window.mounted

        scroll.emit(0)
        assert window.range.start_index == 95

    def test_remount_replaces_previous_sources(self):
        scroll = Signal()
        window = VirtualWindow(_rows(500))
        window.mount(scroll)
        window.mount(scroll)
        assert scroll.listener_count == 1
        window.unmount()


class TestWindowFromSettings:

    def test_defaults_match_constants(self, settings):
        window = VirtualWindow.from_settings(settings, _rows(60))
        assert window.range == VirtualWindow(_rows(60)).range

    def test_overscan_and_row_height_from_settings(self):
        settings = Settings(_env_file=None, overscan=8, row_height=40)
        window = VirtualWindow.from_settings(settings, _rows(60))
        assert window.row_height == 40
        assert (window.range.start_index, window.range.end_index) == (0, 31)

        window.on_scroll(40 * 20)
        assert window.range.start_index == 12

    def test_threshold_from_settings(self):
        settings = Settings(_env_file=None, virtualization_threshold=10)
        window = VirtualWindow.from_settings(settings, _rows(20))
        assert window.is_virtualized
        assert not VirtualWindow(_rows(20)).is_virtualized
