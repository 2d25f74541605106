"""
Tests for hour rounding, lookback windows and the timeline join.
"""

import pytest

from mcstats.models import TimelinePoint
from mcstats.timeline import HOUR, compute_window, join_timelines, round_to_hour


class TestRoundToHour:
    @pytest.mark.parametrize(
        "epoch,expected",
        [
            (0, 0),
            (1799, 0),
            (1800, 3600),
            (3599, 3600),
            (3600, 3600),
            (5399, 3600),
            (5400, 7200),
            (1_700_000_000, 1_699_999_200),
            (1_700_001_000, 1_700_002_800),
        ],
    )
    def test_rounds_to_nearest_hour(self, epoch, expected):
        assert round_to_hour(epoch) == expected

    def test_result_is_hour_aligned(self):
        for epoch in range(1_700_000_000, 1_700_000_000 + 2 * HOUR, 97):
            rounded = round_to_hour(epoch)
            assert rounded % HOUR == 0
            assert abs(rounded - epoch) <= HOUR // 2


class TestComputeWindow:
    def test_window_for_every_supported_range(self):
        now = 1_700_001_000
        base_epoch = round_to_hour(now)

        for hours in range(1, 745):
            minimum, maximum = compute_window(hours, now)
            assert maximum == base_epoch
            assert minimum == base_epoch - hours * 3600

    def test_defaults_to_current_time(self, monkeypatch):
        monkeypatch.setattr("mcstats.timeline.window.current_epoch", lambda: 7300)

        assert compute_window(2) == (0, 7200)


class TestJoinTimelines:
    def test_drops_epochs_without_players(self):
        servers = {100: 5, 200: 7, 300: 9}
        players = {100: 20, 300: 40}

        assert join_timelines(servers, players) == [
            TimelinePoint(epoch=100, servers=5, players=20),
            TimelinePoint(epoch=300, servers=9, players=40),
        ]

    def test_ignores_epochs_without_servers(self):
        assert join_timelines({100: 1}, {100: 2, 200: 3}) == [
            TimelinePoint(epoch=100, servers=1, players=2)
        ]

    def test_keeps_server_order(self):
        points = join_timelines({300: 1, 100: 2, 200: 3}, {100: 0, 200: 0, 300: 0})

        assert [point.epoch for point in points] == [300, 100, 200]

    def test_empty(self):
        assert join_timelines({}, {100: 1}) == []
        assert join_timelines({100: 1}, {}) == []

    def test_serializes_three_fields(self):
        (point,) = join_timelines({100: 5}, {100: 20})

        assert point.model_dump() == {"epoch": 100, "servers": 5, "players": 20}
