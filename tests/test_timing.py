"""Tests für utils/timing.py."""

import pytest

from utils.timing import format_duration, log_preview, monotonic_ms


class TestFormatDuration:
    @pytest.mark.parametrize(
        "milliseconds,expected",
        [(0, "0ms"), (850, "850ms"), (999.4, "999ms"), (1000, "1.00s"), (5030, "5.03s")],
    )
    def test_format(self, milliseconds, expected):
        assert format_duration(milliseconds) == expected


class TestLogPreview:
    def test_short_text_unchanged(self):
        assert log_preview("  Current week 32%  \n") == "Current week 32%"

    def test_keeps_tail(self):
        text = "noise " * 50 + "Current week 32%"

        preview = log_preview(text, max_length=20)

        assert preview.startswith("...")
        assert preview.endswith("Current week 32%")
        assert len(preview) == 23


def test_monotonic_ms_increases():
    first = monotonic_ms()
    assert monotonic_ms() >= first
