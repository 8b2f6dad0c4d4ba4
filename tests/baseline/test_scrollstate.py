"""Tests for tickerbar.engine.scrollstate: fingerprint, resume, and the file store."""

from __future__ import annotations

import pytest

from tickerbar.engine.scrollstate import (
    CONTENT_HASH_FILE,
    POSITION_FILE,
    ScrollState,
    ScrollStateStore,
    content_fingerprint,
)


class TestFingerprint:
    def test_stable_for_same_content(self):
        assert content_fingerprint("<b>x</b>") == content_fingerprint("<b>x</b>")

    def test_changes_with_content(self):
        assert content_fingerprint("AAPL $1.00") != content_fingerprint("AAPL $1.01")

    def test_changes_with_markup_only(self):
        # a color change alone must reset the scroll position too
        assert content_fingerprint("<span color='a'>x</span>") != content_fingerprint(
            "<span color='b'>x</span>"
        )

    def test_is_sha256_hex(self):
        fp = content_fingerprint("€")
        assert len(fp) == 64
        int(fp, 16)


class TestScrollState:
    def test_resume_same_fingerprint(self):
        assert ScrollState(7, "abc").resume("abc", 10) == 7

    def test_resume_different_fingerprint_resets(self):
        assert ScrollState(7, "abc").resume("abd", 10) == 0

    @pytest.mark.parametrize("position", [10, 11, -1])
    def test_resume_out_of_bounds_resets(self, position):
        assert ScrollState(position, "abc").resume("abc", 10) == 0

    def test_resume_ignores_surrounding_whitespace(self):
        assert ScrollState(3, "abc\n").resume("abc", 10) == 3

    @pytest.mark.parametrize("start,length,expected", [(0, 5, 1), (4, 5, 0), (0, 1, 0)])
    def test_advance_wraps(self, start, length, expected):
        assert ScrollState(start, "fp").advance(length) == ScrollState(expected, "fp")


class TestScrollStateStore:
    def test_round_trip(self, tmp_path):
        store = ScrollStateStore(tmp_path)
        fp = content_fingerprint("hello")
        assert store.save(ScrollState(3, fp)) is True
        assert store.load(fp, 5) == 3
        assert store.read() == ScrollState(3, fp)

    def test_reset_on_changed_fingerprint(self, tmp_path):
        store = ScrollStateStore(tmp_path)
        store.save(ScrollState(3, content_fingerprint("hello")))
        assert store.load(content_fingerprint("hello!"), 6) == 0

    def test_position_beyond_new_length_resets(self, tmp_path):
        store = ScrollStateStore(tmp_path)
        store.save(ScrollState(9, "fp"))
        assert store.load("fp", 9) == 0

    def test_file_format(self, tmp_path):
        ScrollStateStore(tmp_path).save(ScrollState(12, "ab" * 32))
        assert (tmp_path / POSITION_FILE).read_text() == "12"
        assert (tmp_path / CONTENT_HASH_FILE).read_text() == "ab" * 32
        assert not list(tmp_path.glob("*.tmp"))

    def test_missing_files_start_at_zero(self, tmp_path, log_capture):
        assert ScrollStateStore(tmp_path).read() == ScrollState(0, "")
        assert "PersistFailure" not in log_capture.getvalue()

    def test_corrupt_position_starts_at_zero(self, tmp_path, log_capture):
        (tmp_path / POSITION_FILE).write_text("banana")
        (tmp_path / CONTENT_HASH_FILE).write_text("fp")
        assert ScrollStateStore(tmp_path).load("fp", 100) == 0
        assert "bad position" in log_capture.getvalue()

    def test_unreadable_file_logs_and_starts_at_zero(self, tmp_path, log_capture):
        (tmp_path / POSITION_FILE).mkdir()
        (tmp_path / CONTENT_HASH_FILE).write_text("fp")
        assert ScrollStateStore(tmp_path).load("fp", 100) == 0
        assert "Failed to read" in log_capture.getvalue()

    def test_write_failure_is_logged_not_raised(self, tmp_path, log_capture):
        store = ScrollStateStore(tmp_path / "does-not-exist")
        assert store.save(ScrollState(1, "fp")) is False
        out = log_capture.getvalue()
        assert "WARNING" in out
        assert out.count("Failed to write") == 2

    def test_overwrites_previous_state(self, tmp_path):
        store = ScrollStateStore(tmp_path)
        store.save(ScrollState(1, "a"))
        store.save(ScrollState(2, "b"))
        assert store.read() == ScrollState(2, "b")
