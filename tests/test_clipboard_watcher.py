# tests/test_clipboard_watcher.py
"""
Tests for clipboard change detection.
"""

import pytest

from clipkeep.services.clipboard_utils import MemoryClipboard
from clipkeep.services.clipboard_watcher import ClipboardWatcher


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def watcher(clipboard, clock):
    return ClipboardWatcher(clipboard, clock=clock)


class TestPoll:
    """poll() emits snapshots only for changed, non-empty text"""

    def test_new_text_produces_snapshot(self, clipboard, watcher):
        clipboard.set_external("hello")
        snapshot = watcher.poll()
        assert snapshot is not None
        assert snapshot.content == "hello"
        assert snapshot.captured_at > 0

    def test_unchanged_text_does_not_refire(self, clipboard, watcher):
        clipboard.set_external("hello")
        assert watcher.poll() is not None
        assert watcher.poll() is None
        assert watcher.poll() is None

    def test_change_back_fires_again(self, clipboard, watcher):
        clipboard.set_external("a")
        watcher.poll()
        clipboard.set_external("b")
        watcher.poll()
        clipboard.set_external("a")
        assert watcher.poll().content == "a"

    def test_empty_text_is_never_recorded(self, clipboard, watcher):
        clipboard.set_external("")
        assert watcher.poll() is None
        assert watcher.last_seen == ""

    def test_whitespace_is_recorded_by_default(self, clipboard, watcher):
        clipboard.set_external("   ")
        assert watcher.poll().content == "   "

    def test_ignore_blank_skips_whitespace(self, clipboard, clock):
        watcher = ClipboardWatcher(clipboard, clock=clock, ignore_blank=True)
        clipboard.set_external(" \n\t")
        assert watcher.poll() is None

    def test_non_text_clipboard_returns_none(self, clipboard, watcher):
        clipboard.set_external("a")
        watcher.poll()
        clipboard.set_external(None)
        assert watcher.poll() is None
        assert watcher.last_seen == "a"

    def test_read_failure_is_swallowed_and_keeps_last_seen(self, clipboard, watcher):
        clipboard.set_external("a")
        watcher.poll()
        clipboard.set_external("b")
        clipboard.fail_reads = True
        assert watcher.poll() is None
        assert watcher.last_seen == "a"

        clipboard.fail_reads = False
        assert watcher.poll().content == "b"

    def test_matching_latest_entry_is_suppressed(self, clipboard, clock):
        watcher = ClipboardWatcher(clipboard, latest=lambda: "same", clock=clock)
        clipboard.set_external("same")
        assert watcher.poll() is None
        assert watcher.last_seen == "same"

    def test_oversized_text_is_skipped(self, clipboard, clock):
        watcher = ClipboardWatcher(clipboard, clock=clock, max_content_chars=5)
        clipboard.set_external("x" * 6)
        assert watcher.poll() is None
        clipboard.set_external("x" * 5)
        assert watcher.poll() is not None

    def test_prime_suppresses_next_read(self, clipboard, watcher):
        watcher.prime("selected")
        clipboard.set_external("selected")
        assert watcher.poll() is None

    def test_reset_allows_refire(self, clipboard, watcher):
        clipboard.set_external("a")
        watcher.poll()
        watcher.reset()
        assert watcher.poll().content == "a"

    def test_timestamps_come_from_clock(self, clipboard, watcher, clock):
        clipboard.set_external("a")
        first = watcher.poll()
        clipboard.set_external("b")
        second = watcher.poll()
        assert second.captured_at > first.captured_at
