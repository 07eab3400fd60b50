"""Tests for the Pacer class and the cancellable sleep helper."""

import threading
import time
import unittest

from chisel.pacing import Pacer, sleep


class TestPacer(unittest.TestCase):
    """Verify the minimum gap is measured from the send mark."""

    def test_wait_without_mark_returns_immediately(self):
        pacer = Pacer(1.0)
        start = time.monotonic()
        pacer.wait()
        self.assertLess(time.monotonic() - start, 0.05)

    def test_wait_enforces_spacing_since_mark(self):
        pacer = Pacer(0.1)
        start = pacer.mark()
        pacer.wait()
        self.assertGreaterEqual(time.monotonic() - start, 0.095)

    def test_time_already_spent_counts_towards_the_gap(self):
        """Work done after the mark shortens the wait but never removes the spacing."""
        pacer = Pacer(0.1)
        start = pacer.mark()
        time.sleep(0.06)
        waited_from = time.monotonic()
        pacer.wait()
        end = time.monotonic()
        self.assertGreaterEqual(end - start, 0.095)
        self.assertLess(end - waited_from, 0.09)

    def test_zero_spacing_never_blocks(self):
        pacer = Pacer(0.0)
        pacer.mark()
        self.assertEqual(pacer.remaining(), 0.0)

    def test_cancel_cuts_the_wait_short(self):
        cancel = threading.Event()
        cancel.set()
        pacer = Pacer(5.0, cancel)
        pacer.mark()
        start = time.monotonic()
        pacer.wait()
        self.assertLess(time.monotonic() - start, 0.5)


class TestSleep(unittest.TestCase):
    """Verify the cancellable sleep helper."""

    def test_returns_false_when_not_cancelled(self):
        self.assertFalse(sleep(0.01, threading.Event()))

    def test_returns_true_when_cancelled(self):
        cancel = threading.Event()
        threading.Timer(0.05, cancel.set).start()
        start = time.monotonic()
        self.assertTrue(sleep(5.0, cancel))
        self.assertLess(time.monotonic() - start, 1.0)

    def test_non_positive_duration(self):
        self.assertFalse(sleep(0))


if __name__ == "__main__":
    unittest.main()
