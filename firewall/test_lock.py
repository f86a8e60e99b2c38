"""Tests for firewall.lock module"""
import os
import tempfile
import threading
import time
import unittest

from firewall.lock import command_lock


class TestCommandLock(unittest.TestCase):
    """Test serialization of mutating commands"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "run", "firewall.lock")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_creates_lock_file(self):
        with command_lock(self.path):
            self.assertTrue(os.path.exists(self.path))

    def test_second_holder_waits(self):
        events = []
        holding = threading.Event()

        def first():
            with command_lock(self.path):
                holding.set()
                time.sleep(0.2)
                events.append("first done")

        def second():
            holding.wait(5)
            with command_lock(self.path):
                events.append("second acquired")

        threads = [threading.Thread(target=first), threading.Thread(target=second)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        self.assertEqual(events, ["first done", "second acquired"])


if __name__ == "__main__":
    unittest.main()
