#!/usr/bin/env python3

import os
import sys
import unittest
from unittest.mock import Mock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from click.testing import CliRunner
from commands.disable import disable
from firewall.errors import FirewallError
from lib.models import Outcome


class TestDisable(unittest.TestCase):
    """Tests for disable command"""

    def setUp(self):
        """Set up test fixtures"""
        self.runner = CliRunner()

    @patch("commands.disable.get_controller")
    def test_disable(self, mock_get_controller: Mock) -> None:
        """Test that disable reports removal."""
        mock_get_controller.return_value.disable.return_value = {
            "delete FW-EGRESS": Outcome.applied,
            "destroy allowed-domains": Outcome.applied,
        }

        result = self.runner.invoke(disable, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Firewall disabled", result.output)

    @patch("commands.disable.get_controller")
    def test_disable_when_not_installed(self, mock_get_controller: Mock) -> None:
        """Test that disabling twice succeeds."""
        mock_get_controller.return_value.disable.return_value = {"delete FW-EGRESS": Outcome.unchanged}

        result = self.runner.invoke(disable, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Firewall was not installed", result.output)

    @patch("commands.disable.get_controller")
    def test_partial_failure(self, mock_get_controller: Mock) -> None:
        """Test that a failed teardown step exits 1."""
        mock_get_controller.return_value.disable.side_effect = FirewallError("Firewall only partially disabled")

        result = self.runner.invoke(disable, [])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("partially disabled", result.output)


if __name__ == "__main__":
    unittest.main()
