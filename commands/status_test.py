#!/usr/bin/env python3

import os
import sys
import unittest
from unittest.mock import Mock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from click.testing import CliRunner
from commands.status import status
from firewall.errors import DependencyMissing
from lib.models import ChainStatus, FirewallState, FirewallStatus


class TestStatus(unittest.TestCase):
    """Tests for status command"""

    def setUp(self):
        """Set up test fixtures"""
        self.runner = CliRunner()

    @patch("commands.status.get_controller")
    def test_active(self, mock_get_controller: Mock) -> None:
        """Test the output for an installed firewall."""
        mock_get_controller.return_value.status.return_value = FirewallStatus(
            state=FirewallState.active,
            chains=[
                ChainStatus(name="FW-EGRESS", hook="OUTPUT", exists=True, hooks=1),
                ChainStatus(name="FW-INGRESS", hook="INPUT", exists=True, hooks=1),
            ],
            allowset_exists=True,
            allowset_members=["140.82.112.3", "93.184.216.34"],
            domains=2,
            schedule_minutes=30,
            recent_audit=["[2024-01-02 03:04:05] add github.com"],
        )

        result = self.runner.invoke(status, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("ACTIVE", result.output)
        self.assertIn("present, hooked 1x from OUTPUT", result.output)
        self.assertIn("2 addresses", result.output)
        self.assertIn("every 30 minutes", result.output)
        self.assertIn("add github.com", result.output)

    @patch("commands.status.get_controller")
    def test_inactive(self, mock_get_controller: Mock) -> None:
        """Test the output after disable."""
        mock_get_controller.return_value.status.return_value = FirewallStatus(
            state=FirewallState.inactive,
            chains=[
                ChainStatus(name="FW-EGRESS", hook="OUTPUT", exists=False, hooks=0),
                ChainStatus(name="FW-INGRESS", hook="INPUT", exists=False, hooks=0),
            ],
        )

        result = self.runner.invoke(status, [])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("INACTIVE", result.output)
        self.assertIn("absent (0 addresses)", result.output)
        self.assertIn("not scheduled", result.output)
        self.assertNotIn("Recent changes", result.output)

    @patch("commands.status.get_controller")
    def test_missing_iptables(self, mock_get_controller: Mock) -> None:
        """Test that status exits 1 without iptables."""
        mock_get_controller.return_value.status.side_effect = DependencyMissing("iptables")

        result = self.runner.invoke(status, [])

        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
