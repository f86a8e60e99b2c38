"""Tests for firewall.controller module"""
import os
import tempfile
import unittest
from unittest.mock import patch

from firewall.audit import AuditLog
from firewall.controller import Controller
from firewall.errors import (
    CommandFailed,
    ConfigMissing,
    DependencyMissing,
    FirewallError,
    InvalidDomain,
    PrivilegeError,
)
from firewall.registry import DomainRegistry
from firewall.schedule import RefreshSchedule
from lib.models import FirewallState, Outcome
from lib.test_stubs import FakeKernel, FakeResolver

ANSWERS = {
    "github.com": {"140.82.112.3"},
    "api.example.com": {"93.184.216.34"},
    "registry.npmjs.org": {"104.16.0.35", "104.16.1.35"},
}


class ControllerTestCase(unittest.TestCase):
    """Controller wired to an in-memory kernel and a fixed DNS table"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.domains_file = os.path.join(self.temp_dir.name, "allowed-domains.txt")
        self.audit_file = os.path.join(self.temp_dir.name, "firewall-audit.log")
        with open(self.domains_file, "w") as f:
            f.write("github.com\n# note\napi.example.com # primary\n")
        self.kernel = FakeKernel()
        self.controller = self._controller(self.kernel)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _controller(self, kernel, require_root=False):
        return Controller(
            DomainRegistry(self.domains_file),
            AuditLog(self.audit_file),
            runner=kernel,
            resolver=FakeResolver(ANSWERS),
            schedule=RefreshSchedule(os.path.join(self.temp_dir.name, "domain-firewall")),
            lock_path=os.path.join(self.temp_dir.name, "firewall.lock"),
            require_root=require_root,
        )

    def _audit_lines(self):
        with open(self.audit_file) as f:
            return f.read().splitlines()


class TestSetup(ControllerTestCase):
    def test_setup_activates(self):
        report = self.controller.setup()

        self.assertEqual(self.controller.state(), FirewallState.active)
        self.assertEqual(sorted(report.resolved), ["api.example.com", "github.com"])
        self.assertEqual(sorted(self.controller.allowset.members()), ["140.82.112.3", "93.184.216.34"])
        self.assertTrue(self._audit_lines()[-1].endswith("setup 2 domains, 2 addresses"))

    def test_setup_twice_is_idempotent(self):
        self.controller.setup()
        first = self.kernel.snapshot()

        self.controller.setup()

        self.assertEqual(self.kernel.snapshot(), first)

    def test_refresh_is_audited_as_refresh(self):
        self.controller.refresh()

        self.assertIn("] refresh ", self._audit_lines()[-1])

    def test_setup_with_empty_registry(self):
        """An empty registry installs the chains with an empty allow-set"""
        os.unlink(self.domains_file)

        report = self.controller.setup()

        self.assertEqual(self.controller.state(), FirewallState.active)
        self.assertEqual(report.inserted, 0)
        self.assertEqual(self.controller.allowset.members(), [])

    def test_requires_root(self):
        controller = self._controller(self.kernel, require_root=True)

        with patch("firewall.controller.os.geteuid", return_value=1000):
            with self.assertRaises(PrivilegeError):
                controller.setup()

        self.assertEqual(self.kernel.commands, [])

    def test_requires_tools(self):
        controller = self._controller(FakeKernel(tools=("iptables",)))

        with self.assertRaises(DependencyMissing) as ctx:
            controller.setup()

        self.assertEqual(ctx.exception.tool, "ipset")

    def test_kernel_failure_propagates(self):
        self.kernel.fail_on.add(("ipset", "restore"))

        with self.assertRaises(CommandFailed):
            self.controller.setup()

    def test_failed_refresh_leaves_firewall_active(self):
        """A failing allow-set fill never leaves the host unfiltered"""
        self.controller.setup()
        self.kernel.fail_on.add(("ipset", "restore"))

        with self.assertRaises(CommandFailed):
            self.controller.refresh()

        self.assertEqual(self.controller.state(), FirewallState.active)
        self.assertEqual(self.kernel.jumps("OUTPUT", "FW-EGRESS"), 1)
        self.assertEqual(self.kernel.jumps("INPUT", "FW-INGRESS"), 1)
        self.assertEqual(self.kernel.chains["FW-EGRESS"][-1], ("-j", "DROP"))
        self.assertEqual(self.kernel.policies["OUTPUT"], "ACCEPT")

    def test_hooks_in_place_while_resolving(self):
        self.controller.setup()
        seen = []
        lookup = self.controller.resolver.lookup

        def recording_lookup(domain):
            seen.append(self.kernel.jumps("OUTPUT", "FW-EGRESS"))
            return lookup(domain)

        with patch.object(self.controller.resolver, "lookup", side_effect=recording_lookup):
            self.controller.refresh()

        self.assertEqual(seen, [1, 1])


class TestAddRemove(ControllerTestCase):
    def setUp(self):
        super().setUp()
        self.controller.setup()

    def test_add(self):
        outcome, report = self.controller.add("registry.npmjs.org")

        self.assertEqual(outcome, Outcome.applied)
        self.assertIn("registry.npmjs.org", self.controller.registry.patterns())
        self.assertIn("104.16.0.35", self.controller.allowset.members())
        self.assertEqual(self.controller.state(), FirewallState.active)
        self.assertTrue(self._audit_lines()[-1].endswith("add registry.npmjs.org"))

    def test_add_twice(self):
        self.controller.add("registry.npmjs.org")

        outcome, _ = self.controller.add("registry.npmjs.org")

        self.assertEqual(outcome, Outcome.unchanged)
        self.assertEqual(self.controller.registry.patterns().count("registry.npmjs.org"), 1)

    def test_add_invalid_changes_nothing(self):
        before = self.kernel.snapshot()

        with self.assertRaises(InvalidDomain):
            self.controller.add("# comment")

        self.assertEqual(self.kernel.snapshot(), before)
        self.assertEqual(self.controller.registry.patterns(), ["github.com", "api.example.com"])

    def test_add_unresolvable_is_kept(self):
        """The domain stays listed and gets allowed once it resolves"""
        outcome, report = self.controller.add("not-yet.example.com")

        self.assertEqual(outcome, Outcome.applied)
        self.assertIn("not-yet.example.com", report.failed)
        self.assertIn("not-yet.example.com", self.controller.registry.patterns())
        self.assertEqual(self.controller.state(), FirewallState.active)

    def test_add_keeps_registry_change_when_apply_fails(self):
        self.kernel.fail_on.add(("ipset", "restore"))

        with self.assertRaises(CommandFailed):
            self.controller.add("registry.npmjs.org")

        self.assertIn("registry.npmjs.org", self.controller.registry.patterns())
        self.assertEqual(self.controller.state(), FirewallState.active)

    def test_remove(self):
        outcome, _ = self.controller.remove("github.com")

        self.assertEqual(outcome, Outcome.applied)
        self.assertNotIn("140.82.112.3", self.controller.allowset.members())
        self.assertEqual(self.controller.state(), FirewallState.active)

    def test_remove_hand_written_entry(self):
        with open(self.domains_file, "a") as f:
            f.write("legacy_host!.example\n")

        outcome, _ = self.controller.remove("legacy_host!.example")

        self.assertEqual(outcome, Outcome.applied)
        self.assertEqual(self.controller.registry.patterns(), ["github.com", "api.example.com"])

    def test_remove_absent(self):
        outcome, _ = self.controller.remove("absent.example.org")

        self.assertEqual(outcome, Outcome.unchanged)
        self.assertIn("(not listed)", self._audit_lines()[-1])


class TestDisable(ControllerTestCase):
    def test_disable_then_status_is_inactive(self):
        self.controller.setup()

        self.controller.disable()
        status = self.controller.status()

        self.assertEqual(status.state, FirewallState.inactive)
        self.assertEqual(status.allowset_members, [])
        self.assertFalse(status.allowset_exists)
        self.assertEqual(self.kernel.custom_chains(), [])
        # Registry survives
        self.assertEqual(self.controller.registry.patterns(), ["github.com", "api.example.com"])

    def test_disable_when_inactive(self):
        results = self.controller.disable()

        self.assertEqual(set(results.values()), {Outcome.unchanged})
        self.assertEqual(self.controller.state(), FirewallState.inactive)

    def test_partial_disable_raises(self):
        self.controller.setup()
        self.kernel.fail_on.add(("iptables", "-D", "INPUT", "-j", "FW-INGRESS"))

        with self.assertLogs("firewall", level="ERROR"):
            with self.assertRaises(FirewallError) as ctx:
                self.controller.disable()

        self.assertIn("unhook INPUT", str(ctx.exception))
        self.assertIn("failed:", self._audit_lines()[-1])


class TestReadOnly(ControllerTestCase):
    def test_list_domains(self):
        self.controller.setup()

        lines, members = self.controller.list_domains()

        self.assertEqual(lines, ["github.com", "# note", "api.example.com # primary"])
        self.assertEqual(sorted(members), ["140.82.112.3", "93.184.216.34"])

    def test_list_missing_registry(self):
        os.unlink(self.domains_file)

        with self.assertRaises(ConfigMissing):
            self.controller.list_domains()

    @patch("firewall.diagnostics.requests.head")
    def test_test_defaults_to_github(self, mock_head):
        self.controller.setup()

        report = self.controller.test()

        self.assertEqual(report.domain, "github.com")
        self.assertEqual(report.membership, {"140.82.112.3": True})
        self.assertTrue(report.reachable)

    def test_status_active(self):
        self.controller.setup()
        self.controller.add("registry.npmjs.org")

        status = self.controller.status()

        self.assertEqual(status.state, FirewallState.active)
        self.assertEqual([chain.hooks for chain in status.chains], [1, 1])
        self.assertEqual(status.domains, 3)
        self.assertEqual(len(status.allowset_members), 4)
        self.assertIsNone(status.schedule_minutes)
        self.assertEqual(len(status.recent_audit), 2)

    def test_status_changes_nothing(self):
        self.controller.setup()
        before = self.kernel.snapshot()

        self.controller.status()

        self.assertEqual(self.kernel.snapshot(), before)

    def test_status_without_iptables(self):
        controller = self._controller(FakeKernel(tools=()))

        with self.assertRaises(DependencyMissing):
            controller.status()


class TestSchedule(ControllerTestCase):
    @patch("firewall.schedule.shutil.which", return_value="/usr/local/bin/firewall")
    def test_schedule_and_unschedule(self, mock_which):
        self.assertEqual(self.controller.schedule_refresh(20), Outcome.applied)
        self.assertEqual(self.controller.status().schedule_minutes, 20)

        self.assertEqual(self.controller.unschedule_refresh(), Outcome.applied)
        self.assertEqual(self.controller.unschedule_refresh(), Outcome.unchanged)
        self.assertIsNone(self.controller.status().schedule_minutes)


if __name__ == "__main__":
    unittest.main()
