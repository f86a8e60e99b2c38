"""
Firewall controller.

Binds the registry, synchronizer, rule installer, diagnostics, audit log and
refresh schedule together. The firewall is either ACTIVE (both chains
installed and hooked) or INACTIVE. setup, refresh, add and remove always end
ACTIVE; disable always ends INACTIVE. list, test and status change nothing.
"""
import logging
import os
from contextlib import nullcontext
from typing import Optional

from lib.models import DiagnosticReport, FirewallState, FirewallStatus, Outcome, SyncReport

from .allowset import AllowSet
from .audit import AuditLog
from .constants import AUDIT_LOG_FILE, DEFAULT_TEST_DOMAIN, DOMAINS_FILE, LOCK_FILE, REQUIRED_TOOLS
from .diagnostics import Diagnostics
from .errors import DependencyMissing, FirewallError, PrivilegeError
from .iptables import RuleInstaller
from .lock import command_lock
from .registry import DomainRegistry, normalize, strip_pattern
from .resolver import Resolver
from .runner import CommandRunner
from .schedule import RefreshSchedule
from .sync import Synchronizer

logger = logging.getLogger(__name__)


class Controller:
    """Entry point for every firewall command."""

    def __init__(
        self,
        registry: DomainRegistry,
        audit: AuditLog,
        runner: Optional[CommandRunner] = None,
        resolver: Optional[Resolver] = None,
        schedule: Optional[RefreshSchedule] = None,
        lock_path: Optional[str] = LOCK_FILE,
        require_root: bool = True,
    ):
        """
        Initialize controller.

        Args:
            registry: Allowed domains store
            audit: Audit log receiving one entry per change
            runner: Executes iptables/ipset (replaced by a fake in tests)
            resolver: DNS resolver
            schedule: Cron-based refresh schedule
            lock_path: Lock file serializing mutating commands (None disables locking)
            require_root: Refuse mutating commands when not running as root
        """
        self.registry = registry
        self.audit = audit
        self.runner = runner or CommandRunner()
        self.resolver = resolver or Resolver()
        self.schedule = schedule or RefreshSchedule()
        self.lock_path = lock_path
        self.require_root = require_root

        self.allowset = AllowSet(self.runner)
        self.synchronizer = Synchronizer(self.resolver, self.allowset)
        self.installer = RuleInstaller(self.runner, self.allowset)
        self.diagnostics = Diagnostics(self.resolver, self.allowset)

    @classmethod
    def from_config(cls) -> "Controller":
        """Build a controller from the configured file locations."""
        return cls(DomainRegistry(DOMAINS_FILE), AuditLog(AUDIT_LOG_FILE))

    # === Preconditions ===

    def check_privileges(self, command: str) -> None:
        """
        Raises:
            PrivilegeError: if not running as root
            DependencyMissing: if iptables or ipset is not installed
        """
        if self.require_root and os.geteuid() != 0:
            raise PrivilegeError(command)
        for tool in REQUIRED_TOOLS:
            if not self.runner.available(tool):
                raise DependencyMissing(tool)

    def _locked(self):
        if self.lock_path is None:
            return nullcontext()
        return command_lock(self.lock_path)

    def _apply(self) -> SyncReport:
        """Reinstall everything from the current registry contents."""
        return self.installer.setup(populate=lambda: self.synchronizer.synchronize(self.registry))

    # === Mutating commands ===

    def setup(self, action: str = "setup") -> SyncReport:
        """Install the firewall from scratch (also used for refresh)."""
        self.check_privileges(action)
        with self._locked():
            report = self._apply()
            self.audit.record(action, f"{len(report.resolved)} domains, {report.inserted} addresses")
        return report

    def refresh(self) -> SyncReport:
        return self.setup(action="refresh")

    def add(self, domain: str) -> tuple[Outcome, SyncReport]:
        """
        Allow a domain and reinstall the firewall.

        The registry change is kept even if reinstalling fails; the error
        propagates to the caller.
        """
        pattern = normalize(domain)
        self.check_privileges("add")
        with self._locked():
            outcome = self.registry.add(pattern)
            self.audit.record("add", pattern if outcome == Outcome.applied else f"{pattern} (already allowed)")
            report = self._apply()
        return outcome, report

    def remove(self, domain: str) -> tuple[Outcome, SyncReport]:
        """Stop allowing a domain and reinstall the firewall."""
        pattern = strip_pattern(domain)
        self.check_privileges("remove")
        with self._locked():
            outcome = self.registry.remove(pattern)
            self.audit.record("remove", pattern if outcome == Outcome.applied else f"{pattern} (not listed)")
            report = self._apply()
        return outcome, report

    def disable(self) -> dict[str, Outcome]:
        """
        Remove the chains, hooks and allow-set. The registry is kept.

        Raises:
            FirewallError: if any teardown step failed
        """
        self.check_privileges("disable")
        with self._locked():
            results = self.installer.teardown()
            failed = [step for step, outcome in results.items() if outcome == Outcome.failed]
            self.audit.record("disable", "failed: " + ", ".join(failed) if failed else "")
        if failed:
            raise FirewallError(f"Firewall only partially disabled, failed steps: {', '.join(failed)}")
        return results

    def schedule_refresh(self, minutes: int) -> Outcome:
        self.check_privileges("schedule")
        with self._locked():
            outcome = self.schedule.install(minutes)
            if outcome == Outcome.applied:
                self.audit.record("schedule", f"every {minutes}m")
        return outcome

    def unschedule_refresh(self) -> Outcome:
        self.check_privileges("schedule")
        with self._locked():
            outcome = self.schedule.remove()
            if outcome == Outcome.applied:
                self.audit.record("unschedule")
        return outcome

    # === Read-only commands ===

    def list_domains(self) -> tuple[list[str], list[str]]:
        """
        Get the raw registry lines and the current allow-set members.

        Raises:
            ConfigMissing: if the registry file does not exist
        """
        lines = self.registry.lines()
        members = self.allowset.members() if self.runner.available("ipset") else []
        return lines, members

    def test(self, domain: Optional[str] = None) -> DiagnosticReport:
        return self.diagnostics.test(domain or DEFAULT_TEST_DOMAIN)

    def state(self) -> FirewallState:
        return FirewallState.active if self.installer.is_active() else FirewallState.inactive

    def status(self) -> FirewallStatus:
        if not self.runner.available("iptables"):
            raise DependencyMissing("iptables")
        if self.require_root and os.geteuid() != 0:
            logger.warning("⚠ Not running as root, iptables state may not be readable")

        chains = self.installer.status()
        active = all(chain.exists and chain.hooks == 1 for chain in chains)
        ipset_available = self.runner.available("ipset")
        return FirewallStatus(
            state=FirewallState.active if active else FirewallState.inactive,
            chains=chains,
            allowset_exists=ipset_available and self.allowset.exists(),
            allowset_members=self.allowset.members() if ipset_available else [],
            domains=len(self.registry.patterns()),
            schedule_minutes=self.schedule.interval(),
            recent_audit=[entry.format() for entry in self.audit.tail(5)],
        )

