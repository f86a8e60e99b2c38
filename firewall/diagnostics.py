"""
Connectivity diagnostics for a single domain.

Reports three separate things: whether the domain resolves, whether each
resolved address is in the allow-set, and whether the domain answers over
HTTPS. They are never merged into one verdict.
"""
import logging

import requests

from lib.models import DiagnosticReport

from .allowset import AllowSet
from .constants import PROBE_TIMEOUT
from .errors import DependencyMissing, ResolutionFailure
from .resolver import Resolver

logger = logging.getLogger(__name__)


class Diagnostics:
    """Ad-hoc resolution, membership and reachability checks."""

    def __init__(self, resolver: Resolver, allowset: AllowSet, timeout: float = PROBE_TIMEOUT):
        self.resolver = resolver
        self.allowset = allowset
        self.timeout = timeout

    def test(self, domain: str) -> DiagnosticReport:
        report = DiagnosticReport(domain=domain)

        try:
            report.addresses = sorted(self.resolver.lookup(domain))
        except ResolutionFailure as e:
            report.dns_error = e.reason
            return report

        for address in report.addresses:
            report.membership[address] = self._membership(address)

        report.reachable, report.reach_error = self.probe(domain)
        return report

    def _membership(self, address: str):
        try:
            return self.allowset.contains(address)
        except DependencyMissing as e:
            logger.debug(f"Cannot check allow-set membership: {e}")
            return None

    def probe(self, domain: str) -> tuple[bool, str | None]:
        """
        Try an HTTPS request to the domain. Any HTTP response counts as reachable.

        Returns:
            (reachable, error message or None)
        """
        try:
            requests.head(f"https://{domain}", timeout=self.timeout, allow_redirects=False)
            return True, None
        except requests.exceptions.Timeout:
            return False, f"no response within {self.timeout:g}s"
        except requests.exceptions.RequestException as e:
            return False, str(e)
