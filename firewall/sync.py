"""
Allow-set synchronization.

Rebuilds the allow-set from the registry: every cycle flushes the previous
members and inserts the addresses DNS currently returns, so a removed domain
or a retired address is gone after the next cycle.
"""
import logging
from datetime import datetime, timedelta

from lib.models import ResolvedAddress, SyncReport

from .allowset import AllowSet
from .registry import DomainRegistry
from .resolver import Resolver

logger = logging.getLogger(__name__)


class Synchronizer:
    """Keeps the allow-set in line with the registry and DNS."""

    def __init__(self, resolver: Resolver, allowset: AllowSet):
        self.resolver = resolver
        self.allowset = allowset

    def synchronize(self, registry: DomainRegistry) -> SyncReport:
        """
        Rebuild the allow-set from the registry.

        Resolution failures are logged per domain and never stop the cycle.
        Kernel errors (creating, flushing or filling the set) propagate.

        Returns:
            SyncReport with resolved and failed domains
        """
        self.allowset.ensure()
        self.allowset.flush()

        domains = registry.patterns()
        if not domains:
            logger.warning(f"⚠ No domains in {registry.filepath}, allow-set left empty")
            return SyncReport()

        logger.info(f"Resolving {len(domains)} allowed domains...")
        resolved, failed = self.resolver.resolve_all(domains)

        expires_at = datetime.now() + timedelta(seconds=self.allowset.timeout)
        entries = []
        for domain in domains:
            for address in sorted(resolved.get(domain, ())):
                logger.debug(f"  {domain} → {address}")
                entries.append(ResolvedAddress(domain=domain, address=address, expires_at=expires_at))

        inserted = self.allowset.add_batch(entries)

        report = SyncReport(
            resolved={domain: sorted(resolved[domain]) for domain in domains if domain in resolved},
            failed=failed,
            inserted=inserted,
        )
        if failed:
            logger.warning(f"⚠ {len(failed)} domain(s) could not be resolved: {', '.join(sorted(failed))}")
        logger.info(f"✓ Allow-set {self.allowset.name} holds {inserted} addresses for {len(report.resolved)} domains")
        return report
