"""
DNS resolution of registry domains.

Lookups return IPv4 addresses only. lookup() raises ResolutionFailure with a
reason; resolve() and resolve_all() absorb failures so one bad domain never
stops a synchronization cycle.
"""
import ipaddress
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

import dns.exception
import dns.resolver

from .constants import DNS_TIMEOUT, NAMESERVERS, RESOLVER_WORKERS
from .errors import ResolutionFailure

logger = logging.getLogger(__name__)


class Resolver:
    """Resolves domains to their current IPv4 addresses."""

    def __init__(
        self,
        nameservers: Optional[list[str]] = None,
        timeout: float = DNS_TIMEOUT,
        max_workers: int = RESOLVER_WORKERS,
    ):
        """
        Initialize resolver.

        Args:
            nameservers: Nameservers to query instead of the system configuration
            timeout: Total time allowed for one lookup, in seconds
            max_workers: Size of the worker pool used by resolve_all
        """
        self.nameservers = nameservers if nameservers is not None else NAMESERVERS
        self.timeout = timeout
        self.max_workers = max(1, max_workers)

    def _make_resolver(self) -> dns.resolver.Resolver:
        # Only read /etc/resolv.conf when no nameservers are configured
        resolver = dns.resolver.Resolver(configure=not self.nameservers)
        if self.nameservers:
            resolver.nameservers = list(self.nameservers)
        resolver.lifetime = self.timeout
        return resolver

    def lookup(self, domain: str) -> set[str]:
        """
        Resolve a domain to IPv4 addresses.

        Raises:
            ResolutionFailure: on NXDOMAIN, empty answer, unreachable nameservers or timeout
        """
        try:
            answers = self._make_resolver().resolve(domain, "A")
        except dns.resolver.NXDOMAIN as e:
            raise ResolutionFailure(domain, "domain does not exist") from e
        except dns.resolver.NoAnswer as e:
            raise ResolutionFailure(domain, "no A records") from e
        except dns.resolver.NoNameservers as e:
            raise ResolutionFailure(domain, "no nameserver answered") from e
        except dns.exception.Timeout as e:
            raise ResolutionFailure(domain, f"timed out after {self.timeout:g}s") from e
        except dns.exception.DNSException as e:
            raise ResolutionFailure(domain, str(e) or e.__class__.__name__) from e

        addresses = set()
        for rdata in answers:
            address = rdata.to_text()
            try:
                if ipaddress.ip_address(address).version == 4:
                    addresses.add(address)
            except ValueError:
                logger.debug(f"Ignoring non-IP answer for {domain}: {address}")

        if not addresses:
            raise ResolutionFailure(domain, "no IPv4 addresses")
        return addresses

    def resolve(self, domain: str) -> set[str]:
        """Resolve a domain, returning an empty set on failure (with a warning)."""
        try:
            return self.lookup(domain)
        except ResolutionFailure as e:
            logger.warning(f"⚠ {e}")
            return set()

    def resolve_all(self, domains: Iterable[str]) -> tuple[dict[str, set[str]], dict[str, str]]:
        """
        Resolve domains concurrently.

        Args:
            domains: Domains to resolve

        Returns:
            (resolved, failed): domain -> addresses for successful lookups,
            domain -> reason for failed ones
        """
        resolved: dict[str, set[str]] = {}
        failed: dict[str, str] = {}
        domains = list(dict.fromkeys(domains))
        if not domains:
            return resolved, failed

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(domains))) as executor:
            futures = {executor.submit(self.lookup, domain): domain for domain in domains}

            # Results are aggregated here, in the calling thread only
            for future in as_completed(futures):
                domain = futures[future]
                try:
                    resolved[domain] = future.result()
                except ResolutionFailure as e:
                    logger.warning(f"⚠ {e}")
                    failed[domain] = e.reason

        return resolved, failed
