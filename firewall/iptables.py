"""
iptables management for the allowlist firewall.

This module owns two custom chains, one for egress and one for ingress, and a
single jump rule from each of the default OUTPUT/INPUT chains. Default chain
policies are never changed.
"""
import logging
from typing import Callable, Optional, TypeVar

from lib.models import ChainStatus, Outcome

from .allowset import AllowSet
from .constants import (
    ALLOWED_PORTS,
    DNS_PORT,
    EGRESS_CHAIN,
    EGRESS_HOOK,
    INGRESS_CHAIN,
    INGRESS_HOOK,
    LOG_PREFIX,
    PRIVATE_IP_RANGES,
)
from .runner import CommandRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RuleInstaller:
    """Installs and removes the allowlist chains."""

    def __init__(self, runner: CommandRunner, allowset: AllowSet):
        self.runner = runner
        self.allowset = allowset
        # (custom chain, default chain it is hooked from)
        self.chains = ((EGRESS_CHAIN, EGRESS_HOOK), (INGRESS_CHAIN, INGRESS_HOOK))

    def egress_rules(self) -> list[list[str]]:
        """Rules for traffic leaving the host, in evaluation order."""
        ports = ",".join(str(port) for port in ALLOWED_PORTS)
        rules = [
            ["-o", "lo", "-j", "ACCEPT"],
            ["-m", "conntrack", "--ctstate", "ESTABLISHED,RELATED", "-j", "ACCEPT"],
            ["-p", "udp", "--dport", str(DNS_PORT), "-j", "ACCEPT"],
            ["-p", "tcp", "--dport", str(DNS_PORT), "-j", "ACCEPT"],
        ]
        rules += [["-d", cidr, "-j", "ACCEPT"] for cidr in PRIVATE_IP_RANGES]
        rules += [
            ["-p", "tcp", "-m", "set", "--match-set", self.allowset.name, "dst",
             "-m", "multiport", "--dports", ports, "-j", "ACCEPT"],
            ["-j", "LOG", "--log-prefix", LOG_PREFIX, "--log-level", "4"],
            ["-j", "DROP"],
        ]
        return rules

    def ingress_rules(self) -> list[list[str]]:
        """Rules for traffic entering the host, in evaluation order."""
        ports = ",".join(str(port) for port in ALLOWED_PORTS)
        rules = [
            ["-i", "lo", "-j", "ACCEPT"],
            ["-m", "conntrack", "--ctstate", "ESTABLISHED,RELATED", "-j", "ACCEPT"],
            ["-p", "udp", "--sport", str(DNS_PORT), "-j", "ACCEPT"],
            ["-p", "tcp", "--sport", str(DNS_PORT), "-j", "ACCEPT"],
        ]
        rules += [["-s", cidr, "-j", "ACCEPT"] for cidr in PRIVATE_IP_RANGES]
        rules += [
            ["-p", "tcp", "-m", "set", "--match-set", self.allowset.name, "src",
             "-m", "multiport", "--sports", ports, "-j", "ACCEPT"],
            ["-j", "LOG", "--log-prefix", LOG_PREFIX, "--log-level", "4"],
            ["-j", "DROP"],
        ]
        return rules

    def chain_exists(self, chain: str) -> bool:
        return self.runner.succeeds(["iptables", "-S", chain])

    def hook_count(self, chain: str, hook: str) -> int:
        """Count the jump rules from a default chain to one of our chains."""
        output = self.runner.output(["iptables", "-S", hook])
        if output is None:
            return 0
        jump = f"-A {hook} -j {chain}"
        return sum(1 for line in output.splitlines() if line.strip() == jump)

    def is_active(self) -> bool:
        """Both chains exist and each is hooked exactly once."""
        return all(self.chain_exists(chain) and self.hook_count(chain, hook) == 1 for chain, hook in self.chains)

    def status(self) -> list[ChainStatus]:
        return [
            ChainStatus(name=chain, hook=hook, exists=self.chain_exists(chain), hooks=self.hook_count(chain, hook))
            for chain, hook in self.chains
        ]

    def ensure_chain(self, chain: str) -> Outcome:
        """Create a custom chain if absent."""
        if self.chain_exists(chain):
            return Outcome.unchanged
        return self.runner.require(["iptables", "-N", chain])

    def unhook(self, chain: str, hook: str) -> Outcome:
        """Remove every jump from a default chain to a custom chain."""
        outcome = Outcome.unchanged
        while self.runner.succeeds(["iptables", "-C", hook, "-j", chain]):
            if self.runner.apply(["iptables", "-D", hook, "-j", chain]) == Outcome.failed:
                return Outcome.failed
            outcome = Outcome.applied
        return outcome

    def delete_chain(self, chain: str) -> Outcome:
        """Flush and delete a custom chain. A missing chain counts as deleted."""
        if not self.chain_exists(chain):
            return Outcome.unchanged
        if self.runner.apply(["iptables", "-F", chain]) == Outcome.failed:
            return Outcome.failed
        return self.runner.apply(["iptables", "-X", chain])

    def teardown(self) -> dict[str, Outcome]:
        """
        Remove hooks, chains and the allow-set.

        Every step is attempted even if an earlier one failed.

        Returns:
            Outcome per step, keyed by a readable step name
        """
        results = {}
        for chain, hook in self.chains:
            results[f"unhook {hook} → {chain}"] = self.unhook(chain, hook)
        for chain, _ in self.chains:
            results[f"delete {chain}"] = self.delete_chain(chain)
        results[f"destroy {self.allowset.name}"] = self.allowset.destroy()

        for step, outcome in results.items():
            if outcome == Outcome.applied:
                logger.debug(f"  ✓ {step}")
            elif outcome == Outcome.failed:
                logger.error(f"  ✗ {step} failed")
        return results

    def install(self) -> None:
        """
        Create the chains, fill them and hook them at the head of OUTPUT/INPUT.

        The allow-set must exist before this is called, iptables refuses
        --match-set on a missing set.

        Raises:
            CommandFailed: if any rule cannot be added
        """
        rulesets = {EGRESS_CHAIN: self.egress_rules(), INGRESS_CHAIN: self.ingress_rules()}

        for chain, hook in self.chains:
            self.ensure_chain(chain)
            self.runner.require(["iptables", "-F", chain])
            for rule in rulesets[chain]:
                self.runner.require(["iptables", "-A", chain, *rule])
            logger.debug(f"  ✓ {chain}: {len(rulesets[chain])} rules")

        for chain, hook in self.chains:
            if self.hook_count(chain, hook) == 0:
                self.runner.require(["iptables", "-I", hook, "1", "-j", chain])
            logger.info(f"✓ {chain} hooked at the head of {hook}")

    def setup(self, populate: Optional[Callable[[], T]] = None) -> Optional[T]:
        """
        Tear down any previous installation and install from scratch.

        The chains are hooked before populate runs, so the host stays
        deny-by-default while resolving and after a failed populate.

        Args:
            populate: Called after install to fill the allow-set

        Returns:
            Whatever populate returned
        """
        self.teardown()
        self.allowset.ensure()
        self.install()
        return populate() if populate else None
