"""
Kernel allow-set management (ipset).

The allow-set is a hash:ip set whose entries time out after a fixed refresh
window. iptables matches against it with a single rule, so lookups stay O(1)
however many domains are allowed.
"""
import logging
from typing import Iterable, Optional

from lib.models import Outcome, ResolvedAddress

from .constants import ALLOWSET_NAME, ALLOWSET_TIMEOUT
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class AllowSet:
    """Manages the ipset holding allowed destination addresses."""

    def __init__(self, runner: CommandRunner, name: str = ALLOWSET_NAME, timeout: int = ALLOWSET_TIMEOUT):
        self.runner = runner
        self.name = name
        self.timeout = timeout

    def exists(self) -> bool:
        return self.runner.succeeds(["ipset", "list", "-n", self.name])

    def ensure(self) -> Outcome:
        """Create the set if it does not exist (idempotent)."""
        if self.exists():
            return Outcome.unchanged
        outcome = self.runner.require(
            ["ipset", "create", self.name, "hash:ip", "family", "inet", "timeout", str(self.timeout)]
        )
        logger.info(f"✓ Created allow-set {self.name} (entry timeout {self.timeout}s)")
        return outcome

    def flush(self) -> Outcome:
        """Remove every member, keeping the set itself."""
        if not self.exists():
            return Outcome.unchanged
        return self.runner.require(["ipset", "flush", self.name])

    def destroy(self) -> Outcome:
        """Destroy the set. A missing set counts as already destroyed."""
        if not self.exists():
            return Outcome.unchanged
        outcome = self.runner.apply(["ipset", "destroy", self.name])
        if outcome == Outcome.applied:
            logger.info(f"✓ Destroyed allow-set {self.name}")
        return outcome

    def add(self, address: str) -> Outcome:
        """Add one address. Re-adding a member only refreshes its timeout."""
        return self.runner.apply(["ipset", "add", self.name, address, "timeout", str(self.timeout), "-exist"])

    def add_batch(self, entries: Iterable[ResolvedAddress]) -> int:
        """
        Insert resolved addresses in a single ipset restore call.

        Returns:
            Number of distinct addresses handed to the kernel
        """
        addresses = sorted({entry.address for entry in entries})
        if not addresses:
            return 0
        script = "".join(f"add {self.name} {address} timeout {self.timeout}\n" for address in addresses)
        self.runner.require(["ipset", "restore", "-exist"], input=script)
        return len(addresses)

    def contains(self, address: str) -> Optional[bool]:
        """
        Test membership of an address.

        Returns:
            True/False, or None when the set does not exist
        """
        if not self.exists():
            return None
        return self.runner.succeeds(["ipset", "test", self.name, address])

    def members(self) -> list[str]:
        """Get the current members (empty when the set does not exist)."""
        output = self.runner.output(["ipset", "list", self.name])
        if output is None:
            return []

        members = []
        in_members = False
        for line in output.splitlines():
            if line.startswith("Members:"):
                in_members = True
                continue
            if in_members and line.strip():
                # "1.2.3.4 timeout 3587"
                members.append(line.split()[0])
        return members
