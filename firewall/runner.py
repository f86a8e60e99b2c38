"""
Command execution for iptables and ipset.

All kernel packet-filter state is reached through CommandRunner so that the
live firewall can be replaced by a fake in tests.
"""
import logging
import shutil
import subprocess
from typing import Optional

from lib.models import Outcome

from .errors import CommandFailed, DependencyMissing

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs packet-filter control commands and classifies their results."""

    def run(self, cmd: list[str], input: Optional[str] = None) -> subprocess.CompletedProcess:
        """
        Run a command without raising on a non-zero exit code.

        Args:
            cmd: Command and arguments to run
            input: Optional text fed to the command's stdin

        Returns:
            CompletedProcess instance

        Raises:
            DependencyMissing: if the executable does not exist
        """
        logger.debug("$ %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, text=True, input=input, check=False)
        except FileNotFoundError as e:
            raise DependencyMissing(cmd[0]) from e

    def succeeds(self, cmd: list[str]) -> bool:
        """Run a check command (iptables -C, ipset test, ...) and report whether it exited 0."""
        return self.run(cmd).returncode == 0

    def apply(self, cmd: list[str], input: Optional[str] = None) -> Outcome:
        """
        Run a state-changing command.

        Returns:
            Outcome.applied on success, Outcome.failed otherwise (the error is logged)
        """
        result = self.run(cmd, input=input)
        if result.returncode == 0:
            return Outcome.applied
        logger.error(f"✗ {' '.join(cmd)}: {result.stderr.strip()}")
        return Outcome.failed

    def require(self, cmd: list[str], input: Optional[str] = None) -> Outcome:
        """Run a state-changing command whose failure must abort the caller."""
        result = self.run(cmd, input=input)
        if result.returncode != 0:
            raise CommandFailed(cmd, result.stderr)
        return Outcome.applied

    def output(self, cmd: list[str]) -> Optional[str]:
        """Return stdout of a query command, or None if it failed."""
        result = self.run(cmd)
        if result.returncode != 0:
            return None
        return result.stdout

    @staticmethod
    def available(tool: str) -> bool:
        """Check if a tool is installed and on PATH."""
        return shutil.which(tool) is not None
