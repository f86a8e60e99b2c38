"""
Scheduled allow-set refresh via cron.

DNS answers drift and allow-set entries expire, so the firewall must be
refreshed periodically. The schedule is a /etc/cron.d entry running
`firewall refresh`; it is installed and removed explicitly.
"""
import logging
import os
import re
import shutil
import sys
from typing import Optional

from lib.models import Outcome

from .constants import ALLOWSET_TIMEOUT, CRON_FILE

logger = logging.getLogger(__name__)

CRON_LINE_PATTERN = re.compile(r"^\*/(\d+) \* \* \* \* ")


class RefreshSchedule:
    """Manages the cron entry that runs periodic refreshes."""

    def __init__(self, filepath: str = CRON_FILE, set_timeout: int = ALLOWSET_TIMEOUT):
        self.filepath = filepath
        self.set_timeout = set_timeout

    @staticmethod
    def command() -> str:
        """Command line cron should run (the installed console script if available)."""
        executable = shutil.which("firewall") or os.path.abspath(sys.argv[0])
        return f"{executable} refresh"

    def validate(self, minutes: int) -> None:
        """
        Check that a refresh interval keeps allow-set entries alive.

        Raises:
            ValueError: if the interval is not between 1 and 59 minutes or not shorter than the entry timeout
        """
        if not 1 <= minutes <= 59:
            raise ValueError(f"Refresh interval must be between 1 and 59 minutes, got {minutes}")
        if minutes * 60 >= self.set_timeout:
            raise ValueError(
                f"Refresh interval ({minutes}m) must be shorter than the allow-set timeout ({self.set_timeout}s)"
            )

    def interval(self) -> Optional[int]:
        """Installed refresh interval in minutes, or None if no schedule is installed."""
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                for line in f:
                    match = CRON_LINE_PATTERN.match(line)
                    if match:
                        return int(match.group(1))
        except FileNotFoundError:
            return None
        return None

    def install(self, minutes: int) -> Outcome:
        self.validate(minutes)
        content = (
            "# Managed by firewall - refreshes the domain allow-set\n"
            "SHELL=/bin/sh\n"
            "PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin\n"
            f"*/{minutes} * * * * root {self.command()} >/dev/null 2>&1\n"
        )
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                if f.read() == content:
                    return Outcome.unchanged
        except FileNotFoundError:
            pass

        directory = os.path.dirname(self.filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.filepath, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(self.filepath, 0o644)
        logger.info(f"✓ Refresh scheduled every {minutes} minutes ({self.filepath})")
        return Outcome.applied

    def remove(self) -> Outcome:
        try:
            os.unlink(self.filepath)
        except FileNotFoundError:
            return Outcome.unchanged
        logger.info(f"✓ Removed refresh schedule {self.filepath}")
        return Outcome.applied
