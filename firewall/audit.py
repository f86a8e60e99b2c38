"""Append-only audit log of firewall changes."""
import logging
import os
import re
from datetime import datetime

from lib.models import AuditLogEntry

logger = logging.getLogger(__name__)

LINE_PATTERN = re.compile(r"^\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\] (\S+) ?(.*)$")


class AuditLog:
    """Writes '[timestamp] action subject' lines to the audit file."""

    def __init__(self, filepath: str):
        self.filepath = filepath

    def record(self, action: str, subject: str = "") -> AuditLogEntry:
        """
        Append an entry.

        An unwritable audit file is reported but does not fail the command
        that produced the entry.
        """
        entry = AuditLogEntry(timestamp=datetime.now().replace(microsecond=0), action=action, subject=subject)
        try:
            directory = os.path.dirname(self.filepath)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.filepath, "a", encoding="utf-8") as f:
                f.write(entry.format() + "\n")
        except OSError as e:
            logger.warning(f"⚠ Could not write audit log {self.filepath}: {e}")
        return entry

    def tail(self, count: int = 5) -> list[AuditLogEntry]:
        """Get the last entries, oldest first."""
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except FileNotFoundError:
            return []

        entries = []
        for line in lines[-count:] if count else []:
            match = LINE_PATTERN.match(line)
            if match:
                timestamp, action, subject = match.groups()
                entries.append(
                    AuditLogEntry(
                        timestamp=datetime.strptime(timestamp, "%Y-%m-%d %H:%M:%S"),
                        action=action,
                        subject=subject,
                    )
                )
        return entries
