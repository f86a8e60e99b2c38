"""
Domain registry for the allowlist firewall.

The registry is a plain text file with one domain pattern per line. Inline
comments start at '#'. Blank and comment-only lines are kept verbatim in the
file but never resolved.
"""
import logging
import os
import re
import shutil
import threading

from lib.models import AllowedDomain, Outcome

from .errors import ConfigMissing, InvalidDomain

logger = logging.getLogger(__name__)

# Hostname labels, optionally with a leading wildcard label
DOMAIN_PATTERN = re.compile(r"^(\*\.)?([A-Za-z0-9_]([A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?\.)*[A-Za-z0-9_]([A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?\.?$")


def strip_pattern(domain: str) -> str:
    """
    Strip an inline comment and surrounding whitespace from a domain argument.

    Raises:
        InvalidDomain: if nothing is left
    """
    entry = AllowedDomain.parse(domain or "")
    if entry is None:
        raise InvalidDomain((domain or "").strip())
    return entry.pattern


def normalize(domain: str) -> str:
    """
    Strip a domain argument and check that it is a hostname pattern.

    Raises:
        InvalidDomain: if nothing usable is left
    """
    pattern = strip_pattern(domain)
    if not DOMAIN_PATTERN.match(pattern):
        raise InvalidDomain(pattern)
    return pattern


def _pattern_of(line: str) -> str | None:
    entry = AllowedDomain.parse(line)
    return entry.pattern if entry else None


class DomainRegistry:
    """Manages the allowed-domains file."""

    def __init__(self, filepath: str, header_comment: str = "# Allowed domains - one per line"):
        """
        Initialize domain registry.

        Args:
            filepath: Path to the registry file
            header_comment: Comment written at the top of a newly created file
        """
        self.filepath = filepath
        self.header_comment = header_comment
        self.lock = threading.Lock()

    def exists(self) -> bool:
        return os.path.isfile(self.filepath)

    def lines(self) -> list[str]:
        """
        Read the raw registry, comments and blank lines included.

        Raises:
            ConfigMissing: if the registry file does not exist
        """
        if not self.exists():
            raise ConfigMissing(self.filepath)
        return self._read_lines()

    def domains(self) -> list[AllowedDomain]:
        """
        Get the resolvable entries in file order (missing file = empty registry).

        A pattern listed twice is returned once.
        """
        seen = set()
        result = []
        for line in self._read_lines():
            entry = AllowedDomain.parse(line)
            if entry and entry.pattern not in seen:
                seen.add(entry.pattern)
                result.append(entry)
        return result

    def patterns(self) -> list[str]:
        return [entry.pattern for entry in self.domains()]

    def add(self, domain: str) -> Outcome:
        """
        Append a domain to the registry.

        Args:
            domain: Domain pattern, an inline comment is stripped

        Returns:
            Outcome.applied if added, Outcome.unchanged if the pattern was already present
        """
        pattern = normalize(domain)

        with self.lock:
            lines = self._read_lines()
            if any(_pattern_of(line) == pattern for line in lines):
                logger.info(f"{pattern} is already allowed")
                return Outcome.unchanged

            directory = os.path.dirname(self.filepath)
            if directory:
                os.makedirs(directory, exist_ok=True)

            if not lines:
                lines = [self.header_comment]
            lines.append(pattern)
            self._write_lines(lines)

        logger.info(f"Added {pattern} to {self.filepath}")
        return Outcome.applied

    def remove(self, domain: str) -> Outcome:
        """
        Remove every line whose pattern matches the domain.

        Returns:
            Outcome.applied if lines were removed, Outcome.unchanged if the domain was not listed
        """
        pattern = strip_pattern(domain)

        with self.lock:
            if not self.exists():
                logger.info(f"{self.filepath} does not exist, nothing to remove")
                return Outcome.unchanged

            lines = self._read_lines()
            kept = [line for line in lines if _pattern_of(line) != pattern]

            if len(kept) == len(lines):
                logger.info(f"{pattern} is not in the allowlist")
                return Outcome.unchanged

            self._write_lines(kept)

        logger.info(f"Removed {pattern} from {self.filepath}")
        return Outcome.applied

    def _read_lines(self) -> list[str]:
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                return f.read().splitlines()
        except FileNotFoundError:
            return []

    def _write_lines(self, lines: list[str]) -> None:
        tmp_path = f"{self.filepath}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        if self.exists():
            shutil.copymode(self.filepath, tmp_path)
            if os.geteuid() == 0:
                st = os.stat(self.filepath)
                os.chown(tmp_path, st.st_uid, st.st_gid)
        os.replace(tmp_path, self.filepath)
