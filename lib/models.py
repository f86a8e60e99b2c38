from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """Result of an idempotent operation against persistent or kernel state"""

    applied = "applied"
    """The change was made"""
    unchanged = "unchanged"
    """The target was already in the desired state"""
    failed = "failed"
    """The change could not be made"""


class FirewallState(str, Enum):
    """FirewallState enum"""

    active = "ACTIVE"
    inactive = "INACTIVE"


class AllowedDomain(BaseModel):
    """A domain pattern from the registry"""

    pattern: str
    """The domain to resolve, with any inline comment removed"""
    comment: str | None = None
    """Text that followed '#' on the registry line"""

    @classmethod
    def parse(cls, line: str) -> Optional["AllowedDomain"]:
        """Parse a registry line, returning None for blank and comment-only lines"""
        pattern, _, comment = line.partition("#")
        pattern = pattern.strip()
        if not pattern:
            return None
        return cls(pattern=pattern, comment=comment.strip() or None)


class ResolvedAddress(BaseModel):
    """An address returned by DNS for a registry domain"""

    domain: str
    address: str
    expires_at: datetime
    """When the allow-set entry for this address times out"""


class AuditLogEntry(BaseModel):
    """One line of the audit log"""

    timestamp: datetime
    action: str
    subject: str = ""

    def format(self) -> str:
        message = f"{self.action} {self.subject}".strip()
        return f"[{self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}] {message}"


class SyncReport(BaseModel):
    """Summary of one allow-set synchronization cycle"""

    resolved: Dict[str, List[str]] = Field(default_factory=dict)
    """Domain to the addresses inserted for it"""
    failed: Dict[str, str] = Field(default_factory=dict)
    """Domain to the reason its resolution failed"""
    inserted: int = 0
    """Number of entries handed to the allow-set"""


class DiagnosticReport(BaseModel):
    """Outcome of testing connectivity to a single domain

    Resolution, allow-set membership and reachability are reported separately.
    """

    domain: str
    addresses: List[str] = Field(default_factory=list)
    dns_error: str | None = None
    """Set when resolution failed; no further checks are made"""
    membership: Dict[str, Optional[bool]] = Field(default_factory=dict)
    """Address to allow-set membership, None when the set could not be queried"""
    reachable: bool | None = None
    """HTTPS reachability, None when the probe was not attempted"""
    reach_error: str | None = None

    @property
    def resolved(self) -> bool:
        return self.dns_error is None and bool(self.addresses)


class ChainStatus(BaseModel):
    """Presence of one custom chain and its hooks"""

    name: str
    hook: str
    """The default chain it is inserted into"""
    exists: bool = False
    hooks: int = 0
    """How many jump rules point at it from the default chain"""


class FirewallStatus(BaseModel):
    """Snapshot reported by the status command"""

    state: FirewallState
    chains: List[ChainStatus] = Field(default_factory=list)
    allowset_exists: bool = False
    allowset_members: List[str] = Field(default_factory=list)
    domains: int = 0
    """Number of resolvable registry entries"""
    schedule_minutes: int | None = None
    """Refresh interval when a refresh schedule is installed"""
    recent_audit: List[str] = Field(default_factory=list)
