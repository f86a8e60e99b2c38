"""
Domain allowlist firewall.

This package keeps iptables chains and an ipset allow-set in line with a
human-maintained list of allowed domains.
"""

from .constants import (
    ALLOWED_PORTS,
    ALLOWSET_NAME,
    ALLOWSET_TIMEOUT,
    AUDIT_LOG_FILE,
    DEFAULT_TEST_DOMAIN,
    DOMAINS_FILE,
    EGRESS_CHAIN,
    INGRESS_CHAIN,
    LOCK_FILE,
    PRIVATE_IP_RANGES,
    PROJECT_ROOT,
)
from .allowset import AllowSet
from .audit import AuditLog
from .controller import Controller
from .diagnostics import Diagnostics
from .errors import (
    CommandFailed,
    ConfigMissing,
    DependencyMissing,
    FirewallError,
    InvalidDomain,
    PrivilegeError,
    ResolutionFailure,
)
from .iptables import RuleInstaller
from .registry import DomainRegistry
from .resolver import Resolver
from .runner import CommandRunner
from .schedule import RefreshSchedule
from .sync import Synchronizer

__all__ = [
    # Constants
    "ALLOWED_PORTS",
    "ALLOWSET_NAME",
    "ALLOWSET_TIMEOUT",
    "AUDIT_LOG_FILE",
    "DEFAULT_TEST_DOMAIN",
    "DOMAINS_FILE",
    "EGRESS_CHAIN",
    "INGRESS_CHAIN",
    "LOCK_FILE",
    "PRIVATE_IP_RANGES",
    "PROJECT_ROOT",
    # Errors
    "CommandFailed",
    "ConfigMissing",
    "DependencyMissing",
    "FirewallError",
    "InvalidDomain",
    "PrivilegeError",
    "ResolutionFailure",
    # Classes
    "AllowSet",
    "AuditLog",
    "CommandRunner",
    "Controller",
    "Diagnostics",
    "DomainRegistry",
    "RefreshSchedule",
    "Resolver",
    "RuleInstaller",
    "Synchronizer",
]
