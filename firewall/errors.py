"""
Exceptions raised by the firewall manager.

Structural errors abort the whole command. Per-domain errors
(ResolutionFailure) are absorbed by the synchronizer and only logged.
"""


class FirewallError(Exception):
    """Base class for all firewall manager errors."""


class ConfigMissing(FirewallError):
    """A file the command needs does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Domain registry not found: {path}")


class DependencyMissing(FirewallError):
    """A required system tool is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Required tool '{tool}' not found in PATH. Install it with: apt-get install {tool}")


class PrivilegeError(FirewallError):
    """The command must run as root."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"'{command}' modifies the packet filter and must run as root (try: sudo firewall {command})")


class ResolutionFailure(FirewallError):
    """A single domain could not be resolved."""

    def __init__(self, domain: str, reason: str):
        self.domain = domain
        self.reason = reason
        super().__init__(f"Could not resolve {domain}: {reason}")


class CommandFailed(FirewallError):
    """An iptables/ipset invocation failed while changing kernel state."""

    def __init__(self, cmd: list[str], stderr: str):
        self.cmd = cmd
        self.stderr = stderr.strip()
        super().__init__(f"Command failed: {' '.join(cmd)}: {self.stderr or 'no error output'}")


class InvalidDomain(FirewallError):
    """A value passed to add/remove is not a usable domain pattern."""

    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Invalid domain: '{domain}'")
