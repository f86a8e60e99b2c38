"""
Firewall CLI Commands

This module contains CLI command implementations for the firewall tool.
"""

__all__ = ["add", "disable", "list_domains", "probe", "refresh", "remove", "schedule", "setup", "status"]

from commands.add import add
from commands.disable import disable
from commands.list import list_domains
from commands.probe import probe
from commands.refresh import refresh
from commands.remove import remove
from commands.schedule import schedule
from commands.setup import setup
from commands.status import status
