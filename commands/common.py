#!/usr/bin/env python3

"""Common utilities for CLI commands"""

import logging
import sys

import click

from firewall.controller import Controller
from lib.models import SyncReport

logger = logging.getLogger(__name__)


class Colors:
    """ANSI color codes for terminal output"""

    BLUE = "\033[0;34m"
    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    RED = "\033[0;31m"
    CYAN = "\033[0;36m"
    NC = "\033[0m"  # No Color


class UsageExitMixin:
    """Exit with status 1 (instead of click's 2) on usage errors."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


class StrictCommand(UsageExitMixin, click.Command):
    """Command whose usage errors exit with status 1"""


class StrictGroup(UsageExitMixin, click.Group):
    """Group whose usage errors (including unknown subcommands) exit with status 1"""

    command_class = StrictCommand
    group_class = type

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def get_controller() -> Controller:
    """Build the controller for the configured registry, audit log and lock files."""
    return Controller.from_config()


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    click.echo(f"{Colors.RED}Error:{Colors.NC} {message}", err=True)
    sys.exit(1)


def echo_report(report: SyncReport) -> None:
    """Print the outcome of a synchronization cycle."""
    for domain, addresses in sorted(report.resolved.items()):
        click.echo(f"  {Colors.GREEN}✓{Colors.NC} {domain}: {', '.join(addresses)}")
    for domain, reason in sorted(report.failed.items()):
        click.echo(f"  {Colors.YELLOW}⚠{Colors.NC} {domain}: {reason}")
    click.echo(
        f"{len(report.resolved)} domains resolved, {len(report.failed)} failed, "
        f"{report.inserted} addresses allowed"
    )
