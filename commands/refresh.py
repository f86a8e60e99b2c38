#!/usr/bin/env python3

"""Re-resolve allowed domains and reinstall the firewall"""

import logging

import click

from commands.common import StrictCommand, echo_report, fail, get_controller
from firewall.errors import FirewallError

logger = logging.getLogger(__name__)


@click.command(cls=StrictCommand)
def refresh():
    """
    🔄 Refresh the allow-set from DNS (needs root)

    Picks up registry edits and DNS changes. Addresses of removed domains are
    gone after the refresh. Meant to run periodically (see: firewall schedule).

    \b
    Examples:
        firewall refresh
    """
    logger.info("Refreshing firewall...")
    try:
        report = get_controller().refresh()
    except FirewallError as e:
        fail(str(e))
        return

    echo_report(report)
    logger.info("✓ Firewall refreshed")
