#!/usr/bin/env python3

"""Install the firewall from the allowed-domains registry"""

import logging

import click

from commands.common import StrictCommand, echo_report, fail, get_controller
from firewall.errors import FirewallError

logger = logging.getLogger(__name__)


@click.command(cls=StrictCommand)
def setup():
    """
    🛡️ Install the firewall (needs root)

    Tears down any previous installation, resolves every allowed domain into
    the allow-set and hooks the egress/ingress chains at the head of OUTPUT
    and INPUT. Default chain policies are left untouched.

    Running setup again converges to the same state.

    \b
    Examples:
        firewall setup
        firewall          # same as setup
    """
    logger.info("Setting up firewall...")
    try:
        report = get_controller().setup()
    except FirewallError as e:
        fail(str(e))
        return

    echo_report(report)
    logger.info("✓ Firewall setup complete")
