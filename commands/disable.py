#!/usr/bin/env python3

"""Remove the firewall"""

import logging

import click

from commands.common import StrictCommand, fail, get_controller
from firewall.errors import FirewallError
from lib.models import Outcome

logger = logging.getLogger(__name__)


@click.command(cls=StrictCommand)
def disable():
    """
    🛑 Remove the firewall chains and allow-set (needs root)

    Unhooks and deletes the egress/ingress chains and destroys the allow-set.
    Default chain policies and the registry are kept. Running disable when
    the firewall is not installed is not an error.

    \b
    Examples:
        firewall disable
    """
    logger.info("Disabling firewall...")
    try:
        results = get_controller().disable()
    except FirewallError as e:
        fail(str(e))
        return

    if any(outcome == Outcome.applied for outcome in results.values()):
        click.echo("Firewall disabled - allowlist no longer enforced")
    else:
        click.echo("Firewall was not installed")
