#!/usr/bin/env python3

"""Stop allowing a domain"""

import logging

import click

from commands.common import StrictCommand, echo_report, fail, get_controller
from firewall.errors import FirewallError
from lib.models import Outcome

logger = logging.getLogger(__name__)


@click.command(cls=StrictCommand)
@click.argument("domain")
def remove(domain):
    """
    ➖ Remove a domain and reinstall the firewall (needs root) DOMAIN

    Removing a domain that is not listed is not an error.

    \b
    Examples:
        firewall remove registry.npmjs.org
    """
    try:
        outcome, report = get_controller().remove(domain)
    except FirewallError as e:
        fail(str(e))
        return

    if outcome == Outcome.applied:
        click.echo(f"Removed {domain}")
    else:
        click.echo(f"{domain} was not in the allowlist")
    echo_report(report)
