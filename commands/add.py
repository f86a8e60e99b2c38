#!/usr/bin/env python3

"""Allow a domain"""

import logging

import click

from commands.common import StrictCommand, echo_report, fail, get_controller
from firewall.errors import DependencyMissing, FirewallError, InvalidDomain, PrivilegeError
from lib.models import Outcome

logger = logging.getLogger(__name__)


@click.command(cls=StrictCommand)
@click.argument("domain")
def add(domain):
    """
    ➕ Allow a domain and reinstall the firewall (needs root) DOMAIN

    Adding a domain that is already allowed changes nothing in the registry.
    The registry change is kept even if reinstalling the firewall fails.

    \b
    Examples:
        firewall add registry.npmjs.org
    """
    controller = get_controller()
    try:
        outcome, report = controller.add(domain)
    except (InvalidDomain, PrivilegeError, DependencyMissing) as e:
        fail(str(e))
        return
    except FirewallError as e:
        # The registry already holds the domain at this point
        fail(f"{e}\n{domain} was saved and will be allowed by the next successful refresh")
        return

    if outcome == Outcome.applied:
        click.echo(f"Added {domain}")
    else:
        click.echo(f"{domain} is already allowed")
    echo_report(report)
