#!/usr/bin/env python3

"""Test connectivity to a domain"""

import sys

import click

from commands.common import Colors, StrictCommand, get_controller
from firewall.constants import DEFAULT_TEST_DOMAIN


@click.command(name="test", cls=StrictCommand)
@click.argument("domain", required=False)
def probe(domain):
    """
    🔍 Test DNS, allow-set membership and HTTPS reachability [DOMAIN]

    The three checks are reported separately. Exits 1 only when the domain
    does not resolve; allow-set membership and reachability are informational.

    \b
    Examples:
        firewall test                 # tests the default domain
        firewall test api.github.com
    """
    domain = domain or DEFAULT_TEST_DOMAIN
    click.echo(f"Testing connection to: {domain}")

    report = get_controller().test(domain)

    if not report.resolved:
        click.echo(f"DNS:       {Colors.RED}FAILED{Colors.NC} could not resolve {domain}: {report.dns_error}")
        sys.exit(1)

    click.echo(f"DNS:       {Colors.GREEN}OK{Colors.NC} {domain} → {', '.join(report.addresses)}")

    for address, member in report.membership.items():
        if member is None:
            state = f"{Colors.YELLOW}UNKNOWN{Colors.NC} (allow-set not available)"
        elif member:
            state = f"{Colors.GREEN}ALLOWED{Colors.NC}"
        else:
            state = f"{Colors.YELLOW}NOT IN ALLOW-SET{Colors.NC}"
        click.echo(f"Allow-set: {address} {state}")

    if report.reachable:
        click.echo(f"HTTPS:     {Colors.GREEN}OK{Colors.NC}")
    else:
        click.echo(f"HTTPS:     {Colors.RED}FAILED{Colors.NC} {report.reach_error}")
