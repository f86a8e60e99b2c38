#!/usr/bin/env python3

"""Show allowed domains"""

import click

from commands.common import Colors, StrictCommand, fail, get_controller
from firewall.errors import FirewallError


@click.command(name="list", cls=StrictCommand)
def list_domains():
    """
    📋 Show the allowed-domains registry and allow-set members

    Prints the registry file as-is (comments included), followed by the
    addresses currently in the kernel allow-set.

    \b
    Examples:
        firewall list
    """
    try:
        lines, members = get_controller().list_domains()
    except FirewallError as e:
        fail(str(e))
        return

    for line in lines:
        click.echo(line)

    click.echo()
    if members:
        click.echo(f"{Colors.BLUE}Allow-set ({len(members)} addresses):{Colors.NC}")
        for address in members:
            click.echo(f"  {address}")
    else:
        click.echo(f"{Colors.YELLOW}Allow-set is empty{Colors.NC}")
