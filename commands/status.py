#!/usr/bin/env python3

"""
firewall status command

Show whether the firewall is active and what it currently allows.
"""

import click

from commands.common import Colors, StrictCommand, fail, get_controller
from firewall.errors import FirewallError
from lib.models import FirewallState


@click.command(cls=StrictCommand)
def status():
    """📊 Show firewall state, chains, allow-set size and recent changes

    \b
    Examples:
        firewall status
    """
    try:
        current = get_controller().status()
    except FirewallError as e:
        fail(str(e))
        return

    color = Colors.GREEN if current.state == FirewallState.active else Colors.YELLOW
    click.echo(f"Firewall: {color}{current.state.value}{Colors.NC}")
    click.echo("==================")
    click.echo()

    for chain in current.chains:
        presence = "present" if chain.exists else "absent"
        click.echo(f"  {chain.name:<12} {presence}, hooked {chain.hooks}x from {chain.hook}")

    if current.allowset_exists:
        click.echo(f"  Allow-set    {len(current.allowset_members)} addresses")
    else:
        click.echo("  Allow-set    absent (0 addresses)")
    click.echo(f"  Registry     {current.domains} domains")

    if current.schedule_minutes:
        click.echo(f"  Refresh      every {current.schedule_minutes} minutes")
    else:
        click.echo("  Refresh      not scheduled")

    if current.recent_audit:
        click.echo()
        click.echo("Recent changes:")
        for line in current.recent_audit:
            click.echo(f"  {line}")
