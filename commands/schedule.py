#!/usr/bin/env python3

"""Periodic refresh management"""

import click

from commands.common import StrictGroup, fail, get_controller
from firewall.constants import DEFAULT_REFRESH_MINUTES
from firewall.errors import FirewallError
from lib.models import Outcome


@click.group(cls=StrictGroup)
def schedule():
    """
    ⏰ Periodic refresh management

    Allow-set entries expire, so the firewall must be refreshed regularly.
    The schedule is a cron entry running 'firewall refresh'.

    \b
    Examples:
        firewall schedule enable             # every 30 minutes
        firewall schedule enable --every 15
        firewall schedule disable
        firewall schedule status
    """
    pass


@schedule.command()
@click.option("--every", "minutes", type=int, default=DEFAULT_REFRESH_MINUTES, show_default=True,
              help="Refresh interval in minutes")
def enable(minutes):
    """Install the refresh schedule (needs root)"""
    try:
        outcome = get_controller().schedule_refresh(minutes)
    except (FirewallError, ValueError) as e:
        fail(str(e))
        return

    if outcome == Outcome.applied:
        click.echo(f"Refresh scheduled every {minutes} minutes")
    else:
        click.echo(f"Refresh already scheduled every {minutes} minutes")


@schedule.command()
def disable():
    """Remove the refresh schedule (needs root)"""
    try:
        outcome = get_controller().unschedule_refresh()
    except FirewallError as e:
        fail(str(e))
        return

    if outcome == Outcome.applied:
        click.echo("Refresh schedule removed")
    else:
        click.echo("No refresh schedule installed")


@schedule.command(name="status")
def schedule_status():
    """Show the refresh schedule"""
    minutes = get_controller().schedule.interval()
    if minutes:
        click.echo(f"Refresh scheduled every {minutes} minutes")
    else:
        click.echo("No refresh schedule installed")
