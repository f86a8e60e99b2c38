#!/usr/bin/env python3

"""
firewall - domain allowlist firewall for sandboxed environments

Entry point wiring the click commands into one CLI group.
"""

import click

from commands import add, disable, list_domains, probe, refresh, remove, schedule, setup, status
from commands.common import StrictGroup
from firewall.constants import LOG_FILE
from lib.logging_config import setup_logging

__version__ = "0.1.0"


@click.group(cls=StrictGroup, invoke_without_command=True)
@click.version_option(__version__, prog_name="firewall")
@click.option("--verbose", "-v", is_flag=True, help="Show every iptables/ipset command and resolved address")
@click.pass_context
def cli(ctx, verbose):
    """
    Domain allowlist firewall - deny all traffic except to allowed domains

    Allowed domains live in a plain text registry (one per line, '#' starts a
    comment). Their addresses are kept in an ipset allow-set matched by two
    iptables chains hooked from OUTPUT and INPUT.

    Without a command, runs 'setup'.

    \b
    Examples:
        sudo firewall                      # install / reinstall
        sudo firewall add api.github.com
        sudo firewall remove api.github.com
        firewall list
        firewall test github.com
        sudo firewall status
    """
    setup_logging(verbose=verbose, log_file=LOG_FILE)

    if ctx.invoked_subcommand is None:
        ctx.invoke(setup)


cli.add_command(setup)
cli.add_command(refresh)
cli.add_command(add)
cli.add_command(remove)
cli.add_command(list_domains)
cli.add_command(probe)
cli.add_command(disable)
cli.add_command(status)
cli.add_command(schedule)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
