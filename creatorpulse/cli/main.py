"""
Main CLI entry point for CreatorPulse
"""

import logging

import click

from ..core.observability import setup_logfire, setup_logging
from .dashboard import dashboard_group
from .script import script_group


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    CreatorPulse - Video script generation and creator performance tracking

    Draft AI video scripts scene by scene and check how your connected
    social accounts are growing.
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    setup_logfire(service_name="creatorpulse-cli")


# Register command groups
cli.add_command(script_group)
cli.add_command(dashboard_group)


if __name__ == '__main__':
    cli()
