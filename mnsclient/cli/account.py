"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

CLI commands for account attributes.
"""

import json
import sys
from dataclasses import asdict
from typing import Optional

import click

from mnsclient.exceptions import MNSError
from mnsclient.models import AccountAttributes


@click.command('get')
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
@click.pass_context
def get_attributes(ctx, format: str):
    """Show account attributes."""
    try:
        response = ctx.obj.get_client().get_account_attributes()
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if format.lower() == 'json':
        click.echo(json.dumps(asdict(response.attributes), indent=2))
        return
    click.echo("Account Attributes")
    click.echo("=" * 50)
    click.echo(f"Logging Bucket: {response.attributes.logging_bucket or '-'}")


@click.command('set')
@click.option('--logging-bucket', default=None, help='OSS bucket that receives message logs')
@click.pass_context
def set_attributes(ctx, logging_bucket: Optional[str]):
    """
    Update account attributes.

    Examples:

        mnsclient account set --logging-bucket my-mns-logs
    """
    if logging_bucket is None:
        click.echo("Error: nothing to update; pass --logging-bucket", err=True)
        sys.exit(1)
    try:
        ctx.obj.get_client().set_account_attributes(AccountAttributes(logging_bucket=logging_bucket))
        click.echo("✓ Account attributes updated")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
