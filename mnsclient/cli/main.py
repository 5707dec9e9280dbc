"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

CLI entry point for mnsclient.

Provides command-line access to queues, topics and account attributes.
Connection settings come from options or MNS_* environment variables.
"""

from pathlib import Path
from typing import Optional

import click

from mnsclient._version import __version__
from mnsclient.logging_config import setup_logging
from mnsclient.cli.context import CLIContext, pass_context


@click.group()
@click.option(
    '--endpoint',
    '-e',
    envvar='MNS_ENDPOINT',
    default=None,
    help='Account endpoint URL (env: MNS_ENDPOINT)',
)
@click.option(
    '--access-id',
    envvar='MNS_ACCESS_ID',
    default=None,
    help='Access key id (env: MNS_ACCESS_ID)',
)
@click.option(
    '--access-key',
    envvar='MNS_ACCESS_KEY',
    default=None,
    help='Access key secret (env: MNS_ACCESS_KEY)',
)
@click.option(
    '--security-token',
    envvar='MNS_SECURITY_TOKEN',
    default=None,
    help='STS security token (env: MNS_SECURITY_TOKEN)',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default='WARNING',
    help='Set logging level',
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write logs to this file instead of stderr',
)
@click.option(
    '--json-logs',
    is_flag=True,
    help='Emit logs as JSON',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Show message timestamps, priority and MD5 in receive and peek output',
)
@click.version_option(version=__version__, prog_name='mnsclient')
@pass_context
def cli(
    ctx: CLIContext,
    endpoint: Optional[str],
    access_id: Optional[str],
    access_key: Optional[str],
    security_token: Optional[str],
    log_level: str,
    log_file: Optional[Path],
    json_logs: bool,
    verbose: bool,
):
    """
    mnsclient - Queue and topic client for the MNS message service.
    """
    ctx.endpoint = endpoint
    ctx.access_id = access_id
    ctx.access_key = access_key
    ctx.security_token = security_token
    ctx.verbose = verbose

    setup_logging(level=log_level.upper(), log_file=log_file, json_format=json_logs)

    click.get_current_context().call_on_close(ctx.close)


@cli.group()
def queue():
    """Manage queues and queue messages."""
    pass


from mnsclient.cli.queue import (
    create_queue,
    delete_message,
    delete_queue,
    list_queues,
    peek,
    receive,
    send,
)
queue.add_command(create_queue, name='create')
queue.add_command(delete_queue, name='delete')
queue.add_command(list_queues, name='list')
queue.add_command(send)
queue.add_command(receive)
queue.add_command(peek)
queue.add_command(delete_message, name='delete-message')


@cli.group()
def topic():
    """Manage topics and publish messages."""
    pass


from mnsclient.cli.topic import create_topic, delete_topic, list_topics, publish
topic.add_command(create_topic, name='create')
topic.add_command(delete_topic, name='delete')
topic.add_command(list_topics, name='list')
topic.add_command(publish)


@cli.group()
def account():
    """View and update account attributes."""
    pass


from mnsclient.cli.account import get_attributes, set_attributes
account.add_command(get_attributes, name='get')
account.add_command(set_attributes, name='set')


if __name__ == '__main__':
    cli()
