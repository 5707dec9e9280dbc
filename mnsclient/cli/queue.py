"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

CLI commands for queues.

Provides commands for creating, deleting and listing queues and for
sending, receiving, peeking and deleting messages.
"""

import json
import sys
from dataclasses import asdict
from typing import List, Optional

import click

from mnsclient.exceptions import MNSError
from mnsclient.models import Message, QueueAttributes
from mnsclient.protocol.requests import SendMessageRequest


def _echo_messages(messages: List[Message], format: str, verbose: bool = False) -> None:
    if format.lower() == 'json':
        click.echo(json.dumps([asdict(message) for message in messages], indent=2))
        return
    for message in messages:
        click.echo(f"Message ID:     {message.message_id}")
        if message.receipt_handle:
            click.echo(f"Receipt Handle: {message.receipt_handle}")
        click.echo(f"Dequeue Count:  {message.dequeue_count}")
        if verbose:
            click.echo(f"Body MD5:       {message.body_md5}")
            click.echo(f"Priority:       {message.priority}")
            click.echo(f"Enqueued:       {message.enqueue_time}")
            click.echo(f"First Dequeue:  {message.first_dequeue_time}")
            click.echo(f"Next Visible:   {message.next_visible_time}")
        click.echo(f"Body:           {message.body}")
        click.echo()


@click.command('create')
@click.argument('name')
@click.option('--visibility-timeout', type=int, default=None, help='Seconds a received message stays invisible')
@click.option('--delay-seconds', type=int, default=None, help='Default delivery delay in seconds')
@click.option('--max-message-size', type=int, default=None, help='Maximum message size in bytes')
@click.option('--retention-period', type=int, default=None, help='Message retention period in seconds')
@click.option('--polling-wait-seconds', type=int, default=None, help='Default long-poll wait in seconds')
@click.option('--logging/--no-logging', 'logging_enabled', default=None, help='Enable message logging')
@click.pass_context
def create_queue(ctx, name: str, visibility_timeout: Optional[int], delay_seconds: Optional[int],
                 max_message_size: Optional[int], retention_period: Optional[int],
                 polling_wait_seconds: Optional[int], logging_enabled: Optional[bool]):
    """
    Create a queue.

    Examples:

        mnsclient queue create orders --visibility-timeout 60
    """
    try:
        client = ctx.obj.get_client()
        attributes = QueueAttributes(
            delay_seconds=delay_seconds,
            maximum_message_size=max_message_size,
            message_retention_period=retention_period,
            visibility_timeout=visibility_timeout,
            polling_wait_seconds=polling_wait_seconds,
            logging_enabled=logging_enabled,
        )
        response = client.create_queue(name, attributes)
        click.echo(f"✓ Queue created: {name}")
        if response.queue_url:
            click.echo(f"URL: {response.queue_url}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('delete')
@click.argument('name')
@click.pass_context
def delete_queue(ctx, name: str):
    """Delete a queue. Succeeds if the queue does not exist."""
    try:
        ctx.obj.get_client().delete_queue(name)
        click.echo(f"✓ Queue deleted: {name}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('list')
@click.option('--prefix', '-p', default=None, help='Only queues whose name starts with this prefix')
@click.option('--ret-num', '-n', type=int, default=None, help='Page size (1-1000)')
@click.option('--marker', '-m', default=None, help='Marker returned by the previous page')
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
@click.pass_context
def list_queues(ctx, prefix: Optional[str], ret_num: Optional[int], marker: Optional[str], format: str):
    """
    List queues.

    Examples:

        mnsclient queue list --prefix orders

        mnsclient queue list --format json
    """
    try:
        response = ctx.obj.get_client().list_queue(prefix=prefix, ret_num=ret_num, marker=marker)
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if format.lower() == 'json':
        click.echo(json.dumps(
            {"queues": response.queue_names, "next_marker": response.next_marker}, indent=2
        ))
        return

    if not response.queue_names:
        click.echo("No queues found.")
        return
    click.echo(f"Total queues: {len(response.queue_names)}")
    click.echo()
    for queue_name in response.queue_names:
        click.echo(queue_name)
    if response.next_marker:
        click.echo()
        click.echo(f"Next marker: {response.next_marker}")


@click.command('send')
@click.argument('name')
@click.argument('body')
@click.option('--delay-seconds', type=int, default=None, help='Delay delivery by this many seconds')
@click.option('--priority', type=int, default=None, help='Message priority (1-16, lower is higher)')
@click.option('--raw', is_flag=True, help='Send the body as-is instead of base64')
@click.pass_context
def send(ctx, name: str, body: str, delay_seconds: Optional[int], priority: Optional[int], raw: bool):
    """
    Send a message to a queue.

    Examples:

        mnsclient queue send orders '{"order": 42}'
    """
    try:
        queue = ctx.obj.get_client().get_queue_ref(name, base64=not raw)
        response = queue.send_message(
            SendMessageRequest(body, delay_seconds=delay_seconds, priority=priority)
        )
        click.echo(f"✓ Message sent: {response.message_id}")
        click.echo(f"Body MD5: {response.message_body_md5}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('receive')
@click.argument('name')
@click.option('--wait-seconds', '-w', type=int, default=None, help='Long-poll wait in seconds (0-30)')
@click.option('--count', '-n', type=int, default=1, help='Number of messages to receive (1-16)')
@click.option('--delete', 'delete_after', is_flag=True, help='Delete messages after receiving them')
@click.option('--raw', is_flag=True, help='Do not base64-decode message bodies')
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
@click.pass_context
def receive(ctx, name: str, wait_seconds: Optional[int], count: int, delete_after: bool,
            raw: bool, format: str):
    """
    Receive messages from a queue.

    Examples:

        mnsclient queue receive orders --wait-seconds 10

        mnsclient queue receive orders -n 8 --delete
    """
    try:
        queue = ctx.obj.get_client().get_queue_ref(name, base64=not raw)
        if count == 1:
            response = queue.receive_message(wait_seconds)
            messages = [] if response.is_empty else [response.message]
        else:
            messages = queue.batch_receive_message(count, wait_seconds).messages

        if not messages:
            click.echo("No messages available.")
            return
        _echo_messages(messages, format, ctx.obj.verbose)

        if delete_after:
            handles = [message.receipt_handle for message in messages]
            if len(handles) == 1:
                queue.delete_message(handles[0])
            else:
                queue.batch_delete_message(handles)
            click.echo(f"✓ Deleted {len(handles)} message(s)", err=True)
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('peek')
@click.argument('name')
@click.option('--count', '-n', type=int, default=1, help='Number of messages to peek (1-16)')
@click.option('--raw', is_flag=True, help='Do not base64-decode message bodies')
@click.option(
    '--format',
    '-f',
    type=click.Choice(['table', 'json'], case_sensitive=False),
    default='table',
    help='Output format (default: table)',
)
@click.pass_context
def peek(ctx, name: str, count: int, raw: bool, format: str):
    """Show messages without consuming them."""
    try:
        queue = ctx.obj.get_client().get_queue_ref(name, base64=not raw)
        if count == 1:
            response = queue.peek_message()
            messages = [] if response.is_empty else [response.message]
        else:
            messages = queue.batch_peek_message(count).messages
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not messages:
        click.echo("No messages available.")
        return
    _echo_messages(messages, format, ctx.obj.verbose)


@click.command('delete-message')
@click.argument('name')
@click.argument('receipt_handle')
@click.pass_context
def delete_message(ctx, name: str, receipt_handle: str):
    """Delete a received message by its receipt handle."""
    try:
        ctx.obj.get_client().get_queue_ref(name).delete_message(receipt_handle)
        click.echo("✓ Message deleted")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
