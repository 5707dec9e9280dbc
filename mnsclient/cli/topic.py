"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

CLI commands for topics.
"""

import json
import sys
from typing import Optional

import click

from mnsclient.exceptions import MNSError
from mnsclient.models import TopicAttributes
from mnsclient.protocol.requests import PublishMessageRequest


@click.command('create')
@click.argument('name')
@click.option('--max-message-size', type=int, default=None, help='Maximum message size in bytes')
@click.option('--logging/--no-logging', 'logging_enabled', default=None, help='Enable message logging')
@click.pass_context
def create_topic(ctx, name: str, max_message_size: Optional[int], logging_enabled: Optional[bool]):
    """Create a topic."""
    try:
        attributes = TopicAttributes(
            maximum_message_size=max_message_size,
            logging_enabled=logging_enabled,
        )
        response = ctx.obj.get_client().create_topic(name, attributes)
        click.echo(f"✓ Topic created: {name}")
        if response.topic_url:
            click.echo(f"URL: {response.topic_url}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('delete')
@click.argument('name')
@click.pass_context
def delete_topic(ctx, name: str):
    """Delete a topic. Succeeds if the topic does not exist."""
    try:
        ctx.obj.get_client().delete_topic(name)
        click.echo(f"✓ Topic deleted: {name}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command('list')
@click.option('--prefix', '-p', default=None, help='Only topics whose name starts with this prefix')
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
def list_topics(ctx, prefix: Optional[str], ret_num: Optional[int], marker: Optional[str], format: str):
    """List topics."""
    try:
        response = ctx.obj.get_client().list_topic(prefix=prefix, ret_num=ret_num, marker=marker)
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if format.lower() == 'json':
        click.echo(json.dumps(
            {"topics": response.topic_names, "next_marker": response.next_marker}, indent=2
        ))
        return

    if not response.topic_names:
        click.echo("No topics found.")
        return
    click.echo(f"Total topics: {len(response.topic_names)}")
    click.echo()
    for topic_name in response.topic_names:
        click.echo(topic_name)
    if response.next_marker:
        click.echo()
        click.echo(f"Next marker: {response.next_marker}")


@click.command('publish')
@click.argument('name')
@click.argument('body')
@click.option('--tag', '-t', default=None, help='Message tag used by subscription filters')
@click.pass_context
def publish(ctx, name: str, body: str, tag: Optional[str]):
    """
    Publish a message to a topic.

    Examples:

        mnsclient topic publish alerts 'disk full' --tag ops
    """
    try:
        topic = ctx.obj.get_client().get_topic_ref(name)
        response = topic.publish_message(PublishMessageRequest(body, message_tag=tag))
        click.echo(f"✓ Message published: {response.message_id}")
    except MNSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
