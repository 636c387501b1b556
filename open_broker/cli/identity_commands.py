"""CLI commands for originating identity headers."""

import click
import json
from typing import Tuple
from tabulate import tabulate

from open_broker.exceptions import InvalidOriginatingIdentityError
from open_broker.models.context import build_context
from open_broker.protocol.identity import decode_originating_identity, encode_originating_identity


@click.group()
def identity_cli():
    """Originating identity header commands."""
    pass


@identity_cli.command()
@click.argument('platform')
@click.option('--property', '-p', 'properties', multiple=True,
              help='Identity property as key=value (repeatable)')
def encode(platform: str, properties: Tuple[str, ...]):
    """Build an originating identity header value."""
    values = {}
    for item in properties:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint='--property')
        values[key] = value

    try:
        context = build_context(platform, values)
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    click.echo(encode_originating_identity(context))


@identity_cli.command()
@click.argument('header')
@click.option('--json', 'as_json', is_flag=True, help='Print the decoded context as JSON')
def decode(header: str, as_json: bool):
    """Decode an originating identity header value."""
    try:
        context = decode_originating_identity(header)
    except InvalidOriginatingIdentityError as e:
        click.echo(f"❌ {e.description}", err=True)
        raise click.Abort()

    if as_json:
        click.echo(json.dumps(context.to_wire(), indent=2, sort_keys=True))
        return

    click.echo(f"Platform: {context.platform} ({type(context).__name__})")
    rows = [[key, value] for key, value in sorted(context.properties.items())]
    if rows:
        click.echo(tabulate(rows, headers=['Property', 'Value'], tablefmt='grid'))
