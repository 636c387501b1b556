"""Main CLI entry point for OpenBroker."""

import click
import sys
from typing import Optional

from open_broker import __version__, __author__
from open_broker.cli.catalog_commands import catalog_cli
from open_broker.cli.identity_commands import identity_cli
from open_broker.config import Config
from open_broker.logging_config import setup_logging

DEFAULT_FACTORY = 'open_broker.services.memory:create_memory_broker'


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """OpenBroker CLI - Serve and inspect Open Service Broker APIs."""

    # Setup logging
    if verbose:
        setup_logging()

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command()
@click.option('--catalog', '-c', 'catalog_path', envvar='BROKER_CATALOG_PATH', required=True,
              type=click.Path(exists=True, dir_okay=False), help='Catalog file (YAML or JSON)')
@click.option('--factory', '-f', envvar='BROKER_FACTORY', default=DEFAULT_FACTORY, show_default=True,
              help='Broker factory as module:callable')
@click.option('--host', '-h', help='Bind address')
@click.option('--port', '-p', type=int, help='Bind port')
@click.option('--api-version', help="Required API version, '*' for any")
@click.option('--base-path', help='Prefix for all broker routes')
@click.option('--debug', is_flag=True, help='Run Flask in debug mode')
def serve(catalog_path: str, factory: str, host: Optional[str], port: Optional[int],
          api_version: Optional[str], base_path: Optional[str], debug: bool):
    """Run the broker API server."""
    from open_broker.api.service_broker import run_server

    setup_logging()

    cfg = Config.from_env()
    cfg.broker.catalog_path = catalog_path
    cfg.broker.factory = factory
    if host:
        cfg.api.host = host
    if port:
        cfg.api.port = port
    if api_version:
        cfg.broker.api_version = api_version
    if base_path is not None:
        cfg.api.base_path = base_path
    if debug:
        cfg.api.debug = True

    click.echo(f"🚀 Starting broker on {cfg.api.host}:{cfg.api.port}")
    run_server(cfg)


@cli.command()
def version():
    """Show version information."""

    click.echo("OpenBroker CLI")
    click.echo(f"Version: {__version__}")
    click.echo(f"Author: {__author__}")


# Add command groups
cli.add_command(catalog_cli, name='catalog')
cli.add_command(identity_cli, name='identity')


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n👋 Operation cancelled by user")
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
