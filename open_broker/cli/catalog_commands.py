"""CLI commands for inspecting catalog documents."""

import click
import json
import yaml
from tabulate import tabulate
from pydantic import ValidationError

from open_broker.exceptions import ServiceBrokerError
from open_broker.protocol.catalog import resolve
from open_broker.protocol.etag import compute_etag
from open_broker.services.catalog import StaticCatalogService


def _load_catalog(path: str):
    """Load a catalog file, turning load failures into CLI errors."""
    try:
        return StaticCatalogService.from_file(path).get_catalog()
    except ValidationError as e:
        raise click.ClickException(f"Invalid catalog: {e}")
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read catalog {path}: {e}")


def _flag(value) -> str:
    return '-' if value is None else ('yes' if value else 'no')


@click.group()
def catalog_cli():
    """Catalog inspection commands."""
    pass


@catalog_cli.command()
@click.argument('catalog_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'yaml']),
              default='table', help='Output format')
def show(catalog_file: str, output_format: str):
    """Show the services and plans of a catalog."""
    catalog = _load_catalog(catalog_file)
    document = catalog.to_wire()

    if output_format == 'json':
        click.echo(json.dumps(document, indent=2))
        return
    if output_format == 'yaml':
        click.echo(yaml.safe_dump(document, sort_keys=False))
        return

    if not catalog.services:
        click.echo("Catalog has no services")
        return

    headers = ['Service ID', 'Service', 'Plan ID', 'Plan', 'Free', 'Bindable', 'Updateable']
    rows = []
    for service in catalog.services:
        for plan in service.plans:
            rows.append([
                service.id,
                service.name,
                plan.id,
                plan.name,
                _flag(plan.free),
                _flag(plan.bindable if plan.bindable is not None else service.bindable),
                _flag(plan.plan_updateable),
            ])

    click.echo(tabulate(rows, headers=headers, tablefmt='grid'))
    click.echo(f"\nTotal: {len(catalog.services)} services")


@catalog_cli.command()
@click.argument('catalog_file', type=click.Path(exists=True, dir_okay=False))
def validate(catalog_file: str):
    """Validate a catalog document."""
    catalog = _load_catalog(catalog_file)
    plan_count = sum(len(service.plans) for service in catalog.services)
    click.echo(f"✅ Catalog is valid: {len(catalog.services)} services, {plan_count} plans")


@catalog_cli.command()
@click.argument('catalog_file', type=click.Path(exists=True, dir_okay=False))
def etag(catalog_file: str):
    """Print the ETag the broker serves for a catalog."""
    catalog = _load_catalog(catalog_file)
    click.echo(compute_etag(catalog.to_wire()))


@catalog_cli.command('resolve')
@click.argument('catalog_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('service_id')
@click.option('--plan-id', '-p', help='Plan to narrow the service definition to')
def resolve_command(catalog_file: str, service_id: str, plan_id: str):
    """Resolve a service/plan pair the way the broker does."""
    catalog = _load_catalog(catalog_file)
    try:
        definition, plan = resolve(catalog, service_id, plan_id)
    except ServiceBrokerError as e:
        click.echo(f"❌ {e.description}", err=True)
        raise click.Abort()

    click.echo(json.dumps(definition.to_wire(), indent=2))
