"""Tests for CLI interface."""

import pytest
import json
import yaml
from unittest.mock import patch
from click.testing import CliRunner

from open_broker.cli.main import cli
from open_broker.models.factory import CatalogFactory, ContextFactory
from open_broker.protocol.etag import compute_etag
from open_broker.protocol.identity import decode_originating_identity, encode_originating_identity


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def catalog_file(tmp_path):
    """Sample catalog written as YAML."""
    path = tmp_path / 'catalog.yaml'
    path.write_text(yaml.safe_dump(CatalogFactory.create_catalog().to_wire()))
    return path


@pytest.fixture
def json_catalog_file(tmp_path):
    path = tmp_path / 'catalog.json'
    path.write_text(json.dumps(CatalogFactory.create_catalog().to_wire()))
    return path


class TestCatalogCommands:
    """Test catalog commands."""

    def test_show_table(self, runner, catalog_file):
        result = runner.invoke(cli, ['catalog', 'show', str(catalog_file)])

        assert result.exit_code == 0
        assert 'sample-service' in result.output
        assert 'premium' in result.output
        assert 'Total: 1 services' in result.output

    def test_show_json(self, runner, json_catalog_file):
        result = runner.invoke(cli, ['catalog', 'show', str(json_catalog_file), '--format', 'json'])

        assert result.exit_code == 0
        assert json.loads(result.output) == CatalogFactory.create_catalog().to_wire()

    def test_validate(self, runner, catalog_file):
        result = runner.invoke(cli, ['catalog', 'validate', str(catalog_file)])

        assert result.exit_code == 0
        assert '1 services, 3 plans' in result.output

    def test_validate_invalid_catalog(self, runner, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text(yaml.safe_dump({'services': [{'id': 's1', 'name': 's1', 'description': 'd', 'plans': []}]}))

        result = runner.invoke(cli, ['catalog', 'validate', str(path)])

        assert result.exit_code != 0
        assert 'Invalid catalog' in result.output

    def test_etag(self, runner, catalog_file):
        result = runner.invoke(cli, ['catalog', 'etag', str(catalog_file)])

        assert result.exit_code == 0
        assert result.output.strip() == compute_etag(CatalogFactory.create_catalog().to_wire())

    def test_resolve(self, runner, catalog_file):
        result = runner.invoke(cli, ['catalog', 'resolve', str(catalog_file), 'sample-service', '--plan-id', 'basic'])

        assert result.exit_code == 0
        definition = json.loads(result.output)
        assert [plan['id'] for plan in definition['plans']] == ['basic']

    def test_resolve_unknown_plan(self, runner, catalog_file):
        result = runner.invoke(cli, ['catalog', 'resolve', str(catalog_file), 'sample-service', '-p', 'gold'])

        assert result.exit_code != 0
        assert 'gold' in result.output


class TestIdentityCommands:
    """Test originating identity commands."""

    def test_encode(self, runner):
        result = runner.invoke(cli, ['identity', 'encode', 'kubernetes', '-p', 'namespace=team-a', '-p', 'user=u1'])

        assert result.exit_code == 0
        context = decode_originating_identity(result.output.strip())
        assert context.properties == {'namespace': 'team-a', 'user': 'u1'}

    def test_encode_missing_required_property(self, runner):
        result = runner.invoke(cli, ['identity', 'encode', 'kubernetes', '-p', 'user=u1'])

        assert result.exit_code != 0
        assert 'namespace' in result.output

    def test_encode_bad_property(self, runner):
        result = runner.invoke(cli, ['identity', 'encode', 'kubernetes', '-p', 'namespace'])

        assert result.exit_code != 0

    def test_decode(self, runner):
        header = encode_originating_identity(ContextFactory.create_kubernetes(namespace='team-a'))

        result = runner.invoke(cli, ['identity', 'decode', header])

        assert result.exit_code == 0
        assert 'KubernetesContext' in result.output
        assert 'team-a' in result.output

    def test_decode_json(self, runner):
        header = encode_originating_identity(ContextFactory.create_kubernetes(namespace='team-a'))

        result = runner.invoke(cli, ['identity', 'decode', header, '--json'])

        assert json.loads(result.output) == {'platform': 'kubernetes', 'namespace': 'team-a'}

    def test_decode_invalid(self, runner):
        result = runner.invoke(cli, ['identity', 'decode', 'cloudfoundry'])

        assert result.exit_code != 0
        assert 'no properties supplied' in result.output


class TestMainCommands:

    def test_version(self, runner):
        result = runner.invoke(cli, ['version'])

        assert result.exit_code == 0
        assert 'Version: 0.1.0' in result.output

    def test_serve_builds_config(self, runner, catalog_file):
        with patch('open_broker.api.service_broker.run_server') as run_server, \
                patch('open_broker.cli.main.setup_logging'):
            result = runner.invoke(cli, [
                'serve', '--catalog', str(catalog_file), '--port', '9090', '--api-version', '2.16'
            ])

        assert result.exit_code == 0, result.output
        cfg = run_server.call_args[0][0]
        assert cfg.api.port == 9090
        assert cfg.broker.catalog_path == str(catalog_file)
        assert cfg.broker.get_api_version().api_version == '2.16'
        assert cfg.broker.factory == 'open_broker.services.memory:create_memory_broker'
