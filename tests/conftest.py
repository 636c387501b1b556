"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import Mock

from open_broker.api.service_broker import create_app
from open_broker.config import Config
from open_broker.models.factory import CatalogFactory
from open_broker.services.catalog import StaticCatalogService


@pytest.fixture
def test_config():
    """Create test configuration."""
    config = Config()
    config.api.debug = True
    config.api.enable_cors = False
    config.logging.level = "DEBUG"
    return config


@pytest.fixture
def catalog():
    """Sample catalog with one service and three plans."""
    return CatalogFactory.create_catalog()


@pytest.fixture
def catalog_service(catalog):
    return StaticCatalogService(catalog)


@pytest.fixture
def instance_service():
    """Mock service instance operations."""
    return Mock()


@pytest.fixture
def binding_service():
    """Mock service binding operations."""
    return Mock()


@pytest.fixture
def make_app(catalog_service, instance_service, binding_service):
    """Build a test app, optionally overriding create_app arguments."""
    def _make_app(**kwargs):
        options = {
            'binding_service': binding_service,
            'enable_cors': False,
        }
        options.update(kwargs)
        app = create_app(catalog_service, instance_service, **options)
        app.config['TESTING'] = True
        return app
    return _make_app


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
