"""Tests for configuration and structured logging."""

import json
import logging

from open_broker.config import Config
from open_broker.logging_config import AuditLogger, JSONFormatter
from open_broker.models.factory import ContextFactory


class TestConfig:
    """Test configuration loading."""

    def test_defaults(self, monkeypatch):
        for name in ('BROKER_API_VERSION', 'BROKER_BASE_PATH', 'API_PORT', 'BROKER_API_VERSION_HEADER'):
            monkeypatch.delenv(name, raising=False)

        config = Config.from_env()

        assert config.api.port == 8080
        assert config.api.base_path == ''
        assert config.broker.api_version is None
        assert config.broker.get_api_version() is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('API_PORT', '9000')
        monkeypatch.setenv('API_ENABLE_CORS', 'false')
        monkeypatch.setenv('BROKER_API_VERSION', '2.14')
        monkeypatch.setenv('BROKER_API_VERSION_HEADER', 'X-Version')
        monkeypatch.setenv('BROKER_BASE_PATH', '/broker')
        monkeypatch.setenv('BROKER_FACTORY', 'pkg.module:factory')

        config = Config.from_env()

        assert config.api.port == 9000
        assert config.api.enable_cors is False
        assert config.api.base_path == '/broker'
        assert config.broker.factory == 'pkg.module:factory'
        api_version = config.broker.get_api_version()
        assert api_version.api_version == '2.14'
        assert api_version.header == 'X-Version'


class TestJSONFormatter:

    def make_record(self, **extra):
        record = logging.LogRecord('open_broker.test', logging.INFO, __file__, 10, 'hello %s', ('world',), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_format(self):
        entry = json.loads(JSONFormatter().format(self.make_record()))

        assert entry['message'] == 'hello world'
        assert entry['level'] == 'INFO'
        assert entry['logger'] == 'open_broker.test'
        assert 'operation' not in entry

    def test_extra_fields(self):
        record = self.make_record(operation='create_instance', instance_id='i1', status=201)

        entry = json.loads(JSONFormatter().format(record))

        assert entry['operation'] == 'create_instance'
        assert entry['instance_id'] == 'i1'
        assert entry['status'] == 201


class TestAuditLogger:

    def test_log_operation(self, caplog):
        audit = AuditLogger()

        with caplog.at_level(logging.INFO, logger='open_broker.audit'):
            audit.log_operation('delete_binding', 410, instance_id='i1', binding_id='b1',
                                request_identity='req-1',
                                originating_identity=ContextFactory.create_kubernetes())

        record = caplog.records[-1]
        assert record.operation == 'delete_binding'
        assert record.status == 410
        assert record.platform == 'kubernetes'
        assert 'binding b1' in record.getMessage()
