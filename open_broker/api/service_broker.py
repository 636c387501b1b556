"""Open Service Broker API implementation."""

import importlib
import logging
from typing import Any, Callable, Dict, List, Optional, Type
from flask import Blueprint, Flask, Response, request, jsonify
from pydantic import BaseModel, ValidationError

from open_broker.config import config, Config
from open_broker.exceptions import MalformedRequestError, RequestValidationError
from open_broker.logging_config import audit_logger
from open_broker.models.service_broker import ServiceBrokerRequest
from open_broker.models.instance import (
    CreateServiceInstanceRequest, UpdateServiceInstanceRequest, DeleteServiceInstanceRequest,
    GetServiceInstanceRequest, GetLastServiceOperationRequest
)
from open_broker.models.binding import (
    CreateServiceInstanceBindingRequest, GetServiceInstanceBindingRequest,
    DeleteServiceInstanceBindingRequest, GetLastServiceBindingOperationRequest
)
from open_broker.protocol.catalog import CatalogResolver
from open_broker.protocol.etag import conditional_response
from open_broker.protocol.invoker import OperationInvoker
from open_broker.protocol.request_context import assemble_request_context, REQUEST_IDENTITY_HEADER
from open_broker.protocol.status import render
from open_broker.protocol.version import BrokerApiVersion, check_api_version
from open_broker.services.base import (
    CatalogService, ServiceInstanceService, ServiceInstanceBindingService,
    NonBindableServiceInstanceBindingService
)
from open_broker.services.catalog import StaticCatalogService
from open_broker.services.events import EventFlowRegistry, OperationKind
from open_broker.utils.error_handlers import register_error_handlers

logger = logging.getLogger(__name__)

INSTANCE_PATH = '/v2/service_instances/<instance_id>'
BINDING_PATH = INSTANCE_PATH + '/service_bindings/<binding_id>'


def accepts_incomplete() -> bool:
    """Whether the platform accepts asynchronous completion."""
    return request.args.get('accepts_incomplete', 'false').lower() == 'true'


def validation_fields(error: ValidationError) -> List[str]:
    """Names of the fields a pydantic validation error refers to."""
    fields = []
    for err in error.errors():
        name = '.'.join(str(part) for part in err['loc']) or 'body'
        if name not in fields:
            fields.append(name)
    return fields


def parse_body(model_cls: Type[BaseModel], **fields) -> Any:
    """Build an operation request from the JSON body plus path fields."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedRequestError()

    try:
        return model_cls.model_validate({**data, **fields})
    except ValidationError as e:
        raise RequestValidationError(validation_fields(e)) from e


def build_request(model_cls: Type[BaseModel], **fields) -> Any:
    """Build an operation request from path and query fields."""
    try:
        return model_cls(**fields)
    except ValidationError as e:
        raise RequestValidationError(validation_fields(e)) from e


def require_query_params(*names: str) -> Dict[str, str]:
    """Fetch query parameters the operation cannot do without."""
    values = {name: request.args.get(name) for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise RequestValidationError(missing)
    return values


def create_app(
    catalog_service: CatalogService,
    instance_service: ServiceInstanceService,
    binding_service: Optional[ServiceInstanceBindingService] = None,
    api_version: Optional[BrokerApiVersion] = None,
    base_path: Optional[str] = None,
    events: Optional[EventFlowRegistry] = None,
    enable_cors: Optional[bool] = None
) -> Flask:
    """Create Flask application with OSB API routes.

    Args:
        catalog_service: Source of the catalog, consulted on every request
        instance_service: Service instance operations
        binding_service: Service binding operations; bindings are refused when omitted
        api_version: Expected API version; None disables the version check
        base_path: Prefix for every broker route
        events: Flows run around operations
        enable_cors: Enable cross-origin requests, defaults to configuration
    """
    app = Flask(__name__)

    binding_service = binding_service or NonBindableServiceInstanceBindingService()
    resolver = CatalogResolver(catalog_service)
    invoker = OperationInvoker(events)

    if enable_cors is None:
        enable_cors = config.api.enable_cors

    # Configure CORS if enabled
    if enable_cors:
        from flask_cors import CORS
        CORS(app)

    broker = Blueprint('service_broker', __name__, url_prefix=(base_path or '').rstrip('/') or None)

    def broker_route(rule: str, methods: List[str]) -> Callable:
        """Register a route both bare and scoped to a platform instance."""
        def decorator(f):
            broker.add_url_rule(rule, f.__name__, f, methods=methods)
            broker.add_url_rule('/<platform_instance_id>' + rule, f.__name__ + '_scoped', f, methods=methods)
            return f
        return decorator

    def with_context(broker_request: ServiceBrokerRequest, platform_instance_id: Optional[str]):
        return assemble_request_context(platform_instance_id, request.headers).apply_to(broker_request)

    def respond(kind: OperationKind, operation: Callable, broker_request: ServiceBrokerRequest,
                instance_id: Optional[str] = None, binding_id: Optional[str] = None):
        """Invoke an operation and turn its outcome into a response."""
        outcome = invoker.invoke(kind, operation, broker_request)
        body, status = render(kind, outcome, getattr(broker_request, 'async_accepted', False))

        audit_logger.log_operation(
            kind.value, status,
            instance_id=instance_id,
            binding_id=binding_id,
            request_identity=broker_request.request_identity,
            originating_identity=broker_request.originating_identity
        )
        return jsonify(body), status

    @broker.before_request
    def check_version():
        """Reject requests whose API version is not supported."""
        if api_version is not None:
            check_api_version(api_version, request.headers.get(api_version.header))

    @app.after_request
    def echo_request_identity(response: Response):
        request_identity = request.headers.get(REQUEST_IDENTITY_HEADER)
        if request_identity is not None:
            response.headers[REQUEST_IDENTITY_HEADER] = request_identity
        return response

    @broker_route('/v2/catalog', methods=['GET'])
    def get_catalog(platform_instance_id: Optional[str] = None):
        """Get service catalog."""
        document = catalog_service.get_catalog().to_wire()
        body, status, etag = conditional_response(document, request.headers.get('If-None-Match'))
        logger.info(f"Catalog retrieved ({status})", extra={'status': status})

        response = app.response_class(status=304) if body is None else jsonify(body)
        response.headers['ETag'] = etag
        return response

    @broker_route(INSTANCE_PATH, methods=['PUT'])
    def create_service_instance(instance_id: str, platform_instance_id: Optional[str] = None):
        """Provision a service instance."""
        broker_request = parse_body(
            CreateServiceInstanceRequest,
            service_instance_id=instance_id,
            async_accepted=accepts_incomplete()
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.CREATE_INSTANCE, instance_service.create_service_instance,
                       broker_request, instance_id=instance_id)

    @broker_route(INSTANCE_PATH, methods=['PATCH'])
    def update_service_instance(instance_id: str, platform_instance_id: Optional[str] = None):
        """Update a service instance."""
        broker_request = parse_body(
            UpdateServiceInstanceRequest,
            service_instance_id=instance_id,
            async_accepted=accepts_incomplete()
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.UPDATE_INSTANCE, instance_service.update_service_instance,
                       broker_request, instance_id=instance_id)

    @broker_route(INSTANCE_PATH, methods=['DELETE'])
    def delete_service_instance(instance_id: str, platform_instance_id: Optional[str] = None):
        """Deprovision a service instance."""
        params = require_query_params('service_id', 'plan_id')
        broker_request = build_request(
            DeleteServiceInstanceRequest,
            service_instance_id=instance_id,
            service_definition_id=params['service_id'],
            plan_id=params['plan_id'],
            async_accepted=accepts_incomplete()
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.DELETE_INSTANCE, instance_service.delete_service_instance,
                       broker_request, instance_id=instance_id)

    @broker_route(INSTANCE_PATH, methods=['GET'])
    def get_service_instance(instance_id: str, platform_instance_id: Optional[str] = None):
        """Fetch a service instance."""
        broker_request = build_request(
            GetServiceInstanceRequest,
            service_instance_id=instance_id,
            service_definition_id=request.args.get('service_id'),
            plan_id=request.args.get('plan_id')
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve_optional(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.GET_INSTANCE, instance_service.get_service_instance,
                       broker_request, instance_id=instance_id)

    @broker_route(INSTANCE_PATH + '/last_operation', methods=['GET'])
    def get_last_operation(instance_id: str, platform_instance_id: Optional[str] = None):
        """Get the status of the last instance operation."""
        broker_request = build_request(
            GetLastServiceOperationRequest,
            service_instance_id=instance_id,
            service_definition_id=request.args.get('service_id'),
            plan_id=request.args.get('plan_id'),
            operation=request.args.get('operation')
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve_optional(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.GET_INSTANCE_LAST_OPERATION, instance_service.get_last_operation,
                       broker_request, instance_id=instance_id)

    @broker_route(BINDING_PATH, methods=['PUT'])
    def create_service_binding(instance_id: str, binding_id: str, platform_instance_id: Optional[str] = None):
        """Create a service binding."""
        broker_request = parse_body(
            CreateServiceInstanceBindingRequest,
            service_instance_id=instance_id,
            binding_id=binding_id,
            async_accepted=accepts_incomplete()
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.CREATE_BINDING, binding_service.create_service_instance_binding,
                       broker_request, instance_id=instance_id, binding_id=binding_id)

    @broker_route(BINDING_PATH, methods=['GET'])
    def get_service_binding(instance_id: str, binding_id: str, platform_instance_id: Optional[str] = None):
        """Fetch a service binding."""
        broker_request = build_request(
            GetServiceInstanceBindingRequest,
            service_instance_id=instance_id,
            binding_id=binding_id,
            service_definition_id=request.args.get('service_id'),
            plan_id=request.args.get('plan_id')
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve_optional(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.GET_BINDING, binding_service.get_service_instance_binding,
                       broker_request, instance_id=instance_id, binding_id=binding_id)

    @broker_route(BINDING_PATH, methods=['DELETE'])
    def delete_service_binding(instance_id: str, binding_id: str, platform_instance_id: Optional[str] = None):
        """Delete a service binding."""
        params = require_query_params('service_id', 'plan_id')
        broker_request = build_request(
            DeleteServiceInstanceBindingRequest,
            service_instance_id=instance_id,
            binding_id=binding_id,
            service_definition_id=params['service_id'],
            plan_id=params['plan_id'],
            async_accepted=accepts_incomplete()
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.DELETE_BINDING, binding_service.delete_service_instance_binding,
                       broker_request, instance_id=instance_id, binding_id=binding_id)

    @broker_route(BINDING_PATH + '/last_operation', methods=['GET'])
    def get_binding_last_operation(instance_id: str, binding_id: str, platform_instance_id: Optional[str] = None):
        """Get the status of the last binding operation."""
        broker_request = build_request(
            GetLastServiceBindingOperationRequest,
            service_instance_id=instance_id,
            binding_id=binding_id,
            service_definition_id=request.args.get('service_id'),
            plan_id=request.args.get('plan_id'),
            operation=request.args.get('operation')
        )
        with_context(broker_request, platform_instance_id)
        resolver.resolve_optional(broker_request, broker_request.service_definition_id, broker_request.plan_id)

        return respond(OperationKind.GET_BINDING_LAST_OPERATION, binding_service.get_last_operation,
                       broker_request, instance_id=instance_id, binding_id=binding_id)

    app.register_blueprint(broker)
    register_error_handlers(app)

    return app


def load_broker_factory(path: str) -> Callable[[], Dict[str, Any]]:
    """Import a ``module:callable`` broker factory.

    The callable returns the keyword arguments for ``create_app`` that
    describe the broker, at least ``instance_service``.
    """
    module_name, _, attr = path.partition(':')
    if not module_name or not attr:
        raise ValueError(f"Broker factory must look like 'module:callable', got {path!r}")

    module = importlib.import_module(module_name)
    return getattr(module, attr)


def create_app_from_config(cfg: Optional[Config] = None) -> Flask:
    """Create the application described by the configuration."""
    cfg = cfg or config

    if not cfg.broker.catalog_path:
        raise ValueError("BROKER_CATALOG_PATH is not configured")
    if not cfg.broker.factory:
        raise ValueError("BROKER_FACTORY is not configured")

    catalog_service = StaticCatalogService.from_file(cfg.broker.catalog_path)
    services = load_broker_factory(cfg.broker.factory)()

    return create_app(
        catalog_service,
        api_version=cfg.broker.get_api_version(),
        base_path=cfg.api.base_path,
        enable_cors=cfg.api.enable_cors,
        **services
    )


def run_server(cfg: Optional[Config] = None):
    """Run the Flask server."""
    cfg = cfg or config
    app = create_app_from_config(cfg)
    app.run(
        host=cfg.api.host,
        port=cfg.api.port,
        debug=cfg.api.debug
    )
