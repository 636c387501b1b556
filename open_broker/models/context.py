"""Platform context values.

A context is identified by its ``platform`` name and carries an open bag of
properties. Cloud Foundry and Kubernetes contexts check their required
properties when constructed; any other platform name yields a generic
``PlatformContext``.
"""

from typing import Dict, Any, Optional, Tuple, ClassVar, Type, TypeVar
from pydantic import BaseModel, Field, ValidationError, model_serializer, model_validator

CLOUD_FOUNDRY_PLATFORM = "cloudfoundry"
KUBERNETES_PLATFORM = "kubernetes"

ModelT = TypeVar('ModelT', bound=BaseModel)


class Context(BaseModel):
    """Platform-specific contextual information."""

    platform: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    REQUIRED_PROPERTIES: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='after')
    def check_required_properties(self):
        """Reject contexts missing a property their platform requires."""
        missing = [key for key in self.REQUIRED_PROPERTIES if self.properties.get(key) in (None, '')]
        if missing:
            raise ValueError(
                f"missing required properties for platform '{self.platform}': {', '.join(missing)}"
            )
        return self

    @model_serializer
    def serialize_context(self) -> Dict[str, Any]:
        data = dict(self.properties)
        if self.platform is not None:
            data['platform'] = self.platform
        return data

    def to_wire(self) -> Dict[str, Any]:
        """Flatten the context into its JSON wire form."""
        return self.model_dump()

    def get_property(self, key: str) -> Any:
        return self.properties.get(key)

    def get_string_property(self, key: str) -> Optional[str]:
        value = self.properties.get(key)
        return str(value) if value is not None else None

    def as_model(self, model_cls: Type[ModelT]) -> ModelT:
        """Bind the context properties into a caller-defined model."""
        return model_cls.model_validate(self.properties)


class CloudFoundryContext(Context):
    """Context sent by Cloud Foundry platforms."""

    REQUIRED_PROPERTIES: ClassVar[Tuple[str, ...]] = ('organization_guid', 'space_guid')

    @property
    def organization_guid(self) -> Optional[str]:
        return self.get_string_property('organization_guid')

    @property
    def space_guid(self) -> Optional[str]:
        return self.get_string_property('space_guid')

    @property
    def organization_name(self) -> Optional[str]:
        return self.get_string_property('organization_name')

    @property
    def space_name(self) -> Optional[str]:
        return self.get_string_property('space_name')


class KubernetesContext(Context):
    """Context sent by Kubernetes platforms."""

    REQUIRED_PROPERTIES: ClassVar[Tuple[str, ...]] = ('namespace',)

    @property
    def namespace(self) -> Optional[str]:
        return self.get_string_property('namespace')

    @property
    def clusterid(self) -> Optional[str]:
        return self.get_string_property('clusterid')


class PlatformContext(Context):
    """Context for any platform without a dedicated variant."""


CONTEXT_VARIANTS: Dict[str, Type[Context]] = {
    CLOUD_FOUNDRY_PLATFORM: CloudFoundryContext,
    KUBERNETES_PLATFORM: KubernetesContext,
}


def build_context(platform: Optional[str], properties: Optional[Dict[str, Any]] = None) -> Context:
    """Construct the context variant matching a platform name.

    Raises:
        ValueError: if a recognized platform is missing required properties
    """
    variant = CONTEXT_VARIANTS.get(platform, PlatformContext)
    try:
        return variant(platform=platform, properties=dict(properties or {}))
    except ValidationError as e:
        messages = [str(err.get('ctx', {}).get('error', err['msg'])) for err in e.errors()]
        raise ValueError('; '.join(messages)) from e


def context_from_wire(data: Any) -> Context:
    """Build a context from its flat JSON form (``platform`` plus properties)."""
    if isinstance(data, Context):
        return data
    if not isinstance(data, dict):
        raise ValueError("context must be a JSON object")

    properties = dict(data)
    platform = properties.pop('platform', None)
    return build_context(platform, properties)
