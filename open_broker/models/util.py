"""Helpers for projecting opaque request data onto typed models."""

from typing import Dict, Any, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError

from open_broker.exceptions import InvalidParametersError

ModelT = TypeVar('ModelT', bound=BaseModel)


def map_parameters(parameters: Optional[Dict[str, Any]], model_cls: Type[ModelT]) -> ModelT:
    """Bind a request's parameters map into a caller-defined model.

    Args:
        parameters: Opaque parameters sent by the platform
        model_cls: Pydantic model describing the parameters the broker accepts

    Returns:
        The populated model

    Raises:
        InvalidParametersError: if the parameters do not fit the model
    """
    try:
        return model_cls.model_validate(parameters or {})
    except ValidationError as e:
        fields = sorted({'.'.join(str(part) for part in err['loc']) or model_cls.__name__ for err in e.errors()})
        raise InvalidParametersError(', '.join(fields), cause=e) from e
