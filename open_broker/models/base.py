"""Base class for models exchanged with the platform."""

from typing import Dict, Any
from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    """Model with a one-way JSON projection.

    Absent optional fields are dropped from the wire form rather than sent as
    null; fields declared with ``exclude=True`` never reach the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Project the model onto its JSON wire form."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)
