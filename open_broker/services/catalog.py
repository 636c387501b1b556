"""Catalog services."""

import json
import logging
from pathlib import Path
from typing import Union

import yaml

from open_broker.models.catalog import Catalog
from open_broker.services.base import CatalogService

logger = logging.getLogger(__name__)


class StaticCatalogService(CatalogService):
    """Catalog service returning a fixed catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def get_catalog(self) -> Catalog:
        return self.catalog

    @classmethod
    def from_dict(cls, data: dict) -> 'StaticCatalogService':
        return cls(Catalog.model_validate(data))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'StaticCatalogService':
        """Load a catalog from a YAML or JSON document.

        Files ending in ``.json`` are parsed as JSON, anything else as YAML.

        Raises:
            FileNotFoundError: if the file does not exist
            pydantic.ValidationError: if the document is not a valid catalog
        """
        path = Path(path)
        with open(path, 'r') as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)

        service = cls.from_dict(data or {})
        logger.info(f"Loaded catalog with {len(service.catalog.services)} services from {path}")
        return service
