#!/usr/bin/env python3
"""Script to start the Open Service Broker API server."""

import sys
import logging
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from open_broker.api.service_broker import run_server
from open_broker.logging_config import setup_logging
from open_broker.config import config

DEFAULT_CATALOG = Path(__file__).parent / "sample_catalog.yaml"
DEFAULT_FACTORY = "open_broker.services.memory:create_memory_broker"


def main():
    """Start the API server."""
    setup_logging()
    logger = logging.getLogger(__name__)

    config.broker.catalog_path = config.broker.catalog_path or str(DEFAULT_CATALOG)
    config.broker.factory = config.broker.factory or DEFAULT_FACTORY

    print("🚀 Starting OpenBroker API Server")
    print(f"📡 Host: {config.api.host}")
    print(f"🔌 Port: {config.api.port}")
    print(f"📋 Catalog: {config.broker.catalog_path}")
    print(f"🏭 Broker factory: {config.broker.factory}")
    print(f"🔖 API version: {config.broker.api_version or 'not checked'}")
    print()

    logger.info("Starting OpenBroker API server...")
    logger.info(f"Server configuration: host={config.api.host}, port={config.api.port}")

    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
        logger.info("Server stopped by user")
    except Exception as e:
        print(f"❌ Server failed to start: {e}")
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
