#!/usr/bin/env python3
"""Script to exercise a running broker over HTTP.

Start the server with ``python scripts/start_api_server.py`` first.
"""

import sys
import uuid
import requests
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from open_broker.config import config
from open_broker.models.factory import ContextFactory
from open_broker.protocol.identity import encode_originating_identity
from open_broker.protocol.version import API_VERSION_CURRENT

# API configuration
BASE_URL = f"http://localhost:{config.api.port}{config.api.base_path.rstrip('/')}"
HEADERS = {
    'Content-Type': 'application/json',
    config.broker.api_version_header: config.broker.api_version or API_VERSION_CURRENT,
    'X-Broker-API-Originating-Identity': encode_originating_identity(ContextFactory.create_cloud_foundry()),
    'X-Broker-API-Request-Identity': str(uuid.uuid4()),
}

SERVICE_ID = "sample-service"
PLAN_ID = "standard"


def check(label: str, response: requests.Response, expected: int) -> bool:
    if response.status_code == expected:
        print(f"✅ {label}: {response.status_code}")
        return True
    print(f"❌ {label}: expected {expected}, got {response.status_code}")
    print(f"   Response: {response.text}")
    return False


def test_catalog() -> bool:
    """Fetch the catalog and revalidate it with its ETag."""
    print("📋 Testing catalog endpoint...")
    response = requests.get(f"{BASE_URL}/v2/catalog", headers=HEADERS)
    if not check("Catalog", response, 200):
        return False

    for service in response.json()['services']:
        print(f"   - {service['name']}: {len(service['plans'])} plans")

    cached = requests.get(
        f"{BASE_URL}/v2/catalog",
        headers={**HEADERS, 'If-None-Match': response.headers['ETag']}
    )
    return check("Catalog revalidation", cached, 304)


def test_instance_lifecycle(instance_id: str) -> bool:
    """Provision, re-provision, bind, unbind and deprovision an instance."""
    body = {
        "service_id": SERVICE_ID,
        "plan_id": PLAN_ID,
        "parameters": {"size": 1},
    }
    query = {"service_id": SERVICE_ID, "plan_id": PLAN_ID}
    instance_url = f"{BASE_URL}/v2/service_instances/{instance_id}"
    binding_url = f"{instance_url}/service_bindings/{uuid.uuid4()}"

    steps = [
        ("Provision", lambda: requests.put(instance_url, headers=HEADERS, json=body), 201),
        ("Provision again", lambda: requests.put(instance_url, headers=HEADERS, json=body), 200),
        ("Fetch instance", lambda: requests.get(instance_url, headers=HEADERS), 200),
        ("Bind", lambda: requests.put(binding_url, headers=HEADERS, json=body), 201),
        ("Fetch binding", lambda: requests.get(binding_url, headers=HEADERS), 200),
        ("Unbind", lambda: requests.delete(binding_url, headers=HEADERS, params=query), 200),
        ("Unbind again", lambda: requests.delete(binding_url, headers=HEADERS, params=query), 410),
        ("Deprovision", lambda: requests.delete(instance_url, headers=HEADERS, params=query), 200),
        ("Deprovision again", lambda: requests.delete(instance_url, headers=HEADERS, params=query), 410),
    ]

    for label, call, expected in steps:
        if not check(label, call(), expected):
            return False
    return True


def main():
    """Run the smoke test."""
    print("🧪 Testing Open Service Broker API")
    print(f"🔗 Base URL: {BASE_URL}")
    print()

    try:
        if not test_catalog():
            return False
        print()
        if not test_instance_lifecycle(f"smoke-{uuid.uuid4()}"):
            return False
    except requests.ConnectionError as e:
        print(f"❌ Cannot reach broker: {e}")
        print("💡 Start the server with: python scripts/start_api_server.py")
        return False

    print()
    print("🎉 All API tests completed successfully!")
    return True


if __name__ == "__main__":
    success = main()
    if not success:
        sys.exit(1)
