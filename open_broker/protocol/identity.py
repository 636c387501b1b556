"""Originating identity header codec.

The header value is ``"<platform> <base64 json object>"``, for example::

    cloudfoundry eyJ1c2VyX2lkIjogIjY4M2VhNzQ4LTMwOTItNGZmNC1iNjU2LTM5Y2FjYzRkNTM2MCJ9
"""

import base64
import binascii
import json
from typing import Optional

from open_broker.exceptions import InvalidOriginatingIdentityError
from open_broker.models.context import Context, build_context


def decode_originating_identity(header: Optional[str]) -> Optional[Context]:
    """Decode an originating identity header into a platform context.

    An absent header is not an error and yields None.

    Raises:
        InvalidOriginatingIdentityError: if the header is malformed or a
            recognized platform lacks its required properties
    """
    if header is None:
        return None

    parts = header.split(" ", 1)
    if len(parts) < 2:
        raise InvalidOriginatingIdentityError("no properties supplied")

    platform, encoded = parts

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode('utf-8')
    except (binascii.Error, ValueError) as e:
        raise InvalidOriginatingIdentityError("properties are not properly encoded", cause=e) from e

    try:
        properties = json.loads(decoded)
    except ValueError as e:
        raise InvalidOriginatingIdentityError("properties are not valid JSON", cause=e) from e

    if not isinstance(properties, dict):
        raise InvalidOriginatingIdentityError("properties are not valid JSON")

    try:
        return build_context(platform, properties)
    except ValueError as e:
        raise InvalidOriginatingIdentityError(str(e), cause=e) from e


def encode_originating_identity(context: Context) -> str:
    """Build the header value for a context."""
    payload = json.dumps(context.properties, sort_keys=True, separators=(',', ':'))
    encoded = base64.b64encode(payload.encode('utf-8')).decode('ascii')
    return f"{context.platform} {encoded}"
