"""Conditional GET support for the catalog."""

import hashlib
import json
from typing import Any, Dict, Optional, Tuple


def compute_etag(document: Dict[str, Any]) -> str:
    """Strong ETag of a JSON document.

    The document is hashed in canonical form (sorted keys, compact
    separators) so equal content always yields the same tag.
    """
    canonical = json.dumps(document, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    return f'"{hashlib.sha256(canonical.encode("utf-8")).hexdigest()}"'


def if_none_match_matches(header: Optional[str], etag: str) -> bool:
    """Check an If-None-Match header against an ETag.

    Weak comparison is used, as required for If-None-Match.
    """
    if not header:
        return False

    header = header.strip()
    if header == '*':
        return True

    bare = _strip_weak(etag)
    return any(_strip_weak(candidate.strip()) == bare for candidate in header.split(','))


def _strip_weak(tag: str) -> str:
    return tag[2:] if tag.startswith('W/') else tag


def conditional_response(document: Dict[str, Any],
                         if_none_match: Optional[str]) -> Tuple[Optional[Dict[str, Any]], int, str]:
    """Decide between a full and a not-modified response.

    Returns:
        Tuple of (body or None for 304, http_status_code, etag)
    """
    etag = compute_etag(document)
    if if_none_match_matches(if_none_match, etag):
        return None, 304, etag
    return document, 200, etag
