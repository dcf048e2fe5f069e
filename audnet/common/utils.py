"""
Utility functions for audnet.
"""

from __future__ import annotations

import uuid
from typing import Any

import orjson


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def json_dumps(obj: Any) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(obj).decode("utf-8")


def json_dumps_bytes(obj: Any) -> bytes:
    """Serialize to UTF-8 encoded JSON bytes using orjson."""
    return orjson.dumps(obj)
