"""Helpers for building result envelopes."""

from datetime import datetime, timezone
from typing import Any

from toolcaddy.tools.registry import ResultEnvelope


def ok(**fields: Any) -> ResultEnvelope:
    return {"success": True, **fields}


def fail(error: str, **fields: Any) -> ResultEnvelope:
    return {"success": False, "error": error, **fields}


def is_success(result: ResultEnvelope) -> bool:
    return result.get("success") is True


def now() -> str:
    return datetime.now(timezone.utc).isoformat()
