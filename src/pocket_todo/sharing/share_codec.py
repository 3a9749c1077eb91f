# src/pocket_todo/sharing/share_codec.py

"""
Share tokens: one task as a URL-safe string, and back.

Wire format: compact JSON object with keys id, text, category, completed, dateAdded
(priority is not shared), percent-encoded with the same unreserved set as
JavaScript's encodeURIComponent, so links stay compatible with the web client.

A share link is <base url>?share=<token>. The raw parameter value is decoded once.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from ..storage.errors import DecodeError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

SHARE_PARAM = "share"

# quote() already keeps A-Z a-z 0-9 _ . - ~
_URI_COMPONENT_SAFE = "!*'()"
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True, slots=True)
class SharedSnapshot:
    id: int
    text: str
    category: str
    completed: bool
    date_added: int

    @classmethod
    def from_task(cls, task: Task) -> SharedSnapshot:
        return cls(
            id=task.id,
            text=task.text,
            category=task.category,
            completed=task.completed,
            date_added=task.date_added,
        )

    def added_at(self) -> datetime:
        """date_added as a local-time datetime."""
        return datetime.fromtimestamp(self.date_added / 1000).astimezone()


@dataclass(frozen=True, slots=True)
class ShareView:
    snapshot: SharedSnapshot
    back_url: str  # the app URL without the query


def encode_task(task: Task | SharedSnapshot) -> str:
    payload = {
        "id": task.id,
        "text": task.text,
        "category": task.category,
        "completed": task.completed,
        "dateAdded": task.date_added,
    }
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return quote(raw, safe=_URI_COMPONENT_SAFE)


def _require(data: dict[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise DecodeError(f"Share payload is missing '{key}'", context={"field": key})
    value = data[key]
    # bool is an int subclass; keep the two apart
    if kind is int and isinstance(value, float) and value.is_integer():
        value = int(value)
    ok = isinstance(value, kind) and (kind is bool or not isinstance(value, bool))
    if not ok:
        raise DecodeError(
            f"Share payload field '{key}' has the wrong type",
            context={"field": key, "type": type(value).__name__},
        )
    return value


def _timestamp_ms(value: int) -> int:
    try:
        datetime.fromtimestamp(value / 1000).astimezone()
    except (OverflowError, OSError, ValueError) as e:
        raise DecodeError(
            "Share payload field 'dateAdded' is out of range",
            context={"field": "dateAdded", "value": value},
            original_error=e,
        ) from e
    return value


def decode_token(token: str) -> SharedSnapshot:
    """Raises DecodeError for anything that is not a complete, well-formed token."""
    if not token:
        raise DecodeError("Share token is empty")
    if _BAD_ESCAPE.search(token):
        raise DecodeError("Share token has a malformed percent escape")

    try:
        raw = unquote(token, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise DecodeError("Share token is not valid UTF-8", original_error=e) from e

    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise DecodeError("Share token is not valid JSON", original_error=e) from e

    if not isinstance(data, dict):
        raise DecodeError("Share payload must be a JSON object")

    return SharedSnapshot(
        id=_require(data, "id", int),
        text=_require(data, "text", str),
        category=_require(data, "category", str),
        completed=_require(data, "completed", bool),
        date_added=_timestamp_ms(_require(data, "dateAdded", int)),
    )


def try_decode(token: str) -> SharedSnapshot | None:
    """Boundary helper: a bad token means "nothing to show", never an error."""
    try:
        return decode_token(token)
    except DecodeError as e:
        logger.warning("Ignoring share token: %s", e.message)
        return None


def _app_url(parts) -> str:
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def build_share_url(base_url: str, task: Task | SharedSnapshot) -> str:
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, f"{SHARE_PARAM}={encode_task(task)}", ""))


def _raw_param(query: str, name: str) -> str | None:
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if key == name and sep:
            return value
    return None


def read_share_url(url: str) -> ShareView | None:
    """
    Snapshot + back link for a share URL, or None if the URL carries no usable token.
    """
    parts = urlsplit(url)
    token = _raw_param(parts.query, SHARE_PARAM)
    if token is None:
        return None
    snapshot = try_decode(token)
    if snapshot is None:
        return None
    return ShareView(snapshot=snapshot, back_url=_app_url(parts))
