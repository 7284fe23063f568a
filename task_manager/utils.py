"""Identifier and timestamp helpers."""

import itertools
import os
import re
import threading
import time
from datetime import datetime, timedelta, timezone

_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")
_PROCESS_NONCE = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_counter_lock = threading.Lock()


def new_object_id() -> str:
    """Generate a 24-character hex identifier.

    Layout: 4-byte big-endian seconds, 5-byte per-process nonce, 3-byte
    rolling counter. Identifiers generated in the same process are unique.
    """
    with _counter_lock:
        count = next(_counter) & 0xFFFFFF
    return (
        int(time.time()).to_bytes(4, "big") + _PROCESS_NONCE + count.to_bytes(3, "big")
    ).hex()


def is_valid_object_id(value) -> bool:
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None


def utcnow() -> datetime:
    """Timezone-aware UTC now, the form timestamps are written in."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None) -> datetime:
    """Current time, nudged forward so it is strictly after ``previous``."""
    now = utcnow()
    if previous is None:
        return now
    # SQLite hands stored values back without tzinfo.
    previous = as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
