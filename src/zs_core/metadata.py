"""Build-info metadata record embedded in every container header."""
from __future__ import annotations

import getpass
import json
import socket
from datetime import datetime, timezone
from warnings import warn

TOOL_VERSION = "zs 0.10.0"
TIMESTAMP_FMT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """UTC timestamp with microseconds and a literal Z. Naive input is taken as UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(TIMESTAMP_FMT)


def host_name() -> str:
    return socket.gethostname()


def user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        # No login name and no passwd entry (common in containers)
        warn(f"Unable to resolve user name: {e}")
        return "unknown"


def build_metadata(host: str, user: str, timestamp: str, tool_version: str = TOOL_VERSION) -> bytes:
    """Serialize the build-info record as UTF-8 JSON.

    Field order is host, version, user, time.
    """
    record = {
        "build-info": {
            "host": host,
            "version": tool_version,
            "user": user,
            "time": timestamp,
        }
    }
    return json.dumps(record, ensure_ascii=False).encode("utf-8")
