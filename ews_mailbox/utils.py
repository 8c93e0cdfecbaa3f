"""Helper functions shared by the mailbox commands."""

import re
from datetime import datetime, date
from typing import Any, Dict, Optional, Union

from exchangelib import EWSDateTime, EWSTimeZone


def safe_get(obj: Any, attr: str, default: Any = None) -> Any:
    """Get an attribute from an exchangelib object without raising."""
    if obj is None:
        return default
    try:
        value = getattr(obj, attr, default)
    except Exception:
        return default
    return default if value is None else value


def ews_id_to_str(value: Any) -> Optional[str]:
    """Return the string form of an EWS id, which may be an ItemId/FolderId object."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    inner = getattr(value, "id", None)
    if isinstance(inner, str):
        return inner
    return str(value)


def format_success_response(message: str, **data: Any) -> Dict[str, Any]:
    """Build the standard success payload returned by every tool."""
    response = {"success": True, "message": message}
    response.update(data)
    return response


def format_error_response(error: str, **data: Any) -> Dict[str, Any]:
    """Build the standard error payload."""
    response = {"success": False, "error": error}
    response.update(data)
    return response


def parse_datetime_tz_aware(
    value: Union[str, datetime, date],
    tz: Optional[EWSTimeZone] = None
) -> EWSDateTime:
    """
    Parse an ISO 8601 string (or date/datetime) into a timezone-aware EWSDateTime.

    Naive values are interpreted in ``tz`` (UTC when not given). A bare date
    becomes midnight of that day.
    """
    tz = tz or EWSTimeZone("UTC")

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid date '{value}': expected ISO 8601 format") from e
    elif isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    elif not isinstance(parsed.tzinfo, EWSTimeZone):
        # EWSDateTime only takes zone-backed tzinfo, so fixed offsets become UTC
        parsed = parsed.astimezone(EWSTimeZone("UTC"))
    return EWSDateTime.from_datetime(parsed)


_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\r\n\t]+')


def sanitize_filename(name: Optional[str], max_length: int = 80) -> str:
    """Make a string safe to use as a file name on Windows and POSIX."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name or "").strip(" .")
    if not cleaned:
        cleaned = "untitled"
    return cleaned[:max_length]
