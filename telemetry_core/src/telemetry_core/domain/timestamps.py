"""Resolution of reading time fields into comparable instants.

Records in the store carry their time in one of several shapes:

* an epoch number (or all-digit string) in seconds or milliseconds,
* a compound ``YYYY-MM-DD_HH-mm-ss`` string in local time,
* anything ``dateutil`` can parse,
* nothing at all, in which case the record's push key is used.

Each shape is a matcher returning an instant in milliseconds or ``None``;
matchers are tried in order and the first success wins.
"""

import logging
import math
import re
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional

from dateutil import parser as dateutil_parser

from telemetry_core.domain.push_ids import decode_push_time

logger = logging.getLogger(__name__)

MS_THRESHOLD = 1e12
TIME_FIELDS = ("timestamp", "createdAt", "time", "t")

_DIGITS = re.compile(r"[0-9]+")

Matcher = Callable[[Any], Optional[int]]


class ResolvedTime(NamedTuple):
    instant: int
    label: str


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def match_numeric(value: Any) -> Optional[int]:
    if _is_number(value):
        if not math.isfinite(value):
            return None
        num = float(value)
    elif isinstance(value, str) and _DIGITS.fullmatch(value):
        try:
            num = float(int(value))
        except OverflowError:
            return None
    else:
        return None
    return int(num) if num > MS_THRESHOLD else int(num * 1000)


def _component(parts, index: int, default: int) -> int:
    try:
        return int(parts[index]) or default
    except (IndexError, ValueError):
        return default


def match_compound(value: Any) -> Optional[int]:
    if not isinstance(value, str) or value.count("_") != 1:
        return None
    date_part, time_part = value.split("_")
    ymd = date_part.split("-")
    hms = time_part.split("-")
    try:
        dt = datetime(
            _component(ymd, 0, 1900),
            _component(ymd, 1, 1),
            _component(ymd, 2, 1),
            _component(hms, 0, 0),
            _component(hms, 1, 0),
            _component(hms, 2, 0),
        )
        return int(dt.timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        logger.debug("Compound timestamp %r has out-of-range components", value)
        return None


def match_push_key(value: Any) -> Optional[int]:
    return decode_push_time(value)


def match_generic(value: Any) -> Optional[int]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return int(dateutil_parser.parse(value).timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        return None


VALUE_MATCHERS = (match_numeric, match_compound, match_generic)
# push keys may contain a single "_", so they are decoded before compound stamps
KEY_MATCHERS = (match_numeric, match_push_key, match_compound, match_generic)


def resolve_instant(value: Any, matchers: Iterable[Matcher] = VALUE_MATCHERS) -> Optional[int]:
    for matcher in matchers:
        instant = matcher(value)
        if instant is not None:
            return instant
    return None


def clock_label(instant: int) -> str:
    try:
        return datetime.fromtimestamp(instant / 1000).strftime("%H:%M")
    except (ValueError, OverflowError, OSError):
        return str(instant)


def time_label(value: Any) -> str:
    """Short display label for a raw time value."""
    if _is_number(value) or (isinstance(value, str) and _DIGITS.fullmatch(value)):
        instant = match_numeric(value)
        return "" if instant is None else clock_label(instant)
    raw = str(value)
    if "_" in raw:
        return raw.split("_")[1] or raw
    return raw


def pick_time_field(record: Mapping[str, Any]) -> Any:
    for name in TIME_FIELDS:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def resolve_time(record: Mapping[str, Any], key: str) -> Optional[ResolvedTime]:
    """Resolve a record's time, falling back to its storage key."""
    value = pick_time_field(record)
    if value is not None:
        instant = resolve_instant(value)
    else:
        value = key
        instant = resolve_instant(key, KEY_MATCHERS)
        if instant is not None and instant == match_push_key(key):
            return ResolvedTime(instant=instant, label=clock_label(instant))
    if instant is None:
        return None
    return ResolvedTime(instant=instant, label=time_label(value))
