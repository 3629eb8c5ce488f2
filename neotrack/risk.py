"""
Timing and risk classification of close approaches.

Approach times arrive either as date strings or as Unix seconds; both are
resolved once, in `to_unix_seconds`, and everything downstream works in
seconds.
"""
import logging
import math
from datetime import datetime, timezone
from enum import Enum
from functools import singledispatch
from typing import Callable, Iterable, List, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

from neotrack.constants import DAY, R_EARTH
from neotrack.neo import ApproachRecord

logger = logging.getLogger(__name__)

Precision = Literal['day', 'minute', 'second']

DISPLAY_FORMATS = {
    'day': '%d %b %Y',
    'minute': '%d %b %Y %H:%M UTC',
    'second': '%d %b %Y %H:%M:%S UTC',
}

# NeoWs writes dates like "2029-Apr-13 21:46"
NEO_DATE_FORMATS = ('%Y-%b-%d %H:%M', '%Y-%b-%d %H:%M:%S', '%Y-%b-%d')

# Risk thresholds
CRITICAL_DAYS = 30.0
CRITICAL_MISS_KM = 2.0 * R_EARTH
HIGH_DAYS = 90.0
HIGH_MISS_KM = 5.0 * R_EARTH
MEDIUM_DAYS = 365.0


class ApproachDateError(ValueError):
    """An approach date string could not be parsed."""


class RiskLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


class ApproachInfo(BaseModel):
    """
    A close-approach time seen from a reference "now".

    Attributes:
        timestamp: Approach time (Unix seconds)
        iso: Approach time as an ISO-8601 UTC string
        display: Approach time formatted for display
        time_until: Seconds from now until the approach, negative if past
        is_past: Whether the approach is before now
        precision: Resolution of the display string
    """
    model_config = ConfigDict(frozen=True)

    timestamp: float
    iso: str
    display: str
    time_until: float
    is_past: bool
    precision: Precision

    @property
    def days_until(self) -> float:
        return self.time_until / DAY


class ApproachAssessment(NamedTuple):
    record: ApproachRecord
    info: ApproachInfo
    risk: RiskLevel
    countdown: str


def parse_approach_date(text: str) -> datetime:
    """
    Parse an ISO-8601 or NeoWs date string. Naive values are taken as UTC.

    Raises:
        ApproachDateError: if no supported format matches
    """
    text = text.strip()
    if not text:
        raise ApproachDateError("Empty approach date")

    iso_text = text[:-1] + '+00:00' if text.endswith('Z') else text
    try:
        moment = datetime.fromisoformat(iso_text)
    except ValueError:
        for fmt in NEO_DATE_FORMATS:
            try:
                moment = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        else:
            raise ApproachDateError(f"Unrecognized approach date '{text}'") from None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@singledispatch
def to_unix_seconds(value) -> float:
    """Resolve an approach time (date string, datetime or Unix seconds) to Unix seconds."""
    raise TypeError(f"Unsupported approach time type {type(value).__name__}")


@to_unix_seconds.register(int)
@to_unix_seconds.register(float)
def _(value) -> float:
    seconds = float(value)
    if not math.isfinite(seconds):
        raise ApproachDateError(f"Non-finite approach time {value!r}")
    return seconds


@to_unix_seconds.register
def _(value: bool) -> float:
    raise TypeError("Unsupported approach time type bool")


@to_unix_seconds.register
def _(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


@to_unix_seconds.register
def _(value: str) -> float:
    return parse_approach_date(value).timestamp()


def default_display(moment: datetime, precision: Precision) -> str:
    return moment.strftime(DISPLAY_FORMATS[precision])


def analyze_approach(
    when,
    now: float,
    precision: Precision = 'minute',
    formatter: Optional[Callable[[datetime, Precision], str]] = None,
) -> ApproachInfo:
    """
    Timing of an approach relative to `now` (Unix seconds).

    Args:
        when: Date string, datetime or Unix seconds
        now: Reference time (Unix seconds)
        precision: Resolution of the display string ('day', 'minute' or 'second')
        formatter: Replacement for default_display, called with the UTC
            datetime and the precision

    Raises:
        ApproachDateError: if `when` is an unparseable string, not finite or
            outside the representable date range
        ValueError: for an unknown precision
    """
    if precision not in DISPLAY_FORMATS:
        raise ValueError(f"Invalid precision '{precision}'. Must be one of: {', '.join(DISPLAY_FORMATS)}")

    timestamp = to_unix_seconds(when)
    try:
        moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as exc:
        raise ApproachDateError(f"Approach time {timestamp!r} is outside the supported date range") from exc
    time_until = timestamp - now

    return ApproachInfo(
        timestamp=timestamp,
        iso=moment.isoformat(),
        display=(formatter or default_display)(moment, precision),
        time_until=time_until,
        is_past=time_until < 0,
        precision=precision,
    )


def classify_risk(info: ApproachInfo, miss_distance_km: float) -> RiskLevel:
    """Risk level from time to approach and miss distance; first match wins."""
    if info.is_past:
        return RiskLevel.LOW

    days = info.days_until
    if days < CRITICAL_DAYS and miss_distance_km < CRITICAL_MISS_KM:
        return RiskLevel.CRITICAL
    if days < HIGH_DAYS and miss_distance_km < HIGH_MISS_KM:
        return RiskLevel.HIGH
    if days < MEDIUM_DAYS:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def format_time_until(seconds: float) -> str:
    """
    Human-readable countdown such as "in 3 days 4 hours" or "5 minutes ago".

    Shows the largest non-zero unit of days, hours and minutes and at most
    one smaller unit. Under a minute reads "imminent" or "just now".
    """
    span = abs(seconds)
    if span < 60:
        return 'imminent' if seconds >= 0 else 'just now'

    days, rem = divmod(int(span), 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60

    if days:
        parts = [(days, 'day'), (hours, 'hour')]
    elif hours:
        parts = [(hours, 'hour'), (minutes, 'minute')]
    else:
        parts = [(minutes, 'minute')]

    text = ' '.join(_plural(n, unit) for n, unit in parts if n)
    return f"in {text}" if seconds > 0 else f"{text} ago"


def assess_approach(record: ApproachRecord, now: float, formatter=None) -> ApproachAssessment:
    info = analyze_approach(record.close_approach, now, record.precision, formatter)
    return ApproachAssessment(
        record=record,
        info=info,
        risk=classify_risk(info, record.miss_distance_km),
        countdown=format_time_until(info.time_until),
    )


def assess_approaches(records: Iterable[ApproachRecord], now: float, formatter=None) -> List[ApproachAssessment]:
    """Assess every record; records with unparseable dates are logged and skipped."""
    assessments = []
    for record in records:
        try:
            assessments.append(assess_approach(record, now, formatter))
        except ApproachDateError as exc:
            logger.info("Skipping close approach: %s", exc)
    return assessments


def next_future_approach(records: Iterable[ApproachRecord], now: float, formatter=None) -> Optional[ApproachAssessment]:
    """The soonest approach after `now`, or None if there is none."""
    future = [a for a in assess_approaches(records, now, formatter) if not a.info.is_past]
    return min(future, key=lambda a: a.info.time_until, default=None)
