"""
Tests for approach timing, countdown text and risk levels.
"""
import math
from datetime import datetime, timezone

import pytest

from neotrack import (
    ApproachDateError,
    ApproachRecord,
    R_EARTH,
    RiskLevel,
    analyze_approach,
    assess_approach,
    assess_approaches,
    classify_risk,
    format_time_until,
    next_future_approach,
    to_unix_seconds,
)
from neotrack.constants import DAY

# 2029-04-13T21:46:00Z
APOPHIS_FLYBY = 1870811160.0
NOW = 1.7e9


def _info_in(days):
    return analyze_approach(NOW + days * DAY, NOW)


def test_analyze_neo_date_string():
    info = analyze_approach("2029-Apr-13 21:46", NOW)
    assert info.timestamp == APOPHIS_FLYBY
    assert info.iso == '2029-04-13T21:46:00+00:00'
    assert info.display == '13 Apr 2029 21:46 UTC'
    assert info.time_until == APOPHIS_FLYBY - NOW
    assert not info.is_past
    assert info.precision == 'minute'


def test_analyze_iso_string_with_z():
    info = analyze_approach("2029-04-13T21:46:00Z", NOW, precision='second')
    assert info.timestamp == APOPHIS_FLYBY
    assert info.display == '13 Apr 2029 21:46:00 UTC'


def test_analyze_day_precision():
    info = analyze_approach("2029-Apr-13", NOW, precision='day')
    assert info.display == '13 Apr 2029'
    assert info.iso == '2029-04-13T00:00:00+00:00'


def test_time_inputs_agree():
    moment = datetime(2029, 4, 13, 21, 46, tzinfo=timezone.utc)
    naive = datetime(2029, 4, 13, 21, 46)
    for value in (APOPHIS_FLYBY, int(APOPHIS_FLYBY), moment, naive, "2029-04-13 21:46"):
        assert to_unix_seconds(value) == APOPHIS_FLYBY, value


def test_past_approach():
    info = analyze_approach(NOW - 3600.0, NOW)
    assert info.is_past
    assert info.time_until == -3600.0


def test_custom_formatter():
    calls = []

    def formatter(moment, precision):
        calls.append((moment, precision))
        return f"{moment:%Y/%m/%d}"

    info = analyze_approach(APOPHIS_FLYBY, NOW, 'day', formatter)
    assert info.display == '2029/04/13'
    assert calls == [(datetime(2029, 4, 13, 21, 46, tzinfo=timezone.utc), 'day')]


def test_invalid_inputs():
    with pytest.raises(ApproachDateError):
        analyze_approach("next tuesday", NOW)
    with pytest.raises(ApproachDateError):
        analyze_approach("   ", NOW)
    with pytest.raises(ValueError):
        analyze_approach(APOPHIS_FLYBY, NOW, precision='hour')
    with pytest.raises(TypeError):
        to_unix_seconds([APOPHIS_FLYBY])
    with pytest.raises(TypeError):
        to_unix_seconds(True)


def test_risk_levels():
    assert classify_risk(_info_in(29), 2.0 * R_EARTH - 1.0) == RiskLevel.CRITICAL
    assert classify_risk(_info_in(31), 2.0 * R_EARTH - 1.0) == RiskLevel.HIGH
    assert classify_risk(_info_in(29), 2.0 * R_EARTH) == RiskLevel.HIGH
    assert classify_risk(_info_in(89), 5.0 * R_EARTH - 1.0) == RiskLevel.HIGH
    assert classify_risk(_info_in(89), 5.0 * R_EARTH) == RiskLevel.MEDIUM
    assert classify_risk(_info_in(200), 1.0) == RiskLevel.MEDIUM
    assert classify_risk(_info_in(400), 1.0) == RiskLevel.LOW


def test_past_approach_is_low_risk():
    assert classify_risk(_info_in(-1), 0.0) == RiskLevel.LOW


def test_risk_level_is_string():
    assert RiskLevel.CRITICAL == 'critical'
    assert RiskLevel('medium') is RiskLevel.MEDIUM


@pytest.mark.parametrize("seconds, expected", [
    (30.0, 'imminent'),
    (0.0, 'imminent'),
    (-50.0, 'just now'),
    (86400.0, 'in 1 day'),
    (3 * 86400.0 + 4 * 3600.0, 'in 3 days 4 hours'),
    (3 * 86400.0 + 4 * 3600.0 + 12 * 60.0, 'in 3 days 4 hours'),
    (2 * 86400.0 + 15 * 60.0, 'in 2 days'),
    (3600.0 + 60.0, 'in 1 hour 1 minute'),
    (-(2 * 3600.0 + 5 * 60.0), '2 hours 5 minutes ago'),
    (-90.0, '1 minute ago'),
    (45 * 60.0, 'in 45 minutes'),
])
def test_format_time_until(seconds, expected):
    assert format_time_until(seconds) == expected


def test_assess_approach():
    record = ApproachRecord(close_approach=NOW + 10 * DAY, miss_distance_km=10000.0)
    assessment = assess_approach(record, NOW)
    assert assessment.record is record
    assert assessment.risk == RiskLevel.CRITICAL
    assert assessment.countdown == 'in 10 days'
    assert assessment.info.precision == 'minute'


def test_assess_uses_record_precision():
    record = ApproachRecord(close_approach="2029-Apr-13", miss_distance_km=38000.0)
    assessment = assess_approach(record, NOW)
    assert assessment.info.precision == 'day'
    assert assessment.info.display == '13 Apr 2029'


def test_assess_approaches_skips_bad_dates(caplog):
    records = [
        ApproachRecord(close_approach="not a date", miss_distance_km=1.0),
        ApproachRecord(close_approach=NOW + DAY, miss_distance_km=1.0),
    ]
    with caplog.at_level('INFO', logger='neotrack.risk'):
        assessments = assess_approaches(records, NOW)
    assert [a.record for a in assessments] == records[1:]
    assert "not a date" in caplog.text


def test_next_future_approach():
    records = [
        ApproachRecord(close_approach=NOW - 5 * DAY, miss_distance_km=1.0e6),
        ApproachRecord(close_approach=NOW + 40 * DAY, miss_distance_km=1.0e6),
        ApproachRecord(close_approach="garbage", miss_distance_km=1.0e6),
        ApproachRecord(close_approach=NOW + 7 * DAY, miss_distance_km=1.0e6),
    ]
    upcoming = next_future_approach(records, NOW)
    assert upcoming.record is records[3]
    assert upcoming.info.days_until == pytest.approx(7.0)

    assert next_future_approach(records[:1], NOW) is None
    assert next_future_approach([], NOW) is None


@pytest.mark.parametrize("when", [
    math.nan,
    math.inf,
    APOPHIS_FLYBY * 1000.0,  # epoch milliseconds passed as seconds
    "9999-12-31T23:00:00-05:00",  # year 10000 in UTC
])
def test_unrepresentable_time_is_date_error(when):
    with pytest.raises(ApproachDateError):
        analyze_approach(when, NOW)


@pytest.mark.parametrize("bad", [math.nan, APOPHIS_FLYBY * 1000.0, "9999-12-31T23:00:00-05:00"])
def test_unrepresentable_record_skipped_in_batch(bad):
    good = ApproachRecord(close_approach=NOW + 2 * DAY, miss_distance_km=1.0e6)
    records = [ApproachRecord(close_approach=bad, miss_distance_km=1.0e6), good]

    assessments = assess_approaches(records, NOW)
    assert [a.record for a in assessments] == [good]
    assert next_future_approach(records, NOW).record is good
