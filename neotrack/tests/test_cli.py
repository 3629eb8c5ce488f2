"""
Tests for the command-line interface.
"""
import json

import pytest

from neotrack.__main__ import _approach_time, main
from neotrack.constants import DAY, KMPAU, SCENE_UNITS_PER_AU

J2000_UNIX = 946728000.0


def _run(capsys, *argv):
    assert main(list(argv)) == 0
    return json.loads(capsys.readouterr().out)


def test_bodies(capsys):
    out = _run(capsys, "bodies")
    assert out["Earth"]["kind"] == "planet"
    assert out["Earth"]["id"] == "399"
    assert out["Apophis"]["kind"] == "small"
    assert out["Apophis"]["elements"]["a"] > 0.0


def test_position(capsys):
    out = _run(capsys, "position", "Earth", "--time", str(J2000_UNIX))
    assert out["time"] == J2000_UNIX
    assert len(out["position"]) == 3
    norm = sum(x * x for x in out["position"]) ** 0.5
    assert norm == pytest.approx(SCENE_UNITS_PER_AU * out["radius_au"])


def test_position_scale(capsys):
    out = _run(capsys, "position", "Mars", "--time", "0", "--scale", "1")
    norm = sum(x * x for x in out["position"]) ** 0.5
    assert norm == pytest.approx(out["radius_au"])


def test_orbit(capsys):
    out = _run(capsys, "orbit", "Bennu", "--count", "12")
    assert len(out["points"]) == 13
    assert out["points"][0] == out["points"][-1]


def test_impact(capsys):
    out = _run(capsys, "impact", "Apophis", "--start", "0", "--steps", "10")
    assert 0.0 <= out["time"] <= 10 * 1800.0
    assert out["time"] % 1800.0 == 0.0
    assert out["distance_km"] == pytest.approx(out["distance_scene"] / SCENE_UNITS_PER_AU * KMPAU)
    assert out["deflected"] is False


def test_risk(capsys):
    now = 1.7e9
    out = _run(capsys, "risk", str(now + 10 * DAY), "--miss-km", "10000", "--now", str(now))
    assert out["risk"] == "critical"
    assert out["countdown"] == "in 10 days"
    assert out["approach"]["is_past"] is False


def test_risk_date_string(capsys):
    out = _run(capsys, "risk", "2029-Apr-13 21:46", "--miss-km", "38000", "--now", "1.7e9", "--precision", "day")
    assert out["approach"]["display"] == "13 Apr 2029"
    assert out["risk"] == "low"


def test_bad_date_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["risk", "someday", "--miss-km", "1"])
    assert exc.value.code == 2
    assert "Unrecognized approach date" in capsys.readouterr().err


@pytest.mark.parametrize("text, expected", [
    ("1870811160", 1870811160.0),
    ("1.7e9", 1.7e9),
    (".5", 0.5),
    ("2029-Apr-13 21:46", "2029-Apr-13 21:46"),
    ("2029-04-13T21:46:00Z", "2029-04-13T21:46:00Z"),
    ("nan", "nan"),
])
def test_approach_time_argument(text, expected):
    assert _approach_time(text) == expected


def test_risk_far_future_seconds_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["risk", "1.870811160e12", "--miss-km", "1", "--now", "1.7e9"])
    assert exc.value.code == 2
    assert "outside the supported date range" in capsys.readouterr().err
