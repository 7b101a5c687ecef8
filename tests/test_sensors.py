import pytest

from suburbview.ingestion.sensors import heading_from_reading, normalize_heading


def test_webkit_heading_is_inverted_and_wins_over_alpha():
    assert normalize_heading(webkit_compass_heading=90.0, alpha=10.0) == 270.0
    assert normalize_heading(webkit_compass_heading=0.0) == 0.0


def test_alpha_is_used_as_is():
    assert normalize_heading(alpha=45.5) == 45.5
    assert normalize_heading(alpha=360.0) == 0.0


def test_no_heading_in_reading():
    assert normalize_heading() is None
    assert heading_from_reading({"beta": 3.0}) is None


@pytest.mark.parametrize(
    "reading,expected",
    [
        ({"heading": 370}, 10.0),
        ({"alpha": 120}, 120.0),
        ({"webkitCompassHeading": 30}, 330.0),
    ],
)
def test_heading_from_reading(reading, expected):
    assert heading_from_reading(reading) == pytest.approx(expected)
