import pytest

from tourdata.models import Show
from tourdata.pipeline.validate import check_show, partition_valid, validate_show
from tourdata.errors import ValidationError
from tourdata.utils.dates import infer_tour_name, normalize_date, parse_date, year_from_date
from tourdata.utils.normalize import (
    is_placeholder,
    normalize_location,
    normalize_show,
    normalize_venue,
)
from tourdata.utils.shows import generate_slug


def test_normalize_date_both_directions():
    assert normalize_date("November 22, 1997", "iso") == "1997-11-22"
    assert normalize_date("Nov 2, 1997", "iso") == "1997-11-02"
    assert normalize_date("1997-11-02", "display") == "November 2, 1997"
    assert normalize_date("december-02-1983", "iso") == "1983-12-02"
    assert normalize_date("  December  2 , 1983 ", "iso") == "1983-12-02"


def test_normalize_date_returns_unparseable_unchanged():
    assert normalize_date("sometime in 1997", "iso") == "sometime in 1997"
    assert normalize_date("", "display") == ""
    assert normalize_date(None, "iso") is None


@pytest.mark.parametrize("value", ["November 22, 1997", "1997-11-22", "Dec 31, 1999", "february-29-2000"])
def test_normalize_date_round_trip_is_stable(value):
    assert normalize_date(normalize_date(value, "iso"), "display") == normalize_date(value, "display")


def test_normalize_date_rejects_unknown_target():
    with pytest.raises(ValueError):
        normalize_date("1997-11-22", "epoch")


def test_year_from_date():
    assert year_from_date("November 22, 1997") == 1997
    assert year_from_date("1983-12-02") == 1983
    assert year_from_date("TBD") is None
    assert parse_date("1997-02-30") is None


def test_infer_tour_name():
    assert infer_tour_name("1997-12-30") == "1997 NYE Run"
    assert infer_tour_name("1985-05-01") == "1985 Tour"
    assert infer_tour_name("1997-11-22") == "1997 Fall Tour"
    assert infer_tour_name("1998-01-02") == "1998 Winter Tour"
    assert infer_tour_name("not a date") == ""


def test_normalize_venue_strips_tour_prefix_and_applies_corrections():
    assert normalize_venue("Phish December 2 1983 Harris Millis Cafeteria") == "Harris-Millis Cafeteria"
    assert normalize_venue("Nectar's") == "Nectars"
    assert normalize_venue("nectars burlington") == "nectars"
    assert normalize_venue("WRUV Radio") == "WRUV Radio Burlington"
    assert normalize_venue("  Hampton   Coliseum ") == "Hampton Coliseum"
    assert normalize_venue("") == ""


@pytest.mark.parametrize("venue", [
    "Harris Millis Cafeteria University Of Vermont Burlington",
    "WRUV Radio",
    "Hunt's Burlington",
    "Unknown Venue Enosburg",
])
def test_normalize_venue_is_idempotent(venue):
    once = normalize_venue(venue)
    assert normalize_venue(once) == once


def test_normalize_location():
    assert normalize_location("Hampton, VA, USA") == "Hampton, VA"
    assert normalize_location("York, NY") == "New York, NY"
    assert normalize_location("New York, NY") == "New York, NY"
    assert normalize_location("Alto, PA") == "Mont Alto, PA"
    assert normalize_location("Vt") == "Burlington, VT"
    assert normalize_location("York, PA") == "York, PA"


def test_is_placeholder():
    assert is_placeholder("")
    assert is_placeholder(None)
    assert is_placeholder("Unknown Venue")
    assert is_placeholder(" unknown location ")
    assert not is_placeholder("Hampton Coliseum")


def test_normalize_show_rederives_year():
    show = Show(year=None, date="November 22, 1997", venue="Hampton Coliseum", city_state="Hampton, VA, USA")
    result = normalize_show(show)
    assert result.year == 1997
    assert result.date == "1997-11-22"
    assert result.city_state == "Hampton, VA"
    assert show.date == "November 22, 1997"


def test_generate_slug():
    show = Show(year=1997, date="1997-11-22", venue="Hampton Coliseum!", city_state="Hampton, VA")
    assert generate_slug(show) == "1997-11-22-hampton-coliseum"


def test_show_from_dict_accepts_aliases():
    show = Show.from_dict({
        "YEAR": "1997",
        "Date": "1997-11-22",
        "VENUE": " Hampton Coliseum ",
        "CITY, ST": "Hampton, VA",
        ".net link": "https://phish.net/x",
        "tour_name": "1997 Fall Tour",
    })
    assert show == Show(1997, "1997-11-22", "Hampton Coliseum", "Hampton, VA", "https://phish.net/x", "1997 Fall Tour")


def test_validate_show_required_fields():
    valid = Show(year=1997, date="1997-11-22", venue="Hampton Coliseum", city_state="Hampton, VA")
    assert validate_show(valid) is True

    assert validate_show(Show(1997, "1997-11-22", "", "Hampton, VA")) is False
    assert validate_show(Show(1997, "", "Hampton Coliseum", "Hampton, VA")) is False
    assert validate_show(Show(97, "1997-11-22", "Hampton Coliseum", "Hampton, VA")) is False

    with pytest.raises(ValidationError, match="unparseable date"):
        check_show(Show(None, "TBD", "Hampton Coliseum", ""))


def test_partition_valid_reports_reasons():
    shows = [
        Show(1997, "1997-11-22", "Hampton Coliseum", "Hampton, VA"),
        Show(1997, "1997-11-23", "", "Hampton, VA"),
    ]
    valid, dropped = partition_valid(shows)
    assert valid == (shows[0],)
    assert dropped == [(shows[1], "missing venue")]
