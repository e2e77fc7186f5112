from pathlib import Path

import pytest

responses = pytest.importorskip("responses")

from tourdata.fetch import Fetcher
from tourdata.models import Show
from tourdata.sources.phishnet import (
    TourInfo,
    extract_tour_list,
    extract_tour_shows,
    extract_year_shows,
    scrape_tour,
    scrape_year,
)

FIXTURES = Path("tests/fixtures")
FALL_1997 = TourInfo(
    id="123",
    name="1997 Fall Tour",
    url="https://phish.net/tour/123-fall-tour-1997.html",
    year="1997",
    show_count=21,
)


def test_extract_year_shows_from_setlist_headers():
    html = (FIXTURES / "phish_1997.html").read_text()

    shows, strategy = extract_year_shows(html, 1997)

    assert strategy == "containers .setlist-header"
    assert shows == (
        Show(
            year=1997,
            date="November 22, 1997",
            venue="Hampton Coliseum",
            city_state="Hampton, VA, USA",
            net_link="https://phish.net/setlists/phish-november-22-1997-hampton-coliseum-hampton-va-usa.html",
        ),
        Show(
            year=1997,
            date="November 21, 1997",
            venue="Hampton Coliseum",
            city_state="Hampton, VA",
            net_link="https://phish.net/setlists/phish-november-21-1997-hampton-coliseum-hampton-va-usa.html",
        ),
    )


def test_extract_year_shows_falls_back_to_year_links():
    html = (FIXTURES / "phish_generic.html").read_text()

    shows, strategy = extract_year_shows(html, 1997)

    assert strategy == "year anchors"
    assert len(shows) == 1
    assert shows[0].date == "1997-11-22"
    assert shows[0].venue == "Unknown Venue"
    assert shows[0].city_state == "Unknown Location"
    assert shows[0].net_link == "https://phish.net/setlists/phish-1997-11-22.html"


def test_extract_year_shows_unknown_structure():
    html = (FIXTURES / "unknown_page.html").read_text()
    assert extract_year_shows(html, 1997) == ((), None)
    assert extract_year_shows("", 1997) == ((), None)


def test_extract_tour_list():
    html = (FIXTURES / "tour_list.html").read_text()

    tours = extract_tour_list(html)

    assert tours == [
        FALL_1997,
        TourInfo(
            id="124",
            name="1998 Phantom Tour",
            url="https://phish.net/tour/124-phantom-tour-1998.html",
            year="1998",
            show_count=0,
        ),
    ]


def test_extract_tour_shows_reads_main_box_only():
    html = (FIXTURES / "tour_page.html").read_text()

    shows, strategy = extract_tour_shows(html, FALL_1997)

    assert strategy == "setlist links in .tpcmainbox"
    assert [show.date for show in shows] == ["1997-11-21", "1997-11-22"]
    assert {show.venue for show in shows} == {"Hampton Coliseum"}
    assert {show.city_state for show in shows} == {"Hampton, VA"}
    assert {show.tour for show in shows} == {"1997 Fall Tour"}
    assert {show.year for show in shows} == {1997}


def test_scrape_year_and_tour_over_http(monkeypatch):
    monkeypatch.setattr("tourdata.fetch.time.sleep", lambda *_: None)
    messages = []

    with responses.RequestsMock() as rsps:
        rsps.add(
            rsps.GET,
            "https://phish.net/setlists/phish-1997.html",
            body=(FIXTURES / "phish_1997.html").read_text(),
            status=200,
        )
        rsps.add(rsps.GET, FALL_1997.url, body=(FIXTURES / "tour_page.html").read_text(), status=200)

        fetcher = Fetcher(log_func=messages.append)
        year_shows = scrape_year(fetcher, 1997, log_func=messages.append)
        tour_shows = scrape_tour(fetcher, FALL_1997, log_func=messages.append)

    assert len(year_shows) == 2
    assert len(tour_shows) == 2
    assert any("2 shows via containers .setlist-header" in m for m in messages)
    assert any("expected 21" in m for m in messages)
