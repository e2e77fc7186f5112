import json
from pathlib import Path

import pytest

from scrape import main
from tourdata import config

SOURCES = Path("tests/fixtures/sources")


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "LOG_PATH", tmp_path / "scrape-log.txt")
    return tmp_path


def run_merge(data_dir, *extra):
    out_csv = data_dir / "phish_tours.csv"
    out_json = data_dir / "phish_tours.json"
    code = main([
        "merge",
        str(SOURCES / "fall_1997_tour.json"),
        str(SOURCES / "shows.json"),
        str(SOURCES / "tickets.csv"),
        "--output-csv", str(out_csv),
        "--output-json", str(out_json),
        *extra,
    ])
    return code, out_csv, out_json


def test_merge_matches_golden_snapshot(data_dir):
    code, _, out_json = run_merge(data_dir)

    assert code == 0
    expected = json.loads(Path("tests/golden/shows_v1.json").read_text())
    assert json.loads(out_json.read_text()) == expected


def test_merge_is_stable_when_rerun_on_its_output(data_dir):
    _, out_csv, out_json = run_merge(data_dir)
    first = out_csv.read_bytes()

    rerun_csv = data_dir / "rerun.csv"
    assert main(["merge", str(out_json), "--output-csv", str(rerun_csv), "--output-json", str(data_dir / "rerun.json")]) == 0
    assert rerun_csv.read_bytes() == first


def test_merge_display_dates_and_tours(data_dir):
    _, out_csv, out_json = run_merge(data_dir, "--date-format", "display", "--with-tours")

    shows = json.loads(out_json.read_text())["shows"]
    assert shows[0]["date"] == "December 2, 1983"
    assert shows[0]["tour"] == "1983 Tour"
    assert shows[-1]["tour"] == "1997 NYE Run"
    assert out_csv.read_text().splitlines()[0] == "year,tour,date,venue,city_state,net_link"


def test_merge_writes_run_log(data_dir):
    run_merge(data_dir)

    log_text = (data_dir / "scrape-log.txt").read_text()
    assert "--- New Run ---" in log_text
    assert "[WARNING]" in log_text
    assert "unparseable date 'not a date'" in log_text
