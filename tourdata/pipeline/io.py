import csv
import json
import re
from datetime import datetime, timedelta

from tourdata import config
from tourdata.models import Show
from tourdata.utils.dates import normalize_date, parse_date


def trim_log_by_time(log_path, retention_days=None):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days or config.LOG_RETENTION_DAYS)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


# ----------------------------------------------------------------------
# Show files
# ----------------------------------------------------------------------

def read_csv(path, record_cls=Show):
    """Read a show/ticket CSV; column names may use any known alias."""
    with open(path, "r", newline="", encoding="utf-8") as f:
        rows = [row for row in csv.DictReader(f) if any((v or "").strip() for v in row.values())]
    return tuple(record_cls.from_dict(row) for row in rows)


def read_json(path, record_cls=Show):
    """Read {"shows": [...]}, {"tickets": [...]} or a bare list of records."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        rows = data.get("shows") or data.get("tickets") or []
    elif isinstance(data, list):
        rows = data
    else:
        rows = []
    return tuple(record_cls.from_dict(row) for row in rows if isinstance(row, dict))


def load_shows_file(path, record_cls=Show):
    if path.suffix.lower() == ".csv":
        return read_csv(path, record_cls)
    return read_json(path, record_cls)


def write_csv(shows, path, fields=None):
    fields = fields or config.SHOW_FIELDS
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fields, lineterminator="\n", extrasaction="ignore")
        writer.writeheader()
        for show in shows:
            writer.writerow(show.to_dict(fields))


def write_json(shows, path, fields=None, layout="shows"):
    """
    Write shows as {"shows": [...]} or, for layout="tickets",
    {"years": [newest..oldest], "tickets": [...]}.
    """
    fields = fields or config.SHOW_FIELDS
    records = [show.to_dict(fields) for show in shows]
    if layout == "tickets":
        years = sorted({show.year for show in shows if show.year is not None}, reverse=True)
        payload = {"years": years, "tickets": records}
    else:
        payload = {"shows": records}

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")


def write_outputs(shows, csv_path, json_path, fields=None, layout="shows"):
    write_csv(shows, csv_path, fields)
    write_json(shows, json_path, fields, layout)


def rewrite_csv_dates(src_path, dst_path, to):
    """
    Copy a CSV, converting its date column to ISO or display form.
    Other columns pass through untouched. Returns the dates left unconverted.
    """
    with open(src_path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        rows = list(reader)

    date_column = next((name for name in fieldnames if name.strip().lower() == "date"), None)
    unconverted = []
    if date_column:
        for row in rows:
            original = row[date_column]
            row[date_column] = normalize_date(original, to)
            if parse_date(original) is None:
                unconverted.append(original)

    dst_path.parent.mkdir(parents=True, exist_ok=True)
    with open(dst_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, lineterminator="\n", extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
    return unconverted


def load_checkpoint(json_path, key, log_func=None):
    """
    Load a previous run's JSON output for resuming.
    Returns (shows, processed) where processed is the set of `key` values
    (e.g. "year" or "tour") already present in the output.
    """
    log = log_func or print
    if not json_path.exists():
        return (), frozenset()

    try:
        shows = read_json(json_path)
    except (OSError, ValueError) as e:
        log(f"  Could not read checkpoint {json_path}, starting fresh: {e}")
        return (), frozenset()

    processed = frozenset(getattr(show, key) for show in shows if getattr(show, key))
    return shows, processed


# ----------------------------------------------------------------------
# Run status
# ----------------------------------------------------------------------

def load_existing_status(status_path=None):
    """Load existing scrape status file if available."""
    status_path = status_path or config.STATUS_PATH
    try:
        if status_path.exists():
            with open(status_path, "r") as f:
                return json.load(f)
    except (OSError, ValueError):
        pass
    return {"units": {}}


def save_status(status, status_path=None):
    status_path = status_path or config.STATUS_PATH
    status_path.parent.mkdir(parents=True, exist_ok=True)
    with open(status_path, "w") as f:
        json.dump(status, f, indent=2)
