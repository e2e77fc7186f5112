import re
from datetime import datetime

ISO_FORMAT = "%Y-%m-%d"
DISPLAY_FORMATS = ["%B %d, %Y", "%b %d, %Y", "%B %d %Y", "%b %d %Y"]
SLUG_DATE_RE = re.compile(r"^([a-z]+)-(\d{1,2})-(\d{4})$", re.IGNORECASE)

SEASONS = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Fall", 10: "Fall", 11: "Fall",
}


def parse_date(value):
    """
    Parse a show date into a datetime.date.
    Handles: "1997-11-22", "November 22, 1997", "Nov 22, 1997", "november-22-1997"
    Returns None when the value is not recognised.
    """
    if not value:
        return None

    text = " ".join(str(value).split()).replace(" ,", ",")

    try:
        return datetime.strptime(text, ISO_FORMAT).date()
    except ValueError:
        pass

    slug = SLUG_DATE_RE.match(text)
    if slug:
        month, day, year = slug.groups()
        text = f"{month} {day}, {year}"

    for fmt in DISPLAY_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_display(d):
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def normalize_date(value, to="iso"):
    """
    Convert a date string to ISO ("iso") or "Month D, YYYY" ("display").
    Unparseable values come back unchanged.
    """
    if to not in ("iso", "display"):
        raise ValueError(f"Unknown date form: {to}")

    parsed = parse_date(value)
    if parsed is None:
        return value
    if to == "iso":
        return parsed.isoformat()
    return format_display(parsed)


def year_from_date(value):
    parsed = parse_date(value)
    return parsed.year if parsed else None


def infer_tour_name(value):
    """
    Seasonal tour name for a show date, used when a record has no tour.
    Dec 28-31 is the NYE run; the 1980s are grouped by year only.
    """
    parsed = parse_date(value)
    if parsed is None:
        return ""
    if parsed.month == 12 and parsed.day >= 28:
        return f"{parsed.year} NYE Run"
    if parsed.year <= 1989:
        return f"{parsed.year} Tour"
    return f"{parsed.year} {SEASONS[parsed.month]} Tour"
