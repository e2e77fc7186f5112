from dataclasses import dataclass, fields
from typing import Optional

from tourdata.utils.dates import year_from_date

# Source files disagree on column names; keys are compared lowercased.
FIELD_ALIASES = {
    "year": ("year",),
    "date": ("date",),
    "venue": ("venue",),
    "city_state": ("city_state", "citystate", "city, st", "city/state", "location"),
    "net_link": ("net_link", "netlink", ".net link", "net link", "setlist_link"),
    "tour": ("tour", "tour_name"),
    "imageurl": ("imageurl", "image_url"),
    "id": ("id",),
}


def lookup_field(row, name):
    """Return the value stored under any alias of `name`, or None."""
    lowered = {str(key).strip().lower(): value for key, value in row.items() if key is not None}
    for alias in FIELD_ALIASES[name]:
        value = lowered.get(alias)
        if value is not None:
            return value
    return None


def parse_year(value):
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return None


def _text(value):
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class Show:
    year: Optional[int]
    date: str
    venue: str
    city_state: str
    net_link: str = ""
    tour: str = ""

    @classmethod
    def from_dict(cls, row):
        date = _text(lookup_field(row, "date"))
        year = parse_year(lookup_field(row, "year"))
        if year is None:
            year = year_from_date(date)
        return cls(
            year=year,
            date=date,
            venue=_text(lookup_field(row, "venue")),
            city_state=_text(lookup_field(row, "city_state")),
            net_link=_text(lookup_field(row, "net_link")),
            tour=_text(lookup_field(row, "tour")),
        )

    def to_dict(self, field_names=None):
        names = field_names or [f.name for f in fields(self)]
        return {name: getattr(self, name) for name in names}


@dataclass(frozen=True)
class Ticket(Show):
    imageurl: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, row):
        show = Show.from_dict(row)
        ticket_id = lookup_field(row, "id")
        return cls(
            year=show.year,
            date=show.date,
            venue=show.venue,
            city_state=show.city_state,
            net_link=show.net_link,
            tour=show.tour,
            imageurl=_text(lookup_field(row, "imageurl")),
            id=None if ticket_id in (None, "") else str(ticket_id),
        )

    def to_record(self):
        """Row payload for the ticket store (no id, no tour)."""
        return {
            "year": self.year,
            "date": self.date,
            "venue": self.venue,
            "city_state": self.city_state,
            "imageurl": self.imageurl,
            "net_link": self.net_link,
        }
