import itertools
from dataclasses import replace
from datetime import date

from tourdata.utils.dates import normalize_date, parse_date
from tourdata.utils.normalize import is_placeholder, normalize_location, normalize_venue


def show_key(show):
    """Dedup key: ISO date + lowercased normalized venue + lowercased normalized location."""
    return "-".join([
        normalize_date(show.date, "iso"),
        normalize_venue(show.venue).lower(),
        normalize_location(show.city_state).lower(),
    ])


def _partner_rank(show, existing):
    """
    0 when the two records share a location, 1 when either location is
    missing, None when they cannot be the same show.
    Two records that both name a venue only collapse through show_key.
    """
    if not is_placeholder(show.venue) and not is_placeholder(existing.venue):
        return None
    loc_a = normalize_location(show.city_state).lower()
    loc_b = normalize_location(existing.city_state).lower()
    if loc_a == loc_b:
        return 0
    if is_placeholder(loc_a) or is_placeholder(loc_b):
        return 1
    return None


def _find_partner(show, slots, slot_ids):
    """Same-day slot to collapse into; a slot at the same location wins over one without a location."""
    fallback = None
    for i in slot_ids:
        rank = _partner_rank(show, slots[i])
        if rank == 0:
            return i
        if rank == 1 and fallback is None:
            fallback = i
    return fallback


def _combine(existing, show):
    """Fill the kept record's placeholder venue or location from the incoming one."""
    if is_placeholder(existing.venue) and not is_placeholder(show.venue):
        if is_placeholder(show.city_state) and not is_placeholder(existing.city_state):
            return replace(show, city_state=existing.city_state)
        return show
    if is_placeholder(existing.city_state) and not is_placeholder(show.city_state):
        return replace(existing, city_state=show.city_state)
    return existing


def merge_shows(*collections):
    """
    Merge show collections into one deduplicated, date-sorted tuple.
    - Records with the same show_key collapse into the first one seen
    - The incoming record replaces the kept one only when it has a venue and
      the kept one does not (empty or "Unknown Venue"); a known location is
      never traded for an unknown one
    - A venue-less record also collapses into a same-day record at the same
      location (or where either location is unknown), so the populated copy
      wins regardless of order
    """
    slots = []
    slot_by_key = {}
    slots_by_date = {}

    for show in itertools.chain.from_iterable(collections):
        key = show_key(show)
        day = normalize_date(show.date, "iso")

        i = slot_by_key.get(key)
        if i is None:
            i = _find_partner(show, slots, slots_by_date.get(day, []))

        if i is None:
            slot_by_key[key] = len(slots)
            slots_by_date.setdefault(day, []).append(len(slots))
            slots.append(show)
            continue

        slot_by_key.setdefault(key, i)
        slots[i] = _combine(slots[i], show)
        slot_by_key.setdefault(show_key(slots[i]), i)

    return sort_shows(slots)


def _sort_key(show):
    parsed = parse_date(show.date)
    return (parsed is None, parsed or date.min)


def sort_shows(shows):
    """Ascending by parsed date; stable, unparseable dates last."""
    return tuple(sorted(shows, key=_sort_key))
