from tourdata import config
from tourdata.errors import ValidationError
from tourdata.utils.dates import parse_date


def check_show(show, required_fields=None):
    """Raise ValidationError if the show is missing data we cannot publish without."""
    for field in required_fields or config.REQUIRED_FIELDS:
        value = getattr(show, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"missing {field}")
    if parse_date(show.date) is None:
        raise ValidationError(f"unparseable date {show.date!r}")
    if show.year is None or not 1000 <= show.year <= 9999:
        raise ValidationError(f"invalid year {show.year!r}")


def validate_show(show):
    """Check that a show has all required fields with valid data."""
    try:
        check_show(show)
    except ValidationError:
        return False
    return True


def partition_valid(shows, required_fields=None):
    """Split shows into (valid tuple, [(show, reason), ...])."""
    valid = []
    dropped = []
    for show in shows:
        try:
            check_show(show, required_fields)
        except ValidationError as e:
            dropped.append((show, str(e)))
        else:
            valid.append(show)
    return tuple(valid), dropped
