import re


def slugify(text):
    text = (text or "").lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def generate_slug(show):
    """
    Generate a stable slug for a show based on date and venue.
    Format: YYYY-MM-DD-venue-name
    Used to name ticket-stub images in storage.
    """
    slug_parts = [show.date, slugify(show.venue)]
    return "-".join(filter(None, slug_parts))
