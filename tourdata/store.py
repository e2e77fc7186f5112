"""
Hosted ticket store (Supabase table) and image buckets (Supabase storage).
"""

import re
from dataclasses import replace

from supabase import create_client

from tourdata import config
from tourdata.errors import TicketNotFound, TourDataError, ValidationError
from tourdata.models import Ticket
from tourdata.pipeline.io import read_csv, write_csv, write_json
from tourdata.pipeline.validate import check_show
from tourdata.utils.shows import generate_slug

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Supabase keeps this marker object in otherwise empty folders
PLACEHOLDER_OBJECT = ".emptyFolderPlaceholder"


def get_client():
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        raise TourDataError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY environment variables")
    return create_client(config.SUPABASE_URL, config.SUPABASE_KEY)


def check_ticket(ticket):
    check_show(ticket, config.TICKET_REQUIRED_FIELDS)
    if not ISO_DATE_RE.match(ticket.date):
        raise ValidationError(f"expected YYYY-MM-DD date, got {ticket.date!r}")


class TicketStore:
    """
    CRUD over the ticket table.
    list() reads every row in pages and caches the result; any mutation
    drops the cache so the next read goes back to the table.
    """

    def __init__(self, client, default_image_url=None, log_func=None):
        self.client = client
        self.table = config.TICKETS_TABLE
        self.page_size = config.TICKETS_PAGE_SIZE
        self.default_image_url = default_image_url
        self.log = log_func or print
        self._cache = None

    def _query(self):
        return self.client.table(self.table)

    def _invalidate(self):
        self._cache = None

    def _fetch_all(self):
        rows = []
        start = 0
        while True:
            resp = (
                self._query()
                .select("*")
                .order("date")
                .range(start, start + self.page_size - 1)
                .execute()
            )
            batch = resp.data or []
            rows.extend(batch)
            if len(batch) < self.page_size:
                break
            start += self.page_size
        return tuple(Ticket.from_dict(row) for row in rows)

    def list(self, year=None):
        if self._cache is None:
            self._cache = self._fetch_all()
        if year is None:
            return self._cache
        return tuple(t for t in self._cache if t.year == int(year))

    def years(self):
        return sorted({t.year for t in self.list() if t.year}, reverse=True)

    def get(self, ticket_id):
        resp = self._query().select("*").eq("id", ticket_id).execute()
        if not resp.data:
            raise TicketNotFound(ticket_id)
        return Ticket.from_dict(resp.data[0])

    def _prepare(self, ticket):
        check_ticket(ticket)
        if not ticket.imageurl and self.default_image_url:
            ticket = replace(ticket, imageurl=self.default_image_url)
        return ticket.to_record()

    def create(self, ticket):
        record = self._prepare(ticket)
        resp = self._query().insert(record).execute()
        self._invalidate()
        return Ticket.from_dict(resp.data[0]) if resp.data else replace(ticket, **record)

    def create_many(self, tickets):
        records = [self._prepare(ticket) for ticket in tickets]
        for start in range(0, len(records), self.page_size):
            self._query().insert(records[start:start + self.page_size]).execute()
        self._invalidate()
        return len(records)

    def update(self, ticket_id, ticket):
        record = self._prepare(ticket)
        resp = self._query().update(record).eq("id", ticket_id).execute()
        self._invalidate()
        if not resp.data:
            raise TicketNotFound(ticket_id)
        return Ticket.from_dict(resp.data[0])

    def delete(self, ticket_id):
        existing = self.get(ticket_id)
        self._query().delete().eq("id", ticket_id).execute()
        self._invalidate()
        return existing

    def import_csv(self, path):
        """
        Bulk insert tickets from a CSV.
        Rows without year/date/venue/city_state or with a non-ISO date are skipped.
        """
        valid = []
        for line_no, ticket in enumerate(read_csv(path, Ticket), start=2):
            try:
                check_ticket(ticket)
            except ValidationError as e:
                self.log(f"  Skipping {path.name} line {line_no}: {e}")
                continue
            valid.append(ticket)

        if not valid:
            raise ValidationError(f"No valid tickets found in {path}")
        return self.create_many(valid)

    def export_csv(self, path):
        tickets = self.list()
        write_csv(tickets, path, config.TICKET_FIELDS)
        return len(tickets)

    def export_json(self, path):
        tickets = self.list()
        write_json(tickets, path, ["id"] + config.TICKET_FIELDS, layout="tickets")
        return len(tickets)


class ImageStore:
    """Ticket and year images kept in storage buckets."""

    def __init__(self, client):
        self.client = client

    def _bucket(self, bucket):
        return self.client.storage.from_(bucket)

    def list(self, bucket):
        items = self._bucket(bucket).list() or []
        return [item["name"] for item in items if item.get("name") and item["name"] != PLACEHOLDER_OBJECT]

    def upload(self, bucket, path, data, content_type="image/jpeg"):
        self._bucket(bucket).upload(path, data, {"content-type": content_type, "upsert": "true"})
        return self.public_url(bucket, path)

    def delete(self, bucket, paths):
        paths = list(paths)
        if paths:
            self._bucket(bucket).remove(paths)
        return paths

    def public_url(self, bucket, path):
        return self._bucket(bucket).get_public_url(path)

    def unused(self, bucket, tickets):
        """Objects in the bucket that no ticket's imageurl points at."""
        referenced = {
            t.imageurl.split("?")[0].rsplit("/", 1)[-1]
            for t in tickets
            if t.imageurl
        }
        return [
            name
            for name in self.list(bucket)
            if name not in referenced and name != config.DEFAULT_TICKET_IMAGE
        ]


def image_name_for(ticket, suffix=".jpg"):
    return generate_slug(ticket) + suffix


def attach_image(tickets, images, ticket_id, data, suffix=".jpg", content_type="image/jpeg"):
    """Upload a ticket-stub image and point the ticket at it."""
    ticket = tickets.get(ticket_id)
    url = images.upload(config.TICKET_IMAGES_BUCKET, image_name_for(ticket, suffix), data, content_type)
    return tickets.update(ticket_id, replace(ticket, imageurl=url))
