class TourDataError(Exception):
    """Base class for errors raised by the tour data tools."""


class FetchError(TourDataError):
    """A page could not be fetched after exhausting retries."""

    def __init__(self, url, message):
        super().__init__(f"{url}: {message}")
        self.url = url


class ValidationError(TourDataError):
    """A record is missing a required field or carries an unusable value."""


class TicketNotFound(TourDataError):
    def __init__(self, ticket_id):
        super().__init__(f"Ticket {ticket_id} not found")
        self.ticket_id = ticket_id
