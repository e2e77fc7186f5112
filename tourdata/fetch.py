import time

import requests

from tourdata import config
from tourdata.errors import FetchError


def backoff_delay(attempt):
    """Seconds to wait before retry number `attempt` (1-based): 10s, 15s, 22.5s..."""
    return config.RETRY_DELAY * (config.BACKOFF_FACTOR ** (attempt - 1))


class Fetcher:
    """
    Sequential, rate-limited HTML fetcher.
    One request at a time; after a successful request the next one waits
    `request_delay` seconds. Failures are retried with exponential backoff.
    """

    def __init__(self, session=None, request_delay=None, max_retries=None, log_func=None):
        self.session = session or requests.Session()
        self.session.headers.update(config.REQUEST_HEADERS)
        self.request_delay = config.REQUEST_DELAY if request_delay is None else request_delay
        self.max_retries = config.MAX_RETRIES if max_retries is None else max_retries
        self.log = log_func or print
        self._delay_next = False

    def _pace(self):
        if self._delay_next and self.request_delay > 0:
            time.sleep(self.request_delay)
        self._delay_next = False

    def get(self, url):
        """Return the page body for `url`, or raise FetchError."""
        self._pace()

        last_error = None
        for attempt in range(self.max_retries + 1):
            if attempt:
                wait = backoff_delay(attempt)
                self.log(f"    Retry {attempt}/{self.max_retries} for {url} in {wait:.1f}s ({last_error})")
                time.sleep(wait)

            try:
                resp = self.session.get(url, timeout=config.REQUEST_TIMEOUT)
            except requests.exceptions.RequestException as e:
                last_error = type(e).__name__
                continue

            if resp.status_code == 200:
                self._delay_next = True
                return resp.text
            if resp.status_code == 404:
                raise FetchError(url, "404 Not Found")
            last_error = f"HTTP {resp.status_code}"

        raise FetchError(url, f"giving up after {self.max_retries + 1} attempts ({last_error})")
