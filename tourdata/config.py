import os
from datetime import date
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.environ.get("TOURDATA_DATA_DIR", REPO_ROOT / "data"))
YEARS_CSV_PATH = DATA_DIR / "phish_tours_comprehensive.csv"
YEARS_JSON_PATH = DATA_DIR / "phish_tours_comprehensive.json"
TOURS_CSV_PATH = DATA_DIR / "phish_tours_complete.csv"
TOURS_JSON_PATH = DATA_DIR / "phish_tours_complete.json"
MERGED_CSV_PATH = DATA_DIR / "phish_tours.csv"
MERGED_JSON_PATH = DATA_DIR / "phish_tours.json"
TICKETS_JSON_PATH = DATA_DIR / "tickets.json"
STATUS_PATH = DATA_DIR / "scrape-status.json"
LOG_PATH = DATA_DIR / "scrape-log.txt"
LOG_RETENTION_DAYS = 14

BASE_URL = "https://phish.net"
YEAR_URL = BASE_URL + "/setlists/phish-{year}.html"
TOUR_LIST_URL = BASE_URL + "/tour"
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}
REQUEST_TIMEOUT = 30

REQUEST_DELAY = 5.0
RETRY_DELAY = 10.0
BACKOFF_FACTOR = 1.5
MAX_RETRIES = 3

START_YEAR = 1983
END_YEAR = int(os.environ.get("TOURDATA_END_YEAR", date.today().year))

SHOW_FIELDS = ["year", "date", "venue", "city_state", "net_link"]
TOUR_SHOW_FIELDS = ["year", "tour", "date", "venue", "city_state", "net_link"]
TICKET_FIELDS = ["year", "date", "venue", "city_state", "imageurl", "net_link"]
REQUIRED_FIELDS = ["date", "venue"]
TICKET_REQUIRED_FIELDS = ["year", "date", "venue", "city_state"]

UNKNOWN_VENUE = "Unknown Venue"
UNKNOWN_LOCATION = "Unknown Location"

SUPABASE_URL = os.environ.get("SUPABASE_URL") or os.environ.get("NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
TICKETS_TABLE = "ticket_stubs"
TICKETS_PAGE_SIZE = 1000
TICKET_IMAGES_BUCKET = "ticket-images"
YEAR_IMAGES_BUCKET = "year-images"
DEFAULT_TICKET_IMAGE = "default-ticket.jpg"
