import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, NavigableString

from tourdata import config
from tourdata.models import Show
from tourdata.utils.cascade import first_text, run_cascade
from tourdata.utils.dates import normalize_date, year_from_date

YEAR_CONTAINER_SELECTORS = [".setlist-header", ".setlist", ".setlist-container"]
VENUE_SELECTORS = [".setlist-venue", ".venue", "h4"]
LOCATION_SELECTORS = [".setlist-location", ".location", "h5", "span.location"]

SETLIST_PREFIXES = (
    "/setlists/phish-",
    "/setlists/trey-",
    "/setlists/mike-",
    "/setlists/page-",
    "/setlists/fish-",
)
# /setlists/phish-december-02-1983-harris-millis-cafeteria-...html
SETLIST_DATE_RE = re.compile(r"setlists/.*?-([a-z]+-\d{1,2}-\d{4})(?:-|\.html)", re.IGNORECASE)
TOUR_ID_RE = re.compile(r"/tour/(\d+)-")


@dataclass(frozen=True)
class TourInfo:
    id: str
    name: str
    url: str
    year: str
    show_count: int


def absolute_url(href):
    if not href:
        return ""
    if href.startswith("http"):
        return href
    return config.BASE_URL + href


def year_url(year):
    return config.YEAR_URL.format(year=year)


# ----------------------------------------------------------------------
# Year pages
# ----------------------------------------------------------------------

def _parse_year_container(element, year):
    link = element.select_one("a.setlist-date")
    if link is None:
        link = next((a for a in element.find_all("a") if str(year) in a.get_text()), None)
    if link is None:
        return None

    date_text = link.get_text(" ", strip=True)
    if not date_text:
        return None

    return Show(
        year=year,
        date=date_text,
        venue=first_text(element, VENUE_SELECTORS) or config.UNKNOWN_VENUE,
        city_state=first_text(element, LOCATION_SELECTORS) or config.UNKNOWN_LOCATION,
        net_link=absolute_url(link.get("href", "")),
    )


def _container_strategy(selector, year):
    def strategy(soup):
        containers = soup.select(selector)
        if not containers:
            return None
        shows = []
        for element in containers:
            show = _parse_year_container(element, year)
            if show:
                shows.append(show)
        return shows

    strategy.__name__ = f"containers {selector}"
    return strategy


def _year_anchor_strategy(year):
    """Last resort: any link mentioning the year in both href and text."""

    def strategy(soup):
        shows = []
        seen_hrefs = set()
        for link in soup.find_all("a", href=True):
            href = link["href"]
            text = link.get_text(" ", strip=True)
            if str(year) not in href or str(year) not in text or href in seen_hrefs:
                continue
            seen_hrefs.add(href)
            shows.append(Show(
                year=year,
                date=text,
                venue=config.UNKNOWN_VENUE,
                city_state=config.UNKNOWN_LOCATION,
                net_link=absolute_url(href),
            ))
        return shows or None

    strategy.__name__ = "year anchors"
    return strategy


def year_strategies(year):
    return [_container_strategy(s, year) for s in YEAR_CONTAINER_SELECTORS] + [_year_anchor_strategy(year)]


def extract_year_shows(html, year):
    """Parse a /setlists/phish-<year>.html page. Returns (shows, strategy_name)."""
    soup = BeautifulSoup(html or "", "html.parser")
    shows, strategy = run_cascade(soup, year_strategies(year))
    return tuple(shows), strategy


def scrape_year(fetcher, year, log_func=None):
    log = log_func or print
    url = year_url(year)
    shows, strategy = extract_year_shows(fetcher.get(url), year)
    if strategy is None:
        log(f"    {year}: no known page structure at {url}")
    else:
        log(f"    {year}: {len(shows)} shows via {strategy}")
    return shows


# ----------------------------------------------------------------------
# Tours
# ----------------------------------------------------------------------

def extract_tour_list(html):
    """Parse the /tour index into TourInfo rows."""
    soup = BeautifulSoup(html or "", "html.parser")
    tours = []
    for row in soup.select("table tbody tr"):
        cells = row.find_all("td")
        if len(cells) != 3:
            continue

        link = cells[0].find("a", href=True)
        if not link or "/tour/" not in link["href"]:
            continue
        href = link["href"]

        count_words = cells[2].get_text(strip=True).split()
        show_count = int(count_words[0]) if count_words and count_words[0].isdigit() else 0
        match = TOUR_ID_RE.search(href)

        tours.append(TourInfo(
            id=match.group(1) if match else "",
            name=link.get_text(strip=True),
            url=absolute_url(href),
            year=cells[1].get_text(strip=True),
            show_count=show_count,
        ))
    return tours


def _text_after(link):
    """First text following a link on the same entry, skipping line breaks."""
    for sibling in link.next_siblings:
        if isinstance(sibling, NavigableString):
            text = " ".join(sibling.split())
            if text:
                return text
        elif sibling.name != "br":
            break
    return ""


def _is_setlist_link(href):
    return any(prefix in href for prefix in SETLIST_PREFIXES)


def _parse_tour_link(link, tour):
    href = link["href"]
    venue = link.get_text().strip().split("\n")[0].strip()
    if not venue:
        return None

    match = SETLIST_DATE_RE.search(href)
    date = normalize_date(match.group(1), "iso") if match else ""

    tour_year = re.search(r"\d{4}", tour.year)
    return Show(
        year=year_from_date(date) or (int(tour_year.group()) if tour_year else None),
        date=date,
        venue=venue,
        city_state=_text_after(link),
        net_link=absolute_url(href),
        tour=tour.name,
    )


def _tour_links_strategy(scope_selector, tour):
    def strategy(soup):
        scopes = soup.select(scope_selector) if scope_selector else [soup]
        links = [
            link
            for scope in scopes
            for link in scope.find_all("a", href=True)
            if _is_setlist_link(link["href"])
        ]
        if not links:
            return None
        return [show for show in (_parse_tour_link(link, tour) for link in links) if show]

    strategy.__name__ = f"setlist links in {scope_selector or 'page'}"
    return strategy


def tour_strategies(tour):
    return [_tour_links_strategy(".tpcmainbox", tour), _tour_links_strategy(None, tour)]


def extract_tour_shows(html, tour):
    soup = BeautifulSoup(html or "", "html.parser")
    shows, strategy = run_cascade(soup, tour_strategies(tour))
    return tuple(shows), strategy


def scrape_tour_list(fetcher):
    return extract_tour_list(fetcher.get(config.TOUR_LIST_URL))


def scrape_tour(fetcher, tour, log_func=None):
    log = log_func or print
    shows, strategy = extract_tour_shows(fetcher.get(tour.url), tour)
    log(f"    {tour.name}: {len(shows)} shows (expected {tour.show_count}) via {strategy or 'nothing'}")
    return shows
