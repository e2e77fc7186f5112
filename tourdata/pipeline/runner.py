import time
import traceback

from tourdata.errors import FetchError
from tourdata.pipeline.metrics import UnitMetrics


def run_units(units, scrape_unit, checkpoint, flush, run_timestamp, existing_status=None, log_func=None):
    """
    Scrape units of work (years or tours) one at a time.

    units: list of (key, unit) pairs, in processing order
    scrape_unit: unit -> tuple of shows
    checkpoint: (shows, processed_keys) from a previous run
    flush: called with the accumulated shows after every unit that produced any

    Units whose key is already processed are skipped. A failing unit is logged
    and recorded in its status; the run continues with the next one.
    Returns (shows, metrics_by_name, status_by_name).
    """
    log = log_func or (lambda message, level="INFO": print(message))
    shows, processed = checkpoint
    existing_units = (existing_status or {}).get("units", {})

    metrics = {}
    statuses = {}

    pending = [(key, unit) for key, unit in units if key not in processed]
    log(f"Resuming with {len(shows)} shows; {len(pending)} of {len(units)} units to process")

    for key, unit in pending:
        name = str(key)
        log(f"Scraping {name}...")
        unit_metrics = UnitMetrics(name=name)
        start_time = time.time()

        unit_status = {
            "last_run": run_timestamp,
            "success": False,
            "show_count": 0,
            "error": None,
        }
        previous = existing_units.get(name, {})
        if previous.get("last_success"):
            unit_status["last_success"] = previous["last_success"]
            unit_status["last_success_count"] = previous.get("last_success_count", 0)

        try:
            unit_shows = tuple(scrape_unit(unit))
        except FetchError as e:
            unit_metrics.errors = 1
            unit_metrics.error_messages.append(str(e))
            unit_status["error"] = str(e)
            log(f"  ERROR: Skipping {name} after fetch failure: {e} (url: {e.url})", "ERROR")
        except Exception as e:
            error_trace = traceback.format_exc()
            unit_metrics.errors = 1
            unit_metrics.error_messages.append(str(e))
            unit_status["error"] = str(e)
            unit_status["error_trace"] = error_trace
            log(f"  ERROR: Failed to scrape {name}: {e}", "ERROR")
            log(f"  Traceback:\n{error_trace}", "ERROR")
        else:
            unit_metrics.show_count = len(unit_shows)
            unit_status["success"] = True
            unit_status["show_count"] = len(unit_shows)
            unit_status["last_success"] = run_timestamp
            unit_status["last_success_count"] = len(unit_shows)

            if unit_shows:
                shows = shows + unit_shows
                log(f"  Added {len(unit_shows)} shows from {name}. Total so far: {len(shows)}")
                flush(shows)
            else:
                log(f"  No shows found for {name}", "WARNING")

        unit_metrics.duration_ms = (time.time() - start_time) * 1000
        metrics[name] = unit_metrics
        statuses[name] = unit_status

    return shows, metrics, statuses
