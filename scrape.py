#!/usr/bin/env python3
"""
Build the Phish show list behind the ticket-stub archive.

Commands:
- years           scrape phish.net year pages (resumable)
- tours           scrape phish.net tour pages (resumable)
- merge           combine show files into one deduplicated CSV/JSON
- convert         ticket CSV -> {years, tickets} JSON
- dates           rewrite a CSV's date column (ISO <-> "Month D, YYYY")
- import-tickets  bulk insert a ticket CSV into the ticket store
- export-tickets  dump the ticket store to CSV/JSON
- images          list or clean up images in a storage bucket
- upload-image    attach a ticket-stub image to a ticket
"""

import argparse
import mimetypes
import sys
import time
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

from tourdata import config
from tourdata.errors import TourDataError
from tourdata.fetch import Fetcher
from tourdata.models import Ticket
from tourdata.pipeline.io import (
    load_checkpoint,
    load_existing_status,
    load_shows_file,
    read_csv,
    rewrite_csv_dates,
    save_status,
    trim_log_by_time,
    write_json,
    write_outputs,
)
from tourdata.pipeline.merge import merge_shows, sort_shows
from tourdata.pipeline.runner import run_units
from tourdata.pipeline.validate import partition_valid
from tourdata.sources.phishnet import scrape_tour, scrape_tour_list, scrape_year
from tourdata.store import ImageStore, TicketStore, attach_image, get_client
from tourdata.utils.dates import infer_tour_name
from tourdata.utils.normalize import format_dates, normalize_shows


def finalize_shows(shows, log):
    """Dedupe, sort and drop invalid records."""
    merged = merge_shows(shows)
    if len(merged) < len(shows):
        log(f"  Collapsed {len(shows) - len(merged)} duplicate shows")

    valid, dropped = partition_valid(merged)
    for show, reason in dropped:
        log(f"  Dropped {show.date or '?'} {show.venue or '?'} ({reason}) from {show.net_link or show.tour or 'input'}", "WARNING")
    return valid


def log_summary(metrics, log):
    log("")
    log("=" * 60)
    log("SCRAPE SUMMARY")
    log("=" * 60)
    log(f"{'Unit':<32} {'Shows':>7} {'Errors':>7} {'Time':>10}")
    log("-" * 60)
    for name, m in metrics.items():
        time_str = f"{m.duration_ms:.0f}ms"
        log(f"{name[:32]:<32} {m.show_count:>7} {m.errors:>7} {time_str:>10}")
    log("-" * 60)
    total_shows = sum(m.show_count for m in metrics.values())
    total_errors = sum(m.errors for m in metrics.values())
    total_time = sum(m.duration_ms for m in metrics.values())
    log(f"{'TOTAL':<32} {total_shows:>7} {total_errors:>7} {total_time:.0f}ms")
    log("=" * 60)


def run_scrape(units, scrape_unit, key, csv_path, json_path, fields, log, run_timestamp):
    """Shared driver for the year and tour scrapers."""
    existing_status = load_existing_status()
    checkpoint = load_checkpoint(json_path, key, log)

    def flush(shows):
        write_outputs(sort_shows(shows), csv_path, json_path, fields)

    shows, metrics, statuses = run_units(
        units,
        scrape_unit,
        checkpoint,
        flush,
        run_timestamp,
        existing_status=existing_status,
        log_func=log,
    )

    log("\nProcessing shows...")
    final = finalize_shows(shows, log)
    # Replaces the unvalidated per-unit flushes, even with nothing left
    write_outputs(final, csv_path, json_path, fields)
    if final:
        log(f"Shows saved to {csv_path} and {json_path}")
    else:
        log("No shows were found across all units!", "ERROR")

    log_summary(metrics, log)
    log(f"\nTotal valid shows: {len(final)}")

    failed = [name for name, status in statuses.items() if not status["success"]]
    if failed:
        log(f"WARNING: Failed to scrape: {', '.join(failed)} (re-run to retry)", "ERROR")

    if not statuses:
        log("Every unit was already scraped; status file left unchanged")
        return 0

    units_status = dict(existing_status.get("units", {}))
    units_status.update(statuses)
    save_status({
        "last_run": run_timestamp,
        "all_success": all(s["success"] for s in statuses.values()),
        "any_success": any(s["success"] for s in statuses.values()),
        "total_shows": len(final),
        "units": units_status,
    })
    log(f"Status saved to {config.STATUS_PATH}")
    return 0


def cmd_years(args, log, run_timestamp):
    last_year = min(args.end, date.today().year + 1)
    if args.end > last_year:
        log(f"Skipping future years after {last_year}")

    fetcher = Fetcher(log_func=log)
    units = [(year, year) for year in range(args.start, last_year + 1)]
    log(f"Will process years from {args.start} to {last_year}")

    return run_scrape(
        units,
        lambda year: normalize_shows(scrape_year(fetcher, year, log)),
        "year",
        config.YEARS_CSV_PATH,
        config.YEARS_JSON_PATH,
        config.SHOW_FIELDS,
        log,
        run_timestamp,
    )


def cmd_tours(args, log, run_timestamp):
    fetcher = Fetcher(log_func=log)
    log(f"Fetching tour list from {config.TOUR_LIST_URL}...")
    tours = scrape_tour_list(fetcher)
    if not tours:
        log("No tours found. Cannot continue.", "ERROR")
        return 1

    units = []
    for tour in tours:
        if tour.show_count > 0:
            units.append((tour.name, tour))
        else:
            log(f"Skipping tour {tour.name!r} as it has 0 shows")
    log(f"Found {len(tours)} tours")

    return run_scrape(
        units,
        lambda tour: normalize_shows(scrape_tour(fetcher, tour, log)),
        "tour",
        config.TOURS_CSV_PATH,
        config.TOURS_JSON_PATH,
        config.TOUR_SHOW_FIELDS,
        log,
        run_timestamp,
    )


def expand_sources(paths):
    """Directories expand to their *_tour.json files."""
    files = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.glob("*_tour.json") if "future" not in p.name))
        else:
            files.append(path)
    return files


def cmd_merge(args, log, run_timestamp):
    collections = []
    for path in expand_sources(args.sources):
        try:
            shows = load_shows_file(path)
        except (OSError, ValueError) as e:
            log(f"  Error reading {path}: {e}", "ERROR")
            continue
        log(f"  {path}: {len(shows)} shows")
        collections.append(normalize_shows(shows))

    total = sum(len(c) for c in collections)
    merged = merge_shows(*collections)
    log(f"Merged {total} shows into {len(merged)} unique shows")

    fields = config.SHOW_FIELDS
    if args.with_tours:
        merged = tuple(show if show.tour else replace(show, tour=infer_tour_name(show.date)) for show in merged)
        fields = config.TOUR_SHOW_FIELDS

    final = format_dates(finalize_shows(merged, log), args.date_format)
    write_outputs(final, args.output_csv, args.output_json, fields)
    log(f"Wrote {len(final)} shows to {args.output_csv} and {args.output_json}")
    return 0


def cmd_convert(args, log, run_timestamp):
    tickets = read_csv(args.csv, Ticket)
    write_json(tickets, args.json, config.TICKET_FIELDS, layout="tickets")
    log(f"Converted {len(tickets)} tickets from {args.csv} to {args.json}")
    return 0


def cmd_dates(args, log, run_timestamp):
    unconverted = rewrite_csv_dates(args.csv, args.output, args.to)
    for value in unconverted:
        log(f"  Could not parse date {value!r}; left unchanged", "WARNING")
    log(f"Converted dates saved to {args.output}")
    return 0


def ticket_store(log):
    client = get_client()
    images = ImageStore(client)
    default_url = images.public_url(config.TICKET_IMAGES_BUCKET, config.DEFAULT_TICKET_IMAGE)
    return TicketStore(client, default_image_url=default_url, log_func=log), images


def cmd_import_tickets(args, log, run_timestamp):
    store, _ = ticket_store(log)
    count = store.import_csv(args.csv)
    log(f"Imported {count} tickets from {args.csv}")
    return 0


def cmd_export_tickets(args, log, run_timestamp):
    store, _ = ticket_store(log)
    if args.csv:
        log(f"Exported {store.export_csv(args.csv)} tickets to {args.csv}")
    log(f"Exported {store.export_json(args.json)} tickets to {args.json}")
    return 0


def cmd_images(args, log, run_timestamp):
    store, images = ticket_store(log)
    if args.action == "list":
        names = images.list(args.bucket)
        for name in names:
            log(f"  {name}")
        log(f"{len(names)} objects in {args.bucket}")
        return 0

    unused = images.unused(args.bucket, store.list())
    for name in unused:
        log(f"  unused: {name}")
    if args.action == "cleanup" and args.delete:
        images.delete(args.bucket, unused)
        log(f"Deleted {len(unused)} unused images from {args.bucket}")
    else:
        log(f"{len(unused)} unused images in {args.bucket}")
    return 0


def cmd_upload_image(args, log, run_timestamp):
    store, images = ticket_store(log)
    content_type = mimetypes.guess_type(args.file.name)[0] or "image/jpeg"
    data = args.file.read_bytes()
    if args.year:
        url = images.upload(config.YEAR_IMAGES_BUCKET, f"{args.target}{args.file.suffix}", data, content_type)
        log(f"Uploaded year image {url}")
    else:
        ticket = attach_image(store, images, args.target, data, args.file.suffix, content_type)
        log(f"Ticket {args.target} now points at {ticket.imageurl}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Phish show list and ticket archive tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("years", help="scrape phish.net year pages")
    p.add_argument("--start", type=int, default=config.START_YEAR)
    p.add_argument("--end", type=int, default=config.END_YEAR)
    p.set_defaults(func=cmd_years)

    p = sub.add_parser("tours", help="scrape phish.net tour pages")
    p.set_defaults(func=cmd_tours)

    p = sub.add_parser("merge", help="merge show files into one list")
    p.add_argument("sources", nargs="+", type=Path)
    p.add_argument("--output-csv", type=Path, default=config.MERGED_CSV_PATH)
    p.add_argument("--output-json", type=Path, default=config.MERGED_JSON_PATH)
    p.add_argument("--date-format", choices=["iso", "display"], default="iso")
    p.add_argument("--with-tours", action="store_true", help="add a tour column, inferring missing names")
    p.set_defaults(func=cmd_merge)

    p = sub.add_parser("convert", help="ticket CSV to {years, tickets} JSON")
    p.add_argument("csv", type=Path)
    p.add_argument("json", type=Path, nargs="?", default=config.TICKETS_JSON_PATH)
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("dates", help="rewrite the date column of a CSV")
    p.add_argument("csv", type=Path)
    p.add_argument("output", type=Path)
    p.add_argument("--to", choices=["iso", "display"], default="iso")
    p.set_defaults(func=cmd_dates)

    p = sub.add_parser("import-tickets", help="bulk insert tickets from CSV")
    p.add_argument("csv", type=Path)
    p.set_defaults(func=cmd_import_tickets)

    p = sub.add_parser("export-tickets", help="dump the ticket store")
    p.add_argument("--csv", type=Path)
    p.add_argument("--json", type=Path, default=config.TICKETS_JSON_PATH)
    p.set_defaults(func=cmd_export_tickets)

    p = sub.add_parser("images", help="inspect a storage bucket")
    p.add_argument("action", choices=["list", "unused", "cleanup"])
    p.add_argument("--bucket", default=config.TICKET_IMAGES_BUCKET)
    p.add_argument("--delete", action="store_true", help="with cleanup: actually delete unused images")
    p.set_defaults(func=cmd_images)

    p = sub.add_parser("upload-image", help="upload a ticket-stub (or --year) image")
    p.add_argument("target", help="ticket id, or year with --year")
    p.add_argument("file", type=Path)
    p.add_argument("--year", action="store_true")
    p.set_defaults(func=cmd_upload_image)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    run_timestamp = datetime.utcnow().isoformat() + "Z"
    log_lines = []

    def log(message, level="INFO"):
        """Log a message to both console and log buffer."""
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        log_entry = f"[{timestamp}] [{level}] {message}"
        print(message)
        log_lines.append(log_entry)

    # Abort before any network work if the output directory is unusable
    config.DATA_DIR.mkdir(parents=True, exist_ok=True)

    log(f"Starting {args.command} run at {run_timestamp}")
    start_time = time.time()
    try:
        exit_code = args.func(args, log, run_timestamp)
    except TourDataError as e:
        log(f"ERROR: {e}", "ERROR")
        exit_code = 1
    finally:
        log(f"Finished in {time.time() - start_time:.1f}s")
        existing_log = trim_log_by_time(config.LOG_PATH)
        log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in log_lines]
        with open(config.LOG_PATH, "w") as f:
            f.writelines(log_content)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
