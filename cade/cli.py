"""
CADE Command Line Interface (CLI)
=================================

This file provides the interactive terminal program you run like:

    python -m cade.cli                       (bundled sample catalog)
    python -m cade.cli --catalog campaigns.json

It demonstrates:
- Argument parsing (argparse), with defaults taken from the environment
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to session methods (filters, sort, search, more)

The CLI DOES NOT modify your catalog file. It only loads it once and works
on in-memory views of the records.
"""

from __future__ import annotations
from datetime import datetime
from typing import Iterable, List, Optional
import argparse
import asyncio
import shlex

import structlog

from .config import EngineConfig
from .engine import DiscoverySession
from .filters import ALL_LOCATIONS
from .formatting import format_compact, format_currency, format_time_remaining
from .loader import load_catalog, load_sample_catalog
from .models import CATEGORIES, STATUSES, Campaign
from .logging_setup import configure_logging
from .sorting import ALIASES, SORT_KEYS
from .suggest import suggest

logger = structlog.get_logger(__name__)

HELP_TEXT = """
CADE commands (grouped)
----------------------

1) View / Inspect
   help
   show                             (current page of results)
   more                             (load the next page)
   stats
   values <field>                   (example: values location)

2) Filtering (multi-select filters toggle on/off)
   filter category <category>       (example: filter category medical)
   filter status <status>           (example: filter status active)
   filter location "<City/State>"   (example: filter location "Colombo")
   filter funding <min> <max>       (example: filter funding 0 500000)
   search "<text>"                  (example: search "creator:anura")
   search                           (clears the search box)
   clear                            (reset filters, keep the search text)

3) Sorting
   sort <key> [asc|desc]            (example: sort most_funded desc)
   flip                             (reverse the direction)

4) Suggestions / Export
   suggest "<text>"                 (example: suggest "med")
   export csv "<out.csv>"           (example: export csv "results.csv")
   export json "<out.json>"

5) Exit
   quit
"""


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"--now must be an ISO timestamp, got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="cade", description="Campaign discovery engine (interactive)")
    ap.add_argument("--catalog", help="Catalog file (.json, .csv, .xlsx). Default: bundled sample")
    ap.add_argument("--now", type=_parse_now, help="Reference time (ISO), e.g. 2026-01-15T12:00:00")
    ap.add_argument("--page-size", type=int, help="Campaigns per page")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CADE CLI.

    1) Load configuration and catalog
    2) Create a discovery session
    3) Start an interactive REPL
    """
    args = build_parser().parse_args(argv)
    env_cfg = EngineConfig.from_env()
    config = EngineConfig(
        page_size=args.page_size or env_cfg.page_size,
        load_more_delay=env_cfg.load_more_delay,
        log_level=args.log_level or env_cfg.log_level,
        catalog_path=args.catalog or env_cfg.catalog_path,
    )
    configure_logging(config.log_level)

    print("Loading catalog...")
    if config.catalog_path:
        catalog = load_catalog(config.catalog_path, now=args.now)
    else:
        catalog = load_sample_catalog(now=args.now)
    session = DiscoverySession(catalog=catalog, config=config, now=args.now)
    logger.info("Session started", campaigns=len(catalog), page_size=config.page_size)

    print(f"Loaded {len(catalog)} campaigns. Type 'help' for commands.")
    while True:
        try:
            line = input("cade> ")
            stripped = line.strip()
            if stripped:
                cmd0 = stripped.split()[0].lower()
                if cmd0 not in ("help", "show", "values", "stats", "suggest", "quit"):
                    session.command_log.append(stripped)
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(session, line)
        except (ValueError, OSError) as e:
            print(f"Error: {e}")


def handle(session: DiscoverySession, line: str) -> None:
    """Handle one CLI command line.

    This parses the command and calls the appropriate session method.
    """
    # allow search text without shell-style quoting
    lowered = line.strip().lower()
    if lowered == "search" or lowered.startswith("search "):
        query = line.strip()[len("search"):].strip()
        if len(query) >= 2 and query[0] in ('"', "'") and query[-1] == query[0]:
            query = query[1:-1]
        session.set_search_query(query)
        _print_summary(session)
        return

    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP_TEXT)
        return

    if cmd == "stats":
        v = session.view()
        print(f"{v.total_matched} projects found | showing {len(v.displayed)} | page {v.page}")
        print(f"Active filters: {v.active_filter_count} | Sort: {session.sort.sort_by} ({session.sort.direction})")
        print(f"Categories: {len(session.idx.by_category)} | Locations: {len(session.idx.by_location)} | Creators: {len(session.idx.creators)}")
        return

    if cmd == "show":
        v = session.view()
        if v.is_empty:
            print("No projects found. Try adjusting your filters or search.")
            return
        _print_rows(v.displayed, session)
        if v.has_more:
            print(f"... {v.total_matched - len(v.displayed)} more (type 'more')")
        return

    if cmd == "more":
        if asyncio.run(session.load_more_async()):
            _print_summary(session)
        else:
            print("No more projects to load.")
        return

    if cmd == "values":
        field = parts[1].lower() if len(parts) >= 2 else ""
        if field == "category":
            vals = list(CATEGORIES)
        elif field == "status":
            vals = list(STATUSES)
        elif field == "location":
            vals = [ALL_LOCATIONS] + sorted(session.idx.by_location.keys())
        elif field == "creator":
            vals = list(session.idx.creators)
        elif field == "sort":
            vals = list(SORT_KEYS.keys()) + list(ALIASES.keys())
        else:
            raise ValueError("values field must be: category | status | location | creator | sort")
        for v in vals:
            print(v)
        return

    if cmd == "filter":
        if len(parts) < 3:
            raise ValueError('Usage: filter category|status|location|funding <value>')
        kind = parts[1].lower()
        if kind == "category":
            session.toggle_category(parts[2].lower())
        elif kind == "status":
            session.toggle_status(parts[2].lower())
        elif kind == "location":
            session.set_location(parts[2])
        elif kind == "funding":
            if len(parts) < 4:
                raise ValueError("Usage: filter funding <min> <max>")
            session.set_funding_range(float(parts[2]), float(parts[3]))
        else:
            raise ValueError("filter kind must be: category, status, location, funding")
        _print_summary(session)
        return

    if cmd == "clear":
        session.clear_all_filters()
        print("Filters cleared (search text kept).")
        _print_summary(session)
        return

    if cmd == "sort":
        if len(parts) < 2:
            raise ValueError("Usage: sort <key> [asc|desc]")
        direction = parts[2].lower() if len(parts) >= 3 else None
        session.set_sort(parts[1], direction)
        if parts[1].lower() not in SORT_KEYS and parts[1].lower() not in ALIASES:
            print(f"Unknown sort key {parts[1]!r}; keeping catalog order.")
        _print_summary(session)
        return

    if cmd == "flip":
        session.flip_direction()
        _print_summary(session)
        return

    if cmd == "suggest":
        text = parts[1] if len(parts) >= 2 else ""
        found = suggest(session.catalog, text, index=session.idx)
        if not found:
            print("No suggestions.")
        for s in found:
            print(f"[{s.kind}] {s.title}" + (f" | {s.subtitle}" if s.subtitle else ""))
        return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt = parts[1].lower()
        out_path = parts[2]
        if fmt == "csv":
            n = session.export_csv(out_path)
        elif fmt == "json":
            n = session.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {n} campaigns to {out_path}")
        return

    print("Unknown command. Type 'help'.")


def _print_summary(session: DiscoverySession) -> None:
    v = session.view()
    badge = f" | {v.active_filter_count} filter(s) active" if v.active_filter_count else ""
    print(f"{v.total_matched} projects found{badge} | showing {len(v.displayed)}")


def _print_rows(rows: Iterable[Campaign], session: DiscoverySession) -> None:
    now = session.now_or_wall_clock()
    for c in rows:
        flags = "".join(f" [{name}]" for name, on in (("featured", c.featured), ("trending", c.trending), ("urgent", c.urgent)) if on)
        where = c.location.city if c.location and c.location.city else "-"
        print(
            f"[{c.id}] {c.title} | {c.category} | {where} | "
            f"{format_currency(c.current_amount, c.currency)} of {format_compact(c.funding_goal)} "
            f"({c.percent_funded:.0f}%) | {c.donor_count} donors | "
            f"{format_time_remaining(c.end_date, now)}{flags}"
        )


if __name__ == "__main__":
    main()
