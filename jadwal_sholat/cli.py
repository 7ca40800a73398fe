# cli.py
# Command line front end: build tables, inspect them, look up times.

from __future__ import annotations
import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from . import config, logging_config
from .calculate import METHOD_MAP, build_dataset, method_help, read_locations_csv
from .dataset import load_source_json, write_schedule_csv, write_source_json
from .encoder import write_files
from .errors import FormatError, NotFoundError, ValidationError
from .reader import ScheduleTable

log = logging.getLogger(__name__)

EXIT_NOT_FOUND = 1
EXIT_BAD_DATA = 2


# ---- input helpers ----
def ask_int(p, lo, hi):
    while True:
        try:
            v = int(input(f"{p} [{lo}-{hi}]: ").strip())
            if lo <= v <= hi:
                return v
        except ValueError:
            pass
        print("  ✖ Invalid input, try again.")

def choose(title: str, options: list[str]) -> str:
    print(f"\n{title}:")
    for i, name in enumerate(options, 1):
        print(f"  {i:3d}) {name}")
    return options[ask_int("Choose", 1, len(options)) - 1]

def print_times(times) -> None:
    for t in times:
        print(f"  {t.label:7s} {t}")


# ---- commands ----
def cmd_encode(args) -> int:
    dataset = load_source_json(args.source)
    write_files(dataset, args.output, None if args.no_metadata else args.metadata)
    return 0

def cmd_calculate(args) -> int:
    sites = read_locations_csv(args.locations)
    dataset = build_dataset(sites, args.year, args.method)
    write_source_json(args.output, dataset)
    log.info("Dataset written: %s", Path(args.output).resolve())
    return 0

def cmd_info(args) -> int:
    table = ScheduleTable.from_file(args.file)
    h = table.header
    print(f"Version   : {h.version}")
    print(f"Retrieved : {table.get_data_timestamp().isoformat()}")
    print(f"Provinces : {h.num_provinces}")
    print(f"Regencies : {h.num_regencies}")
    print(f"Days      : {table.schedule_count} ({table.record_count} records per regency)")
    return 0

def cmd_provinces(args) -> int:
    for name in ScheduleTable.from_file(args.file).get_provinces():
        print(name)
    return 0

def cmd_regencies(args) -> int:
    for name in ScheduleTable.from_file(args.file).get_regencies(args.province):
        print(name)
    return 0

def cmd_times(args) -> int:
    today = date.today()
    month = today.month if args.month is None else args.month
    day = today.day if args.date is None else args.date
    times = ScheduleTable.from_file(args.file).get_times(args.province, args.regency, month, day)
    print(f"{args.regency}, {args.province} - {day:02d}/{month:02d}")
    print_times(times)
    return 0

def cmd_schedules(args) -> int:
    table = ScheduleTable.from_file(args.file)
    schedules = table.get_schedules(args.province, args.regency)
    if args.csv:
        write_schedule_csv(args.csv, args.province, args.regency, schedules,
                           retrieved=table.get_data_timestamp())
        return 0
    for e in schedules:
        print(f"{e.date:02d}/{e.month:02d}  " + "  ".join(str(t) for t in e.times))
    return 0

def cmd_browse(args) -> int:
    table = ScheduleTable.from_file(args.file)
    print(f"=== Jadwal Sholat (data retrieved {table.get_data_timestamp():%d %B %Y}) ===")
    province = choose("Province", table.get_provinces())
    regency = choose("Regency", table.get_regencies(province))
    month = ask_int("\nMonth number", 1, 12)
    day = ask_int("Day of month", 1, 31)
    try:
        print_times(table.get_times(province, regency, month, day))
    except NotFoundError as e:
        print(f"  ✖ {e}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jadwal-sholat", description="Indonesian prayer time tables.")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encode", help="Encode a scraped JSON dump into a binary table")
    p.add_argument("source", type=Path)
    p.add_argument("-o", "--output", type=Path, default=config.DATA_PATH)
    p.add_argument("--metadata", type=Path, default=config.METADATA_PATH,
                   help="Metadata text index path (default: %(default)s)")
    p.add_argument("--no-metadata", action="store_true", help="Write the binary table only")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("calculate", help="Compute a JSON dump from a locations CSV with adhanpy")
    p.add_argument("locations", type=Path)
    p.add_argument("--year", type=int, default=date.today().year)
    p.add_argument("--method", choices=sorted(METHOD_MAP), default=config.DEFAULT_METHOD, help=method_help())
    p.add_argument("-o", "--output", type=Path, required=True)
    p.set_defaults(func=cmd_calculate)

    def table_parser(name, func, help):
        p = sub.add_parser(name, help=help)
        p.add_argument("-f", "--file", type=Path, default=config.DATA_PATH)
        p.set_defaults(func=func)
        return p

    table_parser("info", cmd_info, "Show the table header")
    table_parser("provinces", cmd_provinces, "List provinces")
    table_parser("regencies", cmd_regencies, "List regencies of a province").add_argument("province")
    p = table_parser("times", cmd_times, "Times of one day (default today)")
    p.add_argument("province")
    p.add_argument("regency")
    p.add_argument("--month", type=int)
    p.add_argument("--date", type=int)
    p = table_parser("schedules", cmd_schedules, "Every day of a regency")
    p.add_argument("province")
    p.add_argument("regency")
    p.add_argument("--csv", type=Path, help="Write a CSV instead of printing")
    table_parser("browse", cmd_browse, "Pick a province/regency interactively")
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging_config.configure(args.log_level)
    try:
        return args.func(args)
    except NotFoundError as e:
        print(f"✖ {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except (FormatError, ValidationError) as e:
        log.error("%s: %s", type(e).__name__, e)
        return EXIT_BAD_DATA
    except FileNotFoundError as e:
        log.error("File not found: %s", e.filename)
        return EXIT_BAD_DATA

if __name__ == "__main__":
    sys.exit(main())
