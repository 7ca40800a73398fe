# dataset.py
# Data preparation: scraped JSON dump -> normalized Dataset, and CSV export
# of one regency for human checking.
#
# Dump format (as written by the site scraper):
#   {"retrievedTime": ms,
#    "provinces": [{"provinceName": ..., "regencies": [
#        {"regencyName": ..., "schedules": [{"date", "month", "hour", "minute"}, ...]}]}]}
# Each regency's records arrive 8 per day, in label order.

from __future__ import annotations
import calendar
import csv
import json
import logging
from datetime import date
from pathlib import Path

from .errors import ValidationError
from .models import LABELS, TIMES_PER_DAY, Dataset, Province, Regency, ScheduleEntry

log = logging.getLogger(__name__)

LEAP_YEAR = 2024


def is_calendar_day(month: int, day: int) -> bool:
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(LEAP_YEAR, month)[1]

def _group_days(where: str, records) -> list[ScheduleEntry]:
    days: dict[tuple[int, int], list[tuple[int, int]]] = {}
    dropped = set()
    for r in records:
        key = (int(r["month"]), int(r["date"]))
        if not is_calendar_day(*key):
            # the source site lists e.g. 31 September
            dropped.add(key)
            continue
        days.setdefault(key, []).append((int(r["hour"]), int(r["minute"])))
    for month, day in sorted(dropped):
        log.warning("%s: dropping impossible day %d/%d", where, month, day)

    entries = []
    for (month, day), pairs in sorted(days.items()):
        if len(pairs) != TIMES_PER_DAY:
            raise ValidationError(
                f"{where} {month}/{day}: expected {TIMES_PER_DAY} times, got {len(pairs)}")
        entries.append(ScheduleEntry.from_pairs(month, day, pairs))
    return entries

def align_days(dataset: Dataset) -> Dataset:
    """Keep only the days every regency has, so all regencies share one stride."""
    regencies = [r for _, r in dataset.regencies()]
    if not regencies:
        return dataset
    common = set.intersection(*({(e.month, e.date) for e in r.schedules} for r in regencies))
    for p, r in dataset.regencies():
        extra = [(e.month, e.date) for e in r.schedules if (e.month, e.date) not in common]
        if extra:
            log.warning("%s/%s: dropping %d day(s) missing elsewhere: %s", p.name, r.name, len(extra),
                        ", ".join(f"{m}/{d}" for m, d in extra))
            r.schedules = [e for e in r.schedules if (e.month, e.date) in common]
    return dataset

def dataset_from_dump(dump: dict) -> Dataset:
    try:
        dataset = Dataset(int(dump["retrievedTime"]))
        for p in dump["provinces"]:
            province = Province(p["provinceName"])
            for r in p["regencies"]:
                where = f"{province.name}/{r['regencyName']}"
                province.regencies.append(Regency(r["regencyName"], _group_days(where, r["schedules"])))
            dataset.provinces.append(province)
    except ValidationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed schedule dump: missing or invalid field {e}") from None
    log.info("Loaded %d provinces, %d regencies", len(dataset.provinces), dataset.num_regencies())
    return align_days(dataset)

def load_source_json(path) -> Dataset:
    with open(path, encoding="utf-8") as f:
        try:
            dump = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path}: not valid JSON: {e}") from None
    return dataset_from_dump(dump)

def dataset_to_dump(dataset: Dataset) -> dict:
    return {
        "retrievedTime": dataset.timestamp,
        "provinces": [
            {
                "provinceName": p.name,
                "regencies": [
                    {
                        "regencyName": r.name,
                        "schedules": [
                            {"date": e.date, "month": e.month, "hour": t.hour, "minute": t.minute}
                            for e in r.schedules for t in e.times
                        ],
                    }
                    for r in p.regencies
                ],
            }
            for p in dataset.provinces
        ],
    }

def write_source_json(path, dataset: Dataset) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dataset_to_dump(dataset), f, ensure_ascii=False)


# ---- CSV writer (for human check) ----
def write_schedule_csv(path, province: str, regency: str, schedules, year: int | None = None,
                       retrieved=None) -> None:
    """One row per day. ``year`` only feeds the weekday column (defaults to a leap year)."""
    year = year or LEAP_YEAR
    with open(path, "w", newline="", encoding="utf-8-sig") as f:
        w = csv.writer(f)
        if retrieved is not None:
            w.writerow(["# Retrieved", retrieved.isoformat()])
        w.writerow(["# Province", province])
        w.writerow(["# Regency", regency])
        w.writerow(["Date", "Weekday", *LABELS])
        for e in schedules:
            try:
                d = date(year, e.month, e.date)
                iso, weekday = d.isoformat(), d.strftime("%A")
            except ValueError:   # Feb 29 in a common year
                iso, weekday = f"{year:04d}-{e.month:02d}-{e.date:02d}", ""
            w.writerow([iso, weekday, *(str(t) for t in e.times)])
    log.info("CSV written: %s", Path(path).resolve())
