# calculate.py
# Build a normalized dataset from coordinates with adhanpy instead of
# scraping: one full year of 8 daily times per regency.

from __future__ import annotations
import csv
import logging
import time
from datetime import date, datetime, timedelta
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from adhanpy.PrayerTimes import PrayerTimes
from adhanpy.calculation import CalculationMethod

from . import config
from .errors import ValidationError
from .models import LABELS, Dataset, Province, Regency, ScheduleEntry

log = logging.getLogger(__name__)

METHODS = [
    ("KARACHI", "University of Islamic Sciences, Karachi (Fajr 18°, Isha 18°)"),
    ("MUSLIM_WORLD_LEAGUE", "MWL (Fajr 18°, Isha 17°)"),
    ("EGYPTIAN", "Egyptian General Authority (Fajr 19.5°, Isha 17.5°)"),
    ("MOON_SIGHTING_COMMITTEE", "Moonsighting Committee"),
    ("UMM_AL_QURA", "Umm al-Qurā (Isha = Maghrib + 90; often 120 in Ramadan)"),
    ("NORTH_AMERICA", "ISNA/North America (Fajr 15°, Isha 15°)"),
]
METHOD_MAP = {
    "KARACHI": CalculationMethod.KARACHI,
    "MUSLIM_WORLD_LEAGUE": CalculationMethod.MUSLIM_WORLD_LEAGUE,
    "EGYPTIAN": CalculationMethod.EGYPTIAN,
    "MOON_SIGHTING_COMMITTEE": CalculationMethod.MOON_SIGHTING_COMMITTEE,
    "UMM_AL_QURA": CalculationMethod.UMM_AL_QURA,
    "NORTH_AMERICA": CalculationMethod.NORTH_AMERICA,
}

# |longitude/15 - UTC offset| above this many hours is reported
MAX_ZONE_DRIFT_H = 1.5


class RegencySite(NamedTuple):
    province: str
    regency: str
    latitude: float
    longitude: float
    timezone: str = config.DEFAULT_TIMEZONE


# ---- helpers ----
def daterange(start: date, end: date):
    d = start
    one = timedelta(days=1)
    while d <= end:
        yield d
        d += one

def _zone(tzname: str) -> ZoneInfo:
    try:
        return ZoneInfo(tzname)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Not a recognized IANA zone: {tzname!r}") from None

def _method(method_key: str):
    try:
        return METHOD_MAP[method_key]
    except KeyError:
        raise ValidationError(
            f"Unknown calculation method {method_key!r}; choose one of {', '.join(METHOD_MAP)}") from None


def method_help() -> str:
    return "; ".join(f"{key}: {desc}" for key, desc in METHODS)


# ---- compute table (minutes from local midnight for 8 labels) ----
def check_zone(lat: float, lon: float, tzname: str, year: int) -> None:
    """Warn when a site's longitude is far from its zone's UTC offset."""
    offset = _zone(tzname).utcoffset(datetime(year, 1, 1)).total_seconds() / 3600
    if abs(lon / 15 - offset) > MAX_ZONE_DRIFT_H:
        log.warning("(%s, %s) is %.1f h of solar time away from %s (UTC%+g); wrong timezone?",
                    lat, lon, lon / 15 - offset, tzname, offset)


def day_minutes(pt, offsets: dict[str, int] | None = None) -> list[int]:
    offsets = offsets or {}
    day = pt.dhuhr.date()
    base = [
        pt.fajr + timedelta(minutes=config.IMSYA_OFFSET_MIN),
        pt.fajr,
        pt.sunrise,
        pt.sunrise + timedelta(minutes=config.DUHA_OFFSET_MIN),
        pt.dhuhr,
        pt.asr,
        pt.maghrib,
        pt.isha,
    ]
    t = []
    for label, dt in zip(LABELS, base):
        dt = dt + timedelta(minutes=offsets.get(label, 0))
        # wall-clock minutes from the day's midnight; may fall outside 0..1439
        m = (dt.date() - day).days * 1440 + dt.hour * 60 + dt.minute
        if not 0 <= m <= 1439:
            log.warning("%s for %s lands at %s, outside that day; clamped", label, day, dt.strftime("%Y-%m-%d %H:%M"))
        t.append(max(0, min(1439, m)))
    # labels are positional: keep the day non-decreasing
    for i in range(1, len(t)):
        if t[i] < t[i - 1]:
            t[i] = t[i - 1]
    return t

def compute_schedules(lat: float, lon: float, tzname: str, year: int,
                      method_key: str = config.DEFAULT_METHOD,
                      offsets: dict[str, int] | None = None) -> list[ScheduleEntry]:
    tz = _zone(tzname)
    method = _method(method_key)
    check_zone(lat, lon, tzname, year)
    rows = []
    for d in daterange(date(year, 1, 1), date(year, 12, 31)):
        pt = PrayerTimes((lat, lon), datetime(d.year, d.month, d.day), method, time_zone=tz)
        rows.append(ScheduleEntry.from_pairs(d.month, d.day, [divmod(m, 60) for m in day_minutes(pt, offsets)]))
    return rows

def build_dataset(sites, year: int, method_key: str = config.DEFAULT_METHOD,
                  offsets: dict[str, int] | None = None, timestamp: int | None = None) -> Dataset:
    """Sites keep their order; provinces appear in order of first mention."""
    _method(method_key)
    dataset = Dataset(int(time.time() * 1000) if timestamp is None else timestamp)
    by_name: dict[str, Province] = {}
    for site in sites:
        province = by_name.get(site.province)
        if province is None:
            province = by_name[site.province] = Province(site.province)
            dataset.provinces.append(province)
        log.debug("Computing %s/%s (%s, %s)", site.province, site.regency, site.latitude, site.longitude)
        schedules = compute_schedules(site.latitude, site.longitude, site.timezone, year, method_key, offsets)
        province.regencies.append(Regency(site.regency, schedules))
    log.info("Computed %d regencies in %d provinces for %d (%s)",
             dataset.num_regencies(), len(dataset.provinces), year, method_key)
    return dataset

def read_locations_csv(path) -> list[RegencySite]:
    """Columns: province, regency, latitude, longitude[, timezone]."""
    sites = []
    with open(path, newline="", encoding="utf-8-sig") as f:
        for n, row in enumerate(csv.DictReader(f), 2):
            try:
                sites.append(RegencySite(
                    row["province"].strip(),
                    row["regency"].strip(),
                    float(row["latitude"]),
                    float(row["longitude"]),
                    (row.get("timezone") or "").strip() or config.DEFAULT_TIMEZONE,
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f"{path}: bad location row {n}: {e}") from None
    return sites
