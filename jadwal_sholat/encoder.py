# encoder.py
# Dataset -> AWQTSHLT binary table (+ the lighter metadata text index).
# Everything is validated before the first byte is produced.

from __future__ import annotations
import calendar
import logging
import os
import struct
import tempfile
from pathlib import Path

from . import layout
from .errors import ValidationError
from .metadata import dump_metadata
from .models import LABELS, TIMES_PER_DAY, Dataset

log = logging.getLogger(__name__)

LEAP_YEAR = 2024  # any leap year; Feb 29 is a valid day in the table


# ---- validation ----
def _utf8(name: str, what: str) -> bytes:
    if not isinstance(name, str) or not name:
        raise ValidationError(f"{what} name must be a non-empty string: {name!r}")
    raw = name.encode("utf-8")
    if len(raw) > layout.MAX_NAME_BYTES:
        raise ValidationError(
            f"{what} name is too long: {len(raw)} > {layout.MAX_NAME_BYTES} bytes ({name!r})")
    if "\t" in name or "\n" in name:
        raise ValidationError(f"{what} name contains a tab or newline: {name!r}")
    return raw

def _is_int(*values) -> bool:
    return all(isinstance(v, int) and not isinstance(v, bool) for v in values)

def _check_entry(where: str, entry) -> None:
    if not _is_int(entry.month, entry.date):
        raise ValidationError(f"{where}: month/date must be integers: {entry.month!r}/{entry.date!r}")
    if not 1 <= entry.month <= 12:
        raise ValidationError(f"{where}: month out of range: {entry.month}")
    last = calendar.monthrange(LEAP_YEAR, entry.month)[1]
    if not 1 <= entry.date <= last:
        raise ValidationError(f"{where}: no such day {entry.month}/{entry.date}")
    if len(entry.times) != TIMES_PER_DAY:
        raise ValidationError(
            f"{where} {entry.month}/{entry.date}: expected {TIMES_PER_DAY} times, got {len(entry.times)}")
    prev = -1
    for i, t in enumerate(entry.times):
        if t.label != LABELS[i]:
            raise ValidationError(
                f"{where} {entry.month}/{entry.date}: time #{i} is {t.label!r}, expected {LABELS[i]!r}")
        if not _is_int(t.hour, t.minute):
            raise ValidationError(
                f"{where} {entry.month}/{entry.date}: {t.label} must be integers: {t.hour!r}:{t.minute!r}")
        if not (0 <= t.hour <= 23 and 0 <= t.minute <= 59):
            raise ValidationError(
                f"{where} {entry.month}/{entry.date}: {t.label} out of range: {t.hour}:{t.minute}")
        # labels are positional and the table is sorted by time within a day
        if t.minutes() < prev:
            raise ValidationError(
                f"{where} {entry.month}/{entry.date}: {t.label} {t} is earlier than the previous time")
        prev = t.minutes()

def validate(dataset: Dataset) -> None:
    """Raise ValidationError on the first invariant the dataset breaks."""
    if not isinstance(dataset.timestamp, int) or not 0 <= dataset.timestamp <= layout.MAX_TIMESTAMP:
        raise ValidationError(f"Timestamp out of range: {dataset.timestamp!r}")

    provinces = dataset.provinces
    if len(provinces) > layout.MAX_PROVINCES:
        raise ValidationError(f"Too many provinces: {len(provinces)} > {layout.MAX_PROVINCES}")
    total = dataset.num_regencies()
    if total > layout.MAX_REGENCIES:
        raise ValidationError(f"Too many regencies: {total} > {layout.MAX_REGENCIES}")

    days = None
    seen_provinces = set()
    names_size = 0
    for province in provinces:
        raw = _utf8(province.name, "Province")
        if ":" in province.name:
            raise ValidationError(f"Province name contains ':': {province.name!r}")
        if province.name in seen_provinces:
            raise ValidationError(f"Duplicate province: {province.name!r}")
        seen_provinces.add(province.name)
        if len(province.regencies) > layout.MAX_REGENCIES_PER_PROVINCE:
            raise ValidationError(
                f"Too many regencies in {province.name}: "
                f"{len(province.regencies)} > {layout.MAX_REGENCIES_PER_PROVINCE}")
        # provinceNameIndex entries are u16 offsets into the name table
        if names_size > layout.MAX_INDEX:
            raise ValidationError(f"Province name index is too big: {names_size} > {layout.MAX_INDEX}")
        names_size += 1 + len(raw) + 1

        seen_regencies = set()
        for regency in province.regencies:
            names_size += 1 + len(_utf8(regency.name, "Regency"))
            if regency.name in seen_regencies:
                raise ValidationError(f"Duplicate regency in {province.name}: {regency.name!r}")
            seen_regencies.add(regency.name)

            where = f"{province.name}/{regency.name}"
            keys = [(e.month, e.date) for e in regency.schedules]
            if days is None:
                days = keys
                if len(days) * TIMES_PER_DAY > layout.MAX_RECORDS:
                    raise ValidationError(
                        f"Too many schedules: {len(days)} days * {TIMES_PER_DAY} > {layout.MAX_RECORDS}")
            elif keys != days:
                raise ValidationError(
                    f"{where}: schedule days differ from the first regency "
                    f"({len(keys)} vs {len(days)} days)")
            prev_key = (0, 0)
            for entry in regency.schedules:
                _check_entry(where, entry)
                if (entry.month, entry.date) <= prev_key:
                    raise ValidationError(
                        f"{where}: days not strictly ascending at {entry.month}/{entry.date}")
                prev_key = (entry.month, entry.date)


# ---- serialization ----
def encode_binary(dataset: Dataset) -> bytes:
    validate(dataset)

    provinces = dataset.provinces
    num_provinces = len(provinces)
    num_regencies = dataset.num_regencies()
    sample = next(dataset.regencies(), None)
    num_days = len(sample[1].schedules) if sample else 0
    num_schedules = num_days * TIMES_PER_DAY
    names_offset = layout.names_offset_for(num_provinces, num_regencies, num_schedules)

    name_table = bytearray()
    name_index = []
    schedule_index = []
    first = 0
    for province in provinces:
        name_index.append(len(name_table))
        schedule_index.append(first)
        first += len(province.regencies)
        raw = province.name.encode("utf-8")
        name_table += struct.pack("<B", len(raw)) + raw
        name_table += struct.pack("<B", len(province.regencies))
        for regency in province.regencies:
            raw = regency.name.encode("utf-8")
            name_table += struct.pack("<B", len(raw)) + raw

    buf = bytearray()
    buf += layout.HEADER.pack(layout.MAGIC, layout.VERSION, dataset.timestamp,
                              num_provinces, num_regencies, num_schedules, names_offset)
    for offset in name_index:
        buf += layout.INDEX_ENTRY.pack(offset)
    for index in schedule_index:
        buf += layout.INDEX_ENTRY.pack(index)
    for _, regency in dataset.regencies():
        for entry in regency.schedules:
            for t in entry.times:
                buf += layout.RECORD.pack(entry.month, entry.date, t.hour, t.minute)
    assert len(buf) == names_offset
    buf += name_table

    schedule_size = names_offset - layout.HEADER_SIZE - 4 * num_provinces
    log.info("Header: %d bytes @ 0", layout.HEADER_SIZE)
    log.info("Index: %d bytes @ %d", 4 * num_provinces, layout.HEADER_SIZE)
    log.info("Schedule: %d bytes @ %d", schedule_size, layout.HEADER_SIZE + 4 * num_provinces)
    log.info("Names: %d bytes @ %d", len(name_table), names_offset)
    log.info("Total size: %d bytes (%d provinces, %d regencies, %d days)",
             len(buf), num_provinces, num_regencies, num_days)
    return bytes(buf)

def encode(dataset: Dataset) -> tuple[bytes, str]:
    """Return (binary table, metadata text). Both describe the same index order."""
    binary = encode_binary(dataset)
    return binary, dump_metadata(dataset)


# ---- files ----
def _stage(path: Path, data: bytes) -> str:
    """Write data to a temporary file beside path; returns the temporary name."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except BaseException:
        os.unlink(tmp)
        raise
    return tmp

def write_files(dataset: Dataset, binary_path, metadata_path=None) -> int:
    """Encode fully in memory, stage every file, then rename them into place.

    Returns the binary size. Nothing is replaced unless every file was staged.
    """
    binary, metadata = encode(dataset)
    outputs = [(Path(binary_path), binary)]
    if metadata_path is not None:
        outputs.append((Path(metadata_path), metadata.encode("utf-8")))

    staged = []
    try:
        for path, data in outputs:
            staged.append((_stage(path, data), path))
    except BaseException:
        for tmp, _ in staged:
            os.unlink(tmp)
        raise
    for tmp, path in staged:
        os.replace(tmp, path)
        log.info("Written: %s | size: %d bytes (%.2f KiB)", path, path.stat().st_size, path.stat().st_size / 1024)
    return len(binary)
