# reader.py
# Point queries over a loaded AWQTSHLT table.
#
# ScheduleTable is the synchronous, immutable snapshot (bytes + header + a
# lookup index built on first use). JadwalSholat wraps it for async callers
# whose bytes arrive over the network or from disk.

from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from functools import cached_property
from pathlib import Path

from . import config, layout
from .bitpack import join_bytes
from .errors import FormatError, NotFoundError, UnsupportedVersionError
from .index import LookupIndex
from .models import LABELS, TIMES_PER_DAY, PrayerTime, ScheduleEntry
from .sources import file_source, url_source

log = logging.getLogger(__name__)


def read_header(data: bytes) -> layout.Header:
    if len(data) < layout.HEADER_SIZE:
        raise FormatError(f"Data too short for a header: {len(data)} < {layout.HEADER_SIZE} bytes")
    header = layout.Header(*layout.HEADER.unpack_from(data, 0))
    if header.magic != layout.MAGIC:
        raise FormatError(
            f"Invalid magic word. Expected: {list(layout.MAGIC)}. Actual: {list(header.magic)}.")
    if header.version not in layout.SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(header.version, layout.SUPPORTED_VERSIONS)
    if header.num_schedules % TIMES_PER_DAY:
        raise FormatError(
            f"Record count per regency ({header.num_schedules}) is not a multiple of {TIMES_PER_DAY}")
    if header.province_names_offset != header.expected_names_offset:
        raise FormatError(
            f"Name table offset {header.province_names_offset} does not match the layout "
            f"({header.expected_names_offset})")
    if len(data) < header.province_names_offset:
        raise FormatError(
            f"Data truncated: {len(data)} bytes, schedule table ends at {header.province_names_offset}")
    return header


class ScheduleTable:
    def __init__(self, data: bytes):
        self._data = bytes(data)
        self.header = read_header(self._data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "ScheduleTable":
        return cls(data)

    @classmethod
    def from_file(cls, path) -> "ScheduleTable":
        return cls(Path(path).read_bytes())

    @classmethod
    def default(cls) -> "ScheduleTable":
        return cls.from_file(config.DATA_PATH)

    @cached_property
    def index(self) -> LookupIndex:
        return LookupIndex.build(self._data, self.header)

    # ---- header fields ----
    @property
    def timestamp(self) -> int:
        return self.header.timestamp

    @property
    def record_count(self) -> int:
        return self.header.num_schedules

    @property
    def schedule_count(self) -> int:
        return self.header.num_schedules // TIMES_PER_DAY

    def get_data_timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.header.timestamp / 1000, tz=timezone.utc)

    # ---- names ----
    def get_provinces(self) -> list[str]:
        return list(self.index.provinces)

    def get_regencies(self, province: str) -> list[str]:
        return list(self.index.regencies_of(province))

    # ---- schedules ----
    def _records(self, province: str, regency: str):
        location = self.index.locate(province, regency)
        h = self.header
        start = h.schedule_table_offset + self.index.flat_index(location) * h.regency_stride
        return layout.RECORD.iter_unpack(self._data[start:start + h.regency_stride])

    def get_schedules(self, province: str, regency: str) -> list[ScheduleEntry]:
        schedules: list[ScheduleEntry] = []
        entry = None
        for month, date, hour, minute in self._records(province, regency):
            if entry is None or entry.month != month or entry.date != date:
                self._check_day(entry, province, regency)
                entry = ScheduleEntry(month, date)
                schedules.append(entry)
            if len(entry.times) == TIMES_PER_DAY:
                raise FormatError(
                    f"{province}/{regency} {month}/{date}: more than {TIMES_PER_DAY} records for one day")
            entry.times.append(PrayerTime(LABELS[len(entry.times)], hour, minute))
        self._check_day(entry, province, regency)
        return schedules

    @staticmethod
    def _check_day(entry, province, regency) -> None:
        if entry is not None and len(entry.times) != TIMES_PER_DAY:
            raise FormatError(
                f"{province}/{regency} {entry.month}/{entry.date}: "
                f"{len(entry.times)} records for one day, expected {TIMES_PER_DAY}")

    def get_times(self, province: str, regency: str, month: int, date: int) -> list[PrayerTime]:
        records = self._records(province, regency)
        if not (1 <= month <= 12 and 1 <= date <= 31):
            raise NotFoundError(f"No schedule for {month}/{date} in {regency}, {province}.")
        wanted = join_bytes(date, month)
        times: list[PrayerTime] = []
        for m, d, hour, minute in records:
            key = join_bytes(d, m)
            if key == wanted:
                times.append(PrayerTime(LABELS[len(times)], hour, minute))
                if len(times) == TIMES_PER_DAY:
                    break
            elif key > wanted:
                # days are stored in ascending order
                break
        if not times:
            raise NotFoundError(f"No schedule for {month}/{date} in {regency}, {province}.")
        if len(times) != TIMES_PER_DAY:
            raise FormatError(
                f"{province}/{regency} {month}/{date}: {len(times)} records for one day, "
                f"expected {TIMES_PER_DAY}")
        return times


class JadwalSholat:
    """Async handle: Unloaded until load() succeeds, then Loaded for good.

    ``source`` is the table bytes or a zero-argument callable returning an
    awaitable of bytes. Concurrent load() calls share one in-flight task, so
    the bytes are fetched once.
    """

    def __init__(self, source):
        self._source = source
        self._table: ScheduleTable | None = None
        self._pending: asyncio.Task | None = None

    @classmethod
    def from_file(cls, path) -> "JadwalSholat":
        return cls(file_source(path))

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "JadwalSholat":
        return cls(url_source(url, **kwargs))

    @classmethod
    def default(cls) -> "JadwalSholat":
        if config.DATA_URL:
            return cls.from_url(config.DATA_URL)
        return cls.from_file(config.DATA_PATH)

    @property
    def loaded(self) -> bool:
        return self._table is not None

    async def _load(self) -> ScheduleTable:
        source = self._source
        data = source if isinstance(source, (bytes, bytearray, memoryview)) else await source()
        table = ScheduleTable(data)
        table.index  # build the lookup index before reporting Loaded
        log.info("Loaded schedule table: %d provinces, %d regencies, %d days",
                 table.header.num_provinces, table.header.num_regencies, table.schedule_count)
        return table

    async def load(self) -> ScheduleTable:
        if self._table is not None:
            return self._table
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        pending = self._pending
        try:
            table = await asyncio.shield(pending)
        except BaseException:
            if self._pending is pending and pending.done():
                self._pending = None   # stay Unloaded; the next call starts over
            raise
        self._table = table
        return table

    async def get_data_timestamp(self) -> datetime:
        return (await self.load()).get_data_timestamp()

    async def get_provinces(self) -> list[str]:
        return (await self.load()).get_provinces()

    async def get_regencies(self, province: str) -> list[str]:
        return (await self.load()).get_regencies(province)

    async def get_schedules(self, province: str, regency: str) -> list[ScheduleEntry]:
        return (await self.load()).get_schedules(province, regency)

    async def get_times(self, province: str, regency: str, month: int, date: int) -> list[PrayerTime]:
        return (await self.load()).get_times(province, regency, month, date)
