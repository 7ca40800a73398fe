# models.py
# In-memory shape of a prayer schedule dataset.

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone

LABEL_IMSYA = "Imsya"
LABEL_SUBUH = "Subuh"
LABEL_TERBIT = "Terbit"
LABEL_DUHA = "Duha"
LABEL_DZUHUR = "Dzuhur"
LABEL_ASHAR = "Ashar"
LABEL_MAGRIB = "Magrib"
LABEL_ISYA = "Isya"

# Canonical order; a time's label is its position within the day.
LABELS = (
    LABEL_IMSYA, LABEL_SUBUH, LABEL_TERBIT, LABEL_DUHA,
    LABEL_DZUHUR, LABEL_ASHAR, LABEL_MAGRIB, LABEL_ISYA,
)
TIMES_PER_DAY = len(LABELS)


@dataclass(frozen=True)
class PrayerTime:
    label: str
    hour: int
    minute: int

    def minutes(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass
class ScheduleEntry:
    month: int
    date: int
    times: list[PrayerTime] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, month: int, date: int, pairs) -> "ScheduleEntry":
        """Label (hour, minute) pairs positionally."""
        times = [PrayerTime(LABELS[i], h, m) for i, (h, m) in enumerate(pairs)]
        return cls(month, date, times)

    def time(self, label: str) -> PrayerTime:
        for t in self.times:
            if t.label == label:
                return t
        raise KeyError(label)


@dataclass
class Regency:
    name: str
    schedules: list[ScheduleEntry] = field(default_factory=list)


@dataclass
class Province:
    name: str
    regencies: list[Regency] = field(default_factory=list)

    def regency_names(self) -> list[str]:
        return [r.name for r in self.regencies]


@dataclass
class Dataset:
    timestamp: int                      # ms since epoch, data retrieval time
    provinces: list[Province] = field(default_factory=list)

    @property
    def retrieved_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def province_names(self) -> list[str]:
        return [p.name for p in self.provinces]

    def num_regencies(self) -> int:
        return sum(len(p.regencies) for p in self.provinces)

    def regencies(self):
        """Yield (province, regency) in table order."""
        for p in self.provinces:
            for r in p.regencies:
                yield p, r
