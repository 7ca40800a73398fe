# metadata.py
# Newline-delimited text index of province/regency names:
#   line 0: timestamp (ms)
#   line n: PROVINCE:REGENCY1\tREGENCY2\t...
# Derived from the same dataset as the binary table and kept in the same
# index order; the reader never treats it as a second source of truth.

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

from . import config
from .errors import FormatError, NotFoundError


@dataclass(frozen=True)
class Metadata:
    timestamp: int
    provinces: list[str] = field(default_factory=list)
    regencies: list[list[str]] = field(default_factory=list)

    @classmethod
    def from_file(cls, path) -> "Metadata":
        return parse_metadata(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def default(cls) -> "Metadata":
        return cls.from_file(config.METADATA_PATH)

    def regencies_of(self, province: str) -> list[str]:
        try:
            return list(self.regencies[self.provinces.index(province)])
        except ValueError:
            raise NotFoundError(f"Province {province} not found.") from None


def dump_metadata(dataset) -> str:
    lines = [str(dataset.timestamp)]
    for p in dataset.provinces:
        lines.append(f"{p.name}:" + "\t".join(r.name for r in p.regencies))
    return "\n".join(lines)

def parse_metadata(text: str) -> Metadata:
    lines = text.split("\n")
    try:
        timestamp = int(lines[0].strip())
    except ValueError:
        raise FormatError(f"Invalid metadata timestamp line: {lines[0]!r}") from None
    provinces, regencies = [], []
    for n, line in enumerate(lines[1:], 2):
        if not line:
            continue
        name, sep, rest = line.partition(":")
        if not sep:
            raise FormatError(f"Metadata line {n} has no ':' separator: {line!r}")
        provinces.append(name)
        regencies.append(rest.split("\t") if rest else [])
    return Metadata(timestamp, provinces, regencies)
