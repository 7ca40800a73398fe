# index.py
# Name -> position lookups over a loaded table, built by one pass over the
# name table and never mutated afterwards.

from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple

from . import layout
from .bitpack import join_bytes
from .errors import FormatError, NotFoundError


class Location(NamedTuple):
    province_index: int
    regency_index: int

    @property
    def key(self) -> int:
        return join_bytes(self.province_index, self.regency_index)


def _read_name(data: bytes, offset: int, end: int) -> tuple[str, int]:
    if offset >= end:
        raise FormatError(f"Name table truncated at byte {offset}")
    length = data[offset]
    start = offset + 1
    if start + length > end:
        raise FormatError(f"Name at byte {offset} runs past the end of the data ({length} bytes)")
    try:
        name = data[start:start + length].decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Name at byte {offset} is not valid UTF-8: {e}") from None
    return name, start + length


@dataclass(frozen=True)
class LookupIndex:
    provinces: tuple[str, ...]
    regencies: tuple[tuple[str, ...], ...]
    first_regency: tuple[int, ...]          # flat index of each province's first regency
    province_ids: dict
    regency_ids: tuple[dict, ...]

    @classmethod
    def build(cls, data: bytes, header: layout.Header) -> "LookupIndex":
        """Walk each province record through provinceNameIndex, in index order."""
        n = header.num_provinces
        names_offset = header.province_names_offset
        end = len(data)
        name_index = [layout.INDEX_ENTRY.unpack_from(data, header.name_index_offset + 2 * i)[0]
                      for i in range(n)]
        first_regency = tuple(layout.INDEX_ENTRY.unpack_from(data, header.schedule_index_offset + 2 * i)[0]
                              for i in range(n))

        provinces, regencies = [], []
        for i, rel in enumerate(name_index):
            province, offset = _read_name(data, names_offset + rel, end)
            if offset >= end:
                raise FormatError(f"Regency count of {province} is missing")
            count = data[offset]
            offset += 1
            names = []
            for _ in range(count):
                name, offset = _read_name(data, offset, end)
                names.append(name)
            if first_regency[i] + count > header.num_regencies:
                raise FormatError(
                    f"Province {province} addresses regencies {first_regency[i]}..{first_regency[i] + count - 1} "
                    f"but the table holds {header.num_regencies}")
            provinces.append(province)
            regencies.append(tuple(names))

        return cls(
            provinces=tuple(provinces),
            regencies=tuple(regencies),
            first_regency=first_regency,
            province_ids={name: i for i, name in reversed(list(enumerate(provinces)))},
            regency_ids=tuple({name: j for j, name in reversed(list(enumerate(names)))}
                              for names in regencies),
        )

    def province_index(self, province: str) -> int:
        try:
            return self.province_ids[province]
        except KeyError:
            raise NotFoundError(f"Province {province} not found.") from None

    def regencies_of(self, province: str) -> tuple[str, ...]:
        return self.regencies[self.province_index(province)]

    def locate(self, province: str, regency: str) -> Location:
        p = self.province_ids.get(province)
        r = None if p is None else self.regency_ids[p].get(regency)
        if r is None:
            raise NotFoundError(f"Regency {regency} in province {province} not found.")
        return Location(p, r)

    def flat_index(self, location: Location) -> int:
        return self.first_regency[location.province_index] + location.regency_index
