# layout.py
# Byte layout of the AWQTSHLT schedule table (all little-endian).
#
#   magic               8s   "AWQTSHLT"
#   version             H
#   timestamp           Q    ms since epoch
#   numProvinces        B
#   numRegencies        H    sum over provinces
#   numSchedules        H    records per regency (days * 8)
#   provinceNamesOffset Q    absolute offset of the name table
#   provinceNameIndex   H * numProvinces   (relative to provinceNamesOffset)
#   provinceScheduleIndex H * numProvinces (flat index of first regency)
#   scheduleTable       numRegencies * numSchedules * RECORD
#   nameTable           per province: B len, name, B count, count * (B len, name)

from __future__ import annotations
import struct
from typing import NamedTuple

MAGIC = b"AWQTSHLT"
VERSION = 1
SUPPORTED_VERSIONS = frozenset({1})

HEADER = struct.Struct("<8sHQBHHQ")
HEADER_SIZE = HEADER.size           # 31
INDEX_ENTRY = struct.Struct("<H")
RECORD = struct.Struct("<BBBB")     # month, date, hour, minute
RECORD_SIZE = RECORD.size

MAX_PROVINCES = 0xFF
MAX_REGENCIES_PER_PROVINCE = 0xFF
MAX_REGENCIES = 0xFFFF
MAX_RECORDS = 0xFFFF
MAX_NAME_BYTES = 0xFF
MAX_INDEX = 0xFFFF
MAX_TIMESTAMP = 2**64 - 1


class Header(NamedTuple):
    magic: bytes
    version: int
    timestamp: int
    num_provinces: int
    num_regencies: int
    num_schedules: int
    province_names_offset: int

    @property
    def name_index_offset(self) -> int:
        return HEADER_SIZE

    @property
    def schedule_index_offset(self) -> int:
        return HEADER_SIZE + self.num_provinces * INDEX_ENTRY.size

    @property
    def schedule_table_offset(self) -> int:
        return HEADER_SIZE + 2 * self.num_provinces * INDEX_ENTRY.size

    @property
    def regency_stride(self) -> int:
        return self.num_schedules * RECORD_SIZE

    @property
    def expected_names_offset(self) -> int:
        return self.schedule_table_offset + self.num_regencies * self.regency_stride


def names_offset_for(num_provinces: int, num_regencies: int, num_schedules: int) -> int:
    return (HEADER_SIZE + 2 * num_provinces * INDEX_ENTRY.size
            + num_regencies * num_schedules * RECORD_SIZE)
