# jadwal_sholat
# Compact binary tables of Indonesian daily prayer times.

from .bitpack import join_bytes, pack_daily_times, split_word, unpack_daily_times
from .encoder import encode, encode_binary, validate, write_files
from .errors import (FormatError, JadwalSholatError, NotFoundError, RangeError,
                     UnsupportedVersionError, ValidationError)
from .metadata import Metadata, dump_metadata, parse_metadata
from .models import LABELS, Dataset, PrayerTime, Province, Regency, ScheduleEntry
from .reader import JadwalSholat, ScheduleTable

__version__ = "1.0.0"
