# bitpack.py
# Small fixed-width integer packing: two bytes <-> one 16-bit word, and
# 8 (hour, minute) pairs <-> six 16-bit words of 6-bit fields.

from __future__ import annotations
from typing import Iterable, Sequence

from .errors import RangeError

U8_MAX = 0b11111111
U16_MAX = 0xFFFF
SIX_BITS = 0b111111

PACKED_VALUES = 16   # 8 labels * (hour, minute)
PACKED_WORDS = 6     # 16 * 6 bits = 96 bits


# ---- byte/word ----
def join_bytes(low: int, high: int) -> int:
    """Little-endian composite: ``low | (high << 8)``."""
    if not (0 <= low <= U8_MAX and 0 <= high <= U8_MAX):
        raise RangeError(f"Value larger than 8 bits: {low}, {high}")
    return low | (high << 8)

def split_word(word: int) -> tuple[int, int]:
    if not 0 <= word <= U16_MAX:
        raise RangeError(f"Value larger than 16 bits: {word}")
    return word & U8_MAX, word >> 8


# ---- daily times ----
def _pack_half(v: Sequence[int]) -> list[int]:
    # 8 fields -> 3 words; v[2] and v[5] straddle a word boundary
    return [
        v[0] | (v[1] << 6) | ((v[2] >> 2) << 12),
        (v[2] & 0b000011) | (v[3] << 2) | (v[4] << 8) | ((v[5] >> 4) << 14),
        (v[5] & 0b001111) | (v[6] << 4) | (v[7] << 10),
    ]

def _unpack_half(w: Sequence[int]) -> list[int]:
    return [
        w[0] & SIX_BITS,
        (w[0] >> 6) & SIX_BITS,
        ((w[0] >> 12) << 2) | (w[1] & 0b11),
        (w[1] >> 2) & SIX_BITS,
        (w[1] >> 8) & SIX_BITS,
        ((w[1] >> 14) << 4) | (w[2] & 0b1111),
        (w[2] >> 4) & SIX_BITS,
        (w[2] >> 10) & SIX_BITS,
    ]

def pack_daily_times(values: Sequence[int]) -> list[int]:
    """Pack 16 six-bit values (hour, minute, hour, minute, ...) into 6 words.

    Every value is checked before any packing happens; a value above 63 would
    otherwise bleed into the neighbouring field.
    """
    if len(values) != PACKED_VALUES:
        raise RangeError(f"Expected {PACKED_VALUES} values, got {len(values)}")
    for v in values:
        if not 0 <= v <= SIX_BITS:
            raise RangeError(f"Value larger than 6 bits: {v}")
    return _pack_half(values[:8]) + _pack_half(values[8:])

def unpack_daily_times(words: Sequence[int]) -> list[int]:
    if len(words) != PACKED_WORDS:
        raise RangeError(f"Expected {PACKED_WORDS} words, got {len(words)}")
    for w in words:
        if not 0 <= w <= U16_MAX:
            raise RangeError(f"Value larger than 16 bits: {w}")
    return _unpack_half(words[:3]) + _unpack_half(words[3:])

def flatten_times(times: Iterable) -> list[int]:
    """[(h, m), ...] or PrayerTime objects -> [h, m, h, m, ...]"""
    out = []
    for t in times:
        h, m = (t.hour, t.minute) if hasattr(t, "hour") else t
        out += [h, m]
    return out

def pair_times(values: Sequence[int]) -> list[tuple[int, int]]:
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]
