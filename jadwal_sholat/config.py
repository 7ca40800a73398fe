# config.py
# Default locations and knobs. Environment variables override the constants.

from __future__ import annotations
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# ---- CONFIGURE HERE ----
DATA_PATH = Path(os.environ.get("JADWAL_SHOLAT_DATA", DATA_DIR / "jadwal-sholat.bin"))
METADATA_PATH = Path(os.environ.get("JADWAL_SHOLAT_METADATA", DATA_DIR / "jadwal-sholat.metadata"))
DATA_URL = os.environ.get("JADWAL_SHOLAT_URL", "")      # empty = read DATA_PATH
LOG_LEVEL = os.environ.get("JADWAL_SHOLAT_LOG_LEVEL", "INFO")

# Indonesian regencies span WIB/WITA/WIT; calculated tables default to WIB.
DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_METHOD = "MUSLIM_WORLD_LEAGUE"
IMSYA_OFFSET_MIN = -10   # Imsya = Subuh - 10 min
DUHA_OFFSET_MIN = 15     # Duha = Terbit + 15 min
# ------------------------
