# errors.py
# Failure kinds raised by the codec. Each one stays distinct so callers can
# tell a typo'd regency apart from a broken data file.

from __future__ import annotations


class JadwalSholatError(Exception):
    """Base class for every error raised by this package."""


class FormatError(JadwalSholatError):
    """Bad magic word or a structurally broken/truncated buffer."""


class UnsupportedVersionError(FormatError):
    def __init__(self, version: int, supported):
        self.version = version
        self.supported = tuple(sorted(supported))
        listed = ", ".join(str(v) for v in self.supported)
        super().__init__(f"Unsupported version: {version}. Supported versions: {listed}.")


class NotFoundError(JadwalSholatError, LookupError):
    """Well-formed data, but the requested province/regency/date is absent."""


class ValidationError(JadwalSholatError, ValueError):
    """Input dataset violates an invariant of the table format."""


class RangeError(JadwalSholatError, ValueError):
    """A value does not fit the bit width it is packed into."""
