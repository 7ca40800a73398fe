import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path
from unittest import mock

from adhanpy.calculation import CalculationMethod

from jadwal_sholat import calculate
from jadwal_sholat.encoder import encode_binary
from jadwal_sholat.errors import ValidationError
from jadwal_sholat.reader import ScheduleTable


class FakePrayerTimes:
    calls = []
    fajr = (4, 40)
    isha = (19, 15)

    def __init__(self, coords, day, method, time_zone=None):
        FakePrayerTimes.calls.append((coords, day, method, time_zone))
        base = datetime(day.year, day.month, day.day, tzinfo=time_zone)
        at = lambda h, m: base + timedelta(hours=h, minutes=m)
        self.fajr = at(*FakePrayerTimes.fajr)
        self.sunrise = at(5, 55)
        self.dhuhr = at(12, 0)
        self.asr = at(15, 20)
        self.maghrib = at(18, 5)
        self.isha = at(*FakePrayerTimes.isha)


class CalculateTests(unittest.TestCase):
    def setUp(self):
        FakePrayerTimes.calls = []
        FakePrayerTimes.fajr = (4, 40)
        FakePrayerTimes.isha = (19, 15)
        patcher = mock.patch.object(calculate, "PrayerTimes", FakePrayerTimes)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_full_year(self):
        schedules = calculate.compute_schedules(5.55, 95.32, "Asia/Jakarta", 2024, "EGYPTIAN")
        self.assertEqual(len(schedules), 366)
        self.assertEqual((schedules[0].month, schedules[0].date), (1, 1))
        self.assertEqual((schedules[-1].month, schedules[-1].date), (12, 31))
        coords, day, method, tz = FakePrayerTimes.calls[0]
        self.assertEqual(coords, (5.55, 95.32))
        self.assertEqual(method, CalculationMethod.EGYPTIAN)
        self.assertEqual(str(tz), "Asia/Jakarta")

    def test_derived_labels(self):
        entry = calculate.compute_schedules(0, 0, "Asia/Jakarta", 2025)[0]
        self.assertEqual([str(t) for t in entry.times],
                         ["04:30", "04:40", "05:55", "06:10", "12:00", "15:20", "18:05", "19:15"])

    def test_offsets(self):
        entry = calculate.compute_schedules(0, 0, "Asia/Jakarta", 2025, offsets={"Isya": 5, "Subuh": 2})[0]
        self.assertEqual(str(entry.time("Isya")), "19:20")
        self.assertEqual(str(entry.time("Subuh")), "04:42")

    def test_day_stays_non_decreasing(self):
        FakePrayerTimes.isha = (18, 0)
        entry = calculate.compute_schedules(0, 0, "Asia/Jakarta", 2025)[0]
        self.assertEqual(str(entry.time("Isya")), "18:05")

    def test_imsya_before_midnight_is_clamped(self):
        FakePrayerTimes.fajr = (0, 5)
        with self.assertLogs("jadwal_sholat.calculate", "WARNING") as logs:
            entry = calculate.compute_schedules(0, 105, "Asia/Jakarta", 2025)[0]
        self.assertEqual(str(entry.time("Imsya")), "00:00")
        self.assertEqual(str(entry.time("Subuh")), "00:05")
        self.assertEqual(str(entry.time("Isya")), "19:15")
        self.assertTrue(any("Imsya" in line and "clamped" in line for line in logs.output))

    def test_warns_on_far_longitude(self):
        with self.assertLogs("jadwal_sholat.calculate", "WARNING") as logs:
            calculate.check_zone(-2.53, 140.72, "Asia/Jakarta", 2025)
        self.assertIn("Asia/Jakarta", logs.output[0])

    def test_matching_longitude_is_quiet(self):
        with mock.patch.object(calculate.log, "warning") as warning:
            calculate.check_zone(-6.2, 106.8, "Asia/Jakarta", 2025)
            calculate.check_zone(-2.53, 140.72, "Asia/Jayapura", 2025)
        warning.assert_not_called()

    def test_method_help_lists_descriptions(self):
        text = calculate.method_help()
        self.assertIn("MUSLIM_WORLD_LEAGUE", text)
        for key, desc in calculate.METHODS:
            self.assertIn(f"{key}: {desc}", text)

    def test_unknown_method_and_zone(self):
        with self.assertRaises(ValidationError):
            calculate.compute_schedules(0, 0, "Asia/Jakarta", 2025, "KEMENAG")
        with self.assertRaises(ValidationError):
            calculate.compute_schedules(0, 0, "Not/AZone", 2025)

    def test_build_dataset_encodes(self):
        sites = [
            calculate.RegencySite("ACEH", "KOTA BANDA ACEH", 5.55, 95.32),
            calculate.RegencySite("BALI", "KOTA DENPASAR", -8.65, 115.22, "Asia/Makassar"),
            calculate.RegencySite("ACEH", "KOTA SABANG", 5.89, 95.32),
        ]
        dataset = calculate.build_dataset(sites, 2023, timestamp=42)
        self.assertEqual(dataset.province_names(), ["ACEH", "BALI"])
        self.assertEqual(dataset.provinces[0].regency_names(), ["KOTA BANDA ACEH", "KOTA SABANG"])
        table = ScheduleTable.from_bytes(encode_binary(dataset))
        self.assertEqual(table.schedule_count, 365)
        self.assertEqual(table.timestamp, 42)
        self.assertEqual(str(table.get_times("BALI", "KOTA DENPASAR", 8, 17)[6]), "18:05")


class LocationsCsvTests(unittest.TestCase):
    def test_read_locations(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "locations.csv"
            path.write_text(
                "province,regency,latitude,longitude,timezone\n"
                "ACEH,KOTA BANDA ACEH,5.55,95.32,\n"
                "PAPUA,KOTA JAYAPURA,-2.53,140.72,Asia/Jayapura\n",
                encoding="utf-8",
            )
            sites = calculate.read_locations_csv(path)
        self.assertEqual(sites[0], calculate.RegencySite("ACEH", "KOTA BANDA ACEH", 5.55, 95.32, "Asia/Jakarta"))
        self.assertEqual(sites[1].timezone, "Asia/Jayapura")

    def test_bad_row(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "locations.csv"
            path.write_text("province,regency,latitude,longitude\nACEH,KOTA SABANG,north,95.32\n",
                            encoding="utf-8")
            with self.assertRaises(ValidationError):
                calculate.read_locations_csv(path)


if __name__ == "__main__":
    unittest.main()
