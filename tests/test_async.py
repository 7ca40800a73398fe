import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from jadwal_sholat.encoder import encode_binary
from jadwal_sholat.errors import FormatError, NotFoundError
from jadwal_sholat.reader import JadwalSholat
from tests.helpers import small_dataset


class CountingSource:
    def __init__(self, data, failures=0):
        self.data = data
        self.failures = failures
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        if self.calls <= self.failures:
            raise OSError("connection reset")
        return self.data


class JadwalSholatTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.dataset = small_dataset()
        self.data = encode_binary(self.dataset)

    async def test_queries(self):
        jadwal = JadwalSholat(self.data)
        self.assertFalse(jadwal.loaded)
        self.assertEqual(await jadwal.get_provinces(), ["DKI JAKARTA", "BALI"])
        self.assertTrue(jadwal.loaded)
        self.assertEqual(await jadwal.get_regencies("BALI"), ["KAB. BADUNG", "KOTA DENPASAR", "KAB. GIANYAR"])
        expected = self.dataset.provinces[1].regencies[1].schedules
        self.assertEqual(await jadwal.get_schedules("BALI", "KOTA DENPASAR"), expected)
        self.assertEqual(await jadwal.get_times("BALI", "KOTA DENPASAR", 2, 29), expected[2].times)
        self.assertEqual((await jadwal.get_data_timestamp()).year, 2024)

    async def test_single_flight_load(self):
        source = CountingSource(self.data)
        jadwal = JadwalSholat(source)
        tables = await asyncio.gather(*(jadwal.load() for _ in range(5)), jadwal.get_provinces())
        self.assertEqual(source.calls, 1)
        self.assertTrue(all(t is tables[0] for t in tables[:5]))
        await jadwal.get_regencies("BALI")
        self.assertEqual(source.calls, 1)

    async def test_failed_load_stays_unloaded(self):
        source = CountingSource(self.data, failures=1)
        jadwal = JadwalSholat(source)
        results = await asyncio.gather(jadwal.load(), jadwal.load(), return_exceptions=True)
        self.assertTrue(all(isinstance(r, OSError) for r in results))
        self.assertEqual(source.calls, 1)
        self.assertFalse(jadwal.loaded)
        # retrying is up to the caller
        self.assertEqual(await jadwal.get_provinces(), ["DKI JAKARTA", "BALI"])
        self.assertEqual(source.calls, 2)

    async def test_bad_bytes_stay_unloaded(self):
        jadwal = JadwalSholat(b"AWQTSHLX" + self.data[8:])
        with self.assertRaises(FormatError):
            await jadwal.load()
        self.assertFalse(jadwal.loaded)

    async def test_truncated_name_table_fails_load(self):
        jadwal = JadwalSholat(self.data[:-3])
        with self.assertRaises(FormatError):
            await jadwal.load()
        self.assertFalse(jadwal.loaded)

    async def test_not_found(self):
        jadwal = JadwalSholat(self.data)
        with self.assertRaises(NotFoundError):
            await jadwal.get_regencies("NONEXISTENT")
        with self.assertRaises(NotFoundError):
            await jadwal.get_times("BALI", "KAB. BADUNG", 13, 40)

    async def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "jadwal-sholat.bin"
            path.write_bytes(self.data)
            jadwal = JadwalSholat.from_file(path)
            self.assertEqual(await jadwal.get_regencies("DKI JAKARTA"),
                             ["KOTA JAKARTA PUSAT", "KOTA JAKARTA SELATAN"])

    async def test_from_url(self):
        response = mock.Mock(content=self.data)
        client = mock.Mock()
        client.get = mock.AsyncMock(return_value=response)
        jadwal = JadwalSholat.from_url("https://example.org/jadwal-sholat.bin", client=client)
        self.assertEqual(await jadwal.get_provinces(), ["DKI JAKARTA", "BALI"])
        client.get.assert_awaited_once_with("https://example.org/jadwal-sholat.bin")
        response.raise_for_status.assert_called_once()


if __name__ == "__main__":
    unittest.main()
