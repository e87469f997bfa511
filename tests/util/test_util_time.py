import time
import unittest
from datetime import datetime, timezone

from gdindex.util.time import (
    MS_PER_DAY,
    days_to_ms,
    now_epoch_ms,
    parse_rfc3339,
    to_rfc3339,
)


class TestUtilTime(unittest.TestCase):
    def test_now_epoch_ms_tracks_wall_clock(self) -> None:
        ms = now_epoch_ms()
        self.assertLess(abs(ms - int(time.time() * 1000)), 5_000)

    def test_days_to_ms(self) -> None:
        self.assertEqual(days_to_ms(7), 7 * MS_PER_DAY)
        self.assertEqual(days_to_ms(0.5), MS_PER_DAY // 2)

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_fractional_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56.123Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, 123000, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_naive_and_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("2025-01-01T12:34:56")
        with self.assertRaises(ValueError):
            parse_rfc3339("")

    def test_to_rfc3339_outputs_millis_z(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.000Z")

    def test_to_rfc3339_rejects_naive(self) -> None:
        with self.assertRaises(ValueError):
            to_rfc3339(datetime(2025, 1, 1))


if __name__ == "__main__":
    unittest.main()
