import unittest
from datetime import datetime, timedelta

from zenith_cli.zenith_api.data_models import Frequency, Recurrence
from zenith_cli.zenith_api.recurrence import advance, describe


class TestAdvance(unittest.TestCase):
    def test_daily_with_interval(self):
        nxt = advance(datetime(2024, 1, 10), Recurrence(Frequency.DAILY, 2))
        self.assertEqual(nxt, datetime(2024, 1, 12))

    def test_weekly(self):
        nxt = advance(datetime(2024, 1, 10, 8, 30), Recurrence(Frequency.WEEKLY))
        self.assertEqual(nxt, datetime(2024, 1, 17, 8, 30))

    def test_monthly_leap_year_clamp(self):
        self.assertEqual(advance(datetime(2024, 1, 31), Recurrence(Frequency.MONTHLY)), datetime(2024, 2, 29))

    def test_monthly_non_leap_year_clamp(self):
        self.assertEqual(advance(datetime(2023, 1, 31), Recurrence(Frequency.MONTHLY)), datetime(2023, 2, 28))

    def test_month_interval_crosses_year(self):
        self.assertEqual(advance(datetime(2024, 11, 15), Recurrence(Frequency.MONTHLY, 3)), datetime(2025, 2, 15))

    def test_none_frequency_does_not_advance(self):
        self.assertIsNone(advance(datetime(2024, 1, 10), Recurrence(Frequency.NONE)))


class TestRecurrenceParsing(unittest.TestCase):
    def test_unknown_frequency_fails_closed(self):
        rec = Recurrence.from_dict({"frequency": "fortnightly", "interval": 1})
        self.assertEqual(rec.frequency, Frequency.NONE)
        self.assertFalse(rec.is_active)

    def test_bad_interval_becomes_one(self):
        self.assertEqual(Recurrence.from_dict({"frequency": "daily", "interval": 0}).interval, 1)
        self.assertEqual(Recurrence.from_dict({"frequency": "daily", "interval": "x"}).interval, 1)

    def test_empty_recurrence_is_none(self):
        self.assertIsNone(Recurrence.from_dict(None))
        self.assertIsNone(Recurrence.from_dict({}))


class TestDescribe(unittest.TestCase):
    def test_describe(self):
        self.assertEqual(describe(Recurrence(Frequency.DAILY)), "every day")
        self.assertEqual(describe(Recurrence(Frequency.WEEKLY, 2)), "every 2 weeks")
        self.assertEqual(describe(None), "")


def test_daily_step_keeps_local_midnight_across_dst(local_zone):
    local_zone("Europe/Berlin")
    due = datetime(2024, 10, 20).astimezone()
    assert due.utcoffset() == timedelta(hours=2)

    nxt = advance(due, Recurrence(Frequency.DAILY, 10))
    assert nxt.replace(tzinfo=None) == datetime(2024, 10, 30)
    assert nxt.utcoffset() == timedelta(hours=1)


def test_monthly_step_into_summer_time(local_zone):
    local_zone("Europe/Berlin")
    due = datetime(2024, 3, 15, 9, 0).astimezone()

    nxt = advance(due, Recurrence(Frequency.MONTHLY))
    assert nxt.replace(tzinfo=None) == datetime(2024, 4, 15, 9, 0)
    assert nxt.utcoffset() == timedelta(hours=2)


if __name__ == "__main__":
    unittest.main()
