import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import ACWRCalculator, RollingWindowAggregator, build_load_windows
from models import DailyLoad


def _series(loads, start_day: int = 1) -> list[DailyLoad]:
    return [
        DailyLoad("athlete", f"2024-03-{start_day + i:02d}", load)
        for i, load in enumerate(loads)
    ]


class RollingWindowTestCase(unittest.TestCase):
    def test_fixed_divisor_at_series_start(self) -> None:
        acute = RollingWindowAggregator.acute([70.0] * 7)
        self.assertEqual(acute[0], 10.0)
        self.assertEqual(acute[6], 70.0)
        chronic = RollingWindowAggregator.chronic([70.0] * 7)
        self.assertEqual(chronic[0], 2.5)
        self.assertEqual(chronic[6], 17.5)

    def test_window_slides(self) -> None:
        loads = [7.0] * 7 + [14.0] * 7
        acute = RollingWindowAggregator.acute(loads)
        self.assertEqual(acute[6], 7.0)
        self.assertEqual(acute[13], 14.0)
        self.assertEqual(acute[9], (4 * 7.0 + 3 * 14.0) / 7)

    def test_corrected_divisor(self) -> None:
        acute = RollingWindowAggregator.acute([70.0, 30.0], corrected=True)
        self.assertEqual(acute, [70.0, 50.0])

    def test_invalid_window(self) -> None:
        with self.assertRaises(ValueError):
            RollingWindowAggregator.rolling_mean([1.0], 0)

    def test_empty_series(self) -> None:
        self.assertEqual(RollingWindowAggregator.acute([]), [])
        self.assertEqual(build_load_windows([]), [])


class ACWRTestCase(unittest.TestCase):
    def test_zero_chronic_guard(self) -> None:
        self.assertEqual(ACWRCalculator.ratio(25.0, 0.0), 0.0)
        self.assertEqual(ACWRCalculator.ratio(0.0, 0.0), 0.0)

    def test_ratio(self) -> None:
        self.assertEqual(ACWRCalculator.ratio(12.0, 10.0), 1.2)
        self.assertEqual(ACWRCalculator.series([10.0, 5.0], [0.0, 5.0]), [0.0, 1.0])

    def test_display_rounding(self) -> None:
        self.assertEqual(ACWRCalculator.display(1.23456), 1.23)
        self.assertEqual(ACWRCalculator.display(0.0), 0.0)

    def test_risk_zones(self) -> None:
        cases = {
            0.0: "Low Risk",
            0.79: "Low Risk",
            0.8: "Optimal",
            1.29: "Optimal",
            1.3: "Moderate Risk",
            1.99: "Moderate Risk",
            2.0: "High Risk",
            3.0: "High Risk",
            4.2: "High Risk",
        }
        for acwr, zone in cases.items():
            self.assertEqual(ACWRCalculator.risk_zone(acwr), zone, acwr)
        self.assertIsNone(ACWRCalculator.risk_zone(-0.5))


class BuildLoadWindowsTestCase(unittest.TestCase):
    def test_windows_per_day(self) -> None:
        windows = build_load_windows(_series([70.0] * 7))
        self.assertEqual(len(windows), 7)
        first, last = windows[0], windows[-1]
        self.assertEqual(first.date, "2024-03-01")
        self.assertEqual(first.acwr, 4.0)
        self.assertEqual(last.acute_7d, 70.0)
        self.assertEqual(last.chronic_28d, 17.5)
        self.assertEqual(last.acwr, 4.0)

    def test_steady_load_converges_to_one(self) -> None:
        loads = [10.0] * 28
        windows = build_load_windows(
            [DailyLoad("athlete", f"day-{i:02d}", v) for i, v in enumerate(loads)]
        )
        self.assertAlmostEqual(windows[-1].acwr, 1.0)

    def test_all_zero_loads(self) -> None:
        windows = build_load_windows(_series([0.0] * 5))
        self.assertTrue(all(w.acwr == 0.0 for w in windows))

    def test_corrected_flag(self) -> None:
        windows = build_load_windows(_series([70.0, 30.0]), corrected=True)
        self.assertEqual(windows[0].acwr, 1.0)
        self.assertEqual(windows[1].acute_7d, 50.0)

    def test_custom_window_lengths(self) -> None:
        windows = build_load_windows(_series([6.0, 6.0]), acute_days=2, chronic_days=3)
        self.assertEqual(windows[1].acute_7d, 6.0)
        self.assertEqual(windows[1].chronic_28d, 4.0)
        self.assertEqual(windows[1].acwr, 1.5)

    def test_to_dict(self) -> None:
        window = build_load_windows(_series([14.0]))[0]
        self.assertEqual(
            window.to_dict(),
            {
                "date": "2024-03-01",
                "daily_load": 14.0,
                "acute_7d": 2.0,
                "chronic_28d": 0.5,
                "acwr": 4.0,
            },
        )


if __name__ == "__main__":
    unittest.main()
