from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector.precision import canonicalize_path_data, clamp_decimals, format_number, round_number


class PrecisionTests(unittest.TestCase):
    def test_half_rounds_away_from_zero(self) -> None:
        self.assertEqual(format_number(2.5, 0), "3")
        self.assertEqual(format_number(-2.5, 0), "-3")
        self.assertEqual(format_number(1.005, 2), "1.01")
        self.assertEqual(round_number(0.125, 2), 0.13)

    def test_negative_zero_and_trailing_zeros(self) -> None:
        self.assertEqual(format_number(-0.001, 2), "0")
        self.assertEqual(format_number(1.50, 2), "1.5")
        self.assertEqual(format_number(2.0, 3), "2")
        self.assertEqual(format_number("100", 0), "100")

    def test_decimals_are_clamped(self) -> None:
        self.assertEqual(clamp_decimals(-3), 0)
        self.assertEqual(clamp_decimals(12), 8)
        self.assertEqual(format_number(1.123456789, 12), "1.12345679")

    def test_path_data_keeps_commands_and_separators(self) -> None:
        self.assertEqual(
            canonicalize_path_data("M 1.234 5.678 L -0.001 2", 2),
            "M 1.23 5.68 L 0 2",
        )
        self.assertEqual(canonicalize_path_data("M1,2.25L3,4", 1), "M1,2.3L3,4")

    def test_adjacent_numbers_stay_separate(self) -> None:
        self.assertEqual(canonicalize_path_data("M1.5.5", 0), "M2 1")
        self.assertEqual(canonicalize_path_data("M-1.5-0.4", 0), "M-2 0")

    def test_arc_flags_are_not_rounded(self) -> None:
        self.assertEqual(canonicalize_path_data("a5 5 0 0110 10", 0), "a5 5 0 0110 10")

    def test_idempotent(self) -> None:
        samples = [
            "M 1.23456 7.891 C 1.005 2.5 -3.4449 0 10 10 Z",
            "M1.5.5.25",
            "m-0.0001-2.345e1 l.5.5",
            "A 10.555 10 0 1 0 2.49999 12",
        ]
        for decimals in (0, 1, 2, 4):
            for sample in samples:
                once = canonicalize_path_data(sample, decimals)
                self.assertEqual(canonicalize_path_data(once, decimals), once, (sample, decimals))

    def test_blank_input_is_returned(self) -> None:
        self.assertEqual(canonicalize_path_data("", 2), "")
        self.assertEqual(canonicalize_path_data("   ", 2), "   ")


if __name__ == "__main__":
    unittest.main()
