from __future__ import annotations

import unittest

from app.mappers.field_resolver import find_field, resolve, resolve_text
from app.parsing.scalars import to_int


class TestFieldResolver(unittest.TestCase):
    def test_exact_match_wins(self) -> None:
        row = {"Reach": "1,200", "Post reach (organic)": "50"}

        self.assertEqual(resolve(row, ["Reach"]), 1200)

    def test_fuzzy_pass_finds_drifted_column(self) -> None:
        row = {"Title": "Launch", "3-second video views": "4,500"}

        self.assertEqual(resolve(row, ["Views", "video views"]), 4500)
        self.assertEqual(find_field(row, ["Views", "video views"]), "3-second video views")

    def test_fuzzy_pass_is_case_insensitive(self) -> None:
        row = {"EMAIL CLICKED": "75"}

        self.assertEqual(resolve(row, ["Email clicked"]), 75)

    def test_exact_pass_runs_before_any_fuzzy_match(self) -> None:
        row = {"Video views total": "5", "Views": "9"}

        self.assertEqual(resolve(row, ["Views"]), 9)

    def test_candidate_order_is_respected_in_fuzzy_pass(self) -> None:
        row = {"Likes and reactions": "3", "Total comments": "8"}

        self.assertEqual(resolve(row, ["comments", "likes"]), 8)

    def test_percent_values_are_stripped(self) -> None:
        row = {"Email open rate": "45.5%"}

        self.assertAlmostEqual(resolve(row, ["Email open rate"]), 45.5)

    def test_missing_field_returns_default(self) -> None:
        row = {"Date": "2024-01-01"}

        self.assertEqual(resolve(row, ["Reach"]), 0)
        self.assertIsNone(resolve(row, ["Reach"], None))
        self.assertIsNone(find_field(row, ["Reach"]))

    def test_integer_coercion(self) -> None:
        row = {"Emails sent": "1,000.9"}

        self.assertEqual(resolve(row, ["Emails sent"], coerce=to_int), 1000)

    def test_resolve_text_strips_and_defaults(self) -> None:
        self.assertEqual(resolve_text({"Campaign": "  Spring Sale "}, ["Campaign"]), "Spring Sale")
        self.assertEqual(resolve_text({"Campaign": "   "}, ["Campaign"], "Untitled"), "Untitled")
        self.assertEqual(resolve_text({}, ["Campaign"], "Untitled"), "Untitled")


if __name__ == "__main__":
    unittest.main()
