from __future__ import annotations

import unittest
from datetime import datetime

from app.domain.date_range import AvailableDateBounds
from app.repositories.dataset_store import DatasetStore, DatasetView

BOUNDS = AvailableDateBounds(earliest=datetime(2024, 1, 1), latest=datetime(2024, 2, 1))


class TestDatasetStore(unittest.TestCase):
    def test_commit_applies_current_generation(self) -> None:
        store = DatasetStore()
        generation = store.begin_cycle()

        committed = store.commit(
            generation,
            datasets={"Email.csv": ({"a": "1"},)},
            errors={"FB_Posts.csv": "file not found"},
            bounds=BOUNDS,
        )

        self.assertTrue(committed)
        self.assertTrue(store.is_loaded)
        self.assertEqual(store.bounds, BOUNDS)
        self.assertEqual(store.errors, {"FB_Posts.csv": "file not found"})
        self.assertEqual(store.view()["Email.csv"], ({"a": "1"},))

    def test_stale_generation_is_discarded(self) -> None:
        store = DatasetStore()
        stale = store.begin_cycle()
        fresh = store.begin_cycle()

        self.assertTrue(store.commit(fresh, datasets={"Email.csv": ({"a": "new"},)}, errors={}, bounds=BOUNDS))
        self.assertFalse(store.commit(stale, datasets={"Email.csv": ({"a": "old"},)}, errors={}, bounds=BOUNDS))
        self.assertEqual(store.view()["Email.csv"][0]["a"], "new")

    def test_not_loaded_before_first_commit(self) -> None:
        store = DatasetStore()
        store.begin_cycle()

        self.assertFalse(store.is_loaded)
        self.assertIsNone(store.bounds)

    def test_replace_swaps_one_slot_and_tracks_errors(self) -> None:
        store = DatasetStore()
        store.commit(
            store.begin_cycle(),
            datasets={"Email.csv": ({"a": "1"},)},
            errors={"Email.csv": "old failure"},
            bounds=BOUNDS,
        )

        store.replace("Email.csv", ({"a": "2"},))
        self.assertEqual(store.view()["Email.csv"][0]["a"], "2")
        self.assertEqual(store.errors, {})

        store.replace("IG_Posts.csv", (), error="no data rows")
        self.assertEqual(store.errors, {"IG_Posts.csv": "no data rows"})

    def test_slot_replaced_during_cycle_survives_commit(self) -> None:
        store = DatasetStore()
        generation = store.begin_cycle()
        store.replace("IG_Posts.csv", ({"Reach": "uploaded"},))

        committed = store.commit(
            generation,
            datasets={"IG_Posts.csv": (), "Email.csv": ({"a": "1"},)},
            errors={"IG_Posts.csv": "file not found"},
            bounds=BOUNDS,
        )

        self.assertTrue(committed)
        self.assertEqual(store.view()["IG_Posts.csv"][0]["Reach"], "uploaded")
        self.assertEqual(store.view()["Email.csv"], ({"a": "1"},))
        self.assertEqual(store.errors, {})
        self.assertEqual(store.replaced_since(generation), frozenset({"IG_Posts.csv"}))

    def test_slot_replaced_before_cycle_is_overwritten(self) -> None:
        store = DatasetStore()
        store.replace("IG_Posts.csv", ({"Reach": "uploaded"},))
        generation = store.begin_cycle()

        store.commit(generation, datasets={"IG_Posts.csv": ({"Reach": "reloaded"},)}, errors={}, bounds=BOUNDS)

        self.assertEqual(store.view()["IG_Posts.csv"][0]["Reach"], "reloaded")
        self.assertEqual(store.replaced_since(generation), frozenset())

    def test_errors_property_is_a_copy(self) -> None:
        store = DatasetStore()
        store.commit(store.begin_cycle(), datasets={}, errors={"x": "y"}, bounds=BOUNDS)

        store.errors["z"] = "w"

        self.assertEqual(store.errors, {"x": "y"})


class TestDatasetView(unittest.TestCase):
    def test_unknown_file_reads_as_empty(self) -> None:
        view = DatasetView({"Email.csv": ({"a": "1"},)})

        self.assertEqual(view["GA_Traffic.csv"], ())
        self.assertNotIn("GA_Traffic.csv", view)
        self.assertEqual(len(view), 1)
        self.assertEqual(list(view), ["Email.csv"])

    def test_view_is_detached_from_later_replacements(self) -> None:
        store = DatasetStore()
        store.replace("Email.csv", ({"a": "1"},))
        view = store.view()

        store.replace("Email.csv", ({"a": "2"},))

        self.assertEqual(view["Email.csv"][0]["a"], "1")


if __name__ == "__main__":
    unittest.main()
