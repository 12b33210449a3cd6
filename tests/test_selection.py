from __future__ import annotations

import unittest

from facetscope.index.facets import build_facet_groups
from facetscope.index.records import Record
from facetscope.service.selection import SelectionState


def _groups():
    # Tree a > {b (leaf), c > {d (leaf)}} plus a flat scene group
    records = [
        Record.from_dict({"path": "1", "scenes": ["kitchen"], "objects": [{"hierarchy": ["a", "b"]}]}),
        Record.from_dict({"path": "2", "scenes": ["lab"], "objects": [{"hierarchy": ["a", "c", "d"]}]}),
    ]
    return build_facet_groups(records)


class SelectionStateTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.state = SelectionState(groups=_groups())

    def test_toggle_flips_membership(self) -> None:
        self.assertTrue(self.state.toggle("scene", "kitchen"))
        self.assertIn("scene:kitchen", self.state)
        self.assertFalse(self.state.toggle("scene", "kitchen"))
        self.assertEqual(len(self.state), 0)

    def test_select_all_in_flat_group(self) -> None:
        delta = self.state.select_all_in_group("scene")
        self.assertEqual(delta.added, {"scene:kitchen", "scene:lab"})
        again = self.state.select_all_in_group("scene")
        self.assertFalse(again.changed)

    def test_select_all_in_hierarchical_group_only_leaves(self) -> None:
        self.state.select_all_in_group("object")
        self.assertEqual(list(self.state), ["object:b", "object:d"])

    def test_select_all_under_only_touches_leaves(self) -> None:
        delta = self.state.select_all_under("object", "a")
        self.assertEqual(delta.added, {"object:b", "object:d"})
        self.assertNotIn("object:a", self.state)
        self.assertNotIn("object:c", self.state)

    def test_clear_under_leaves_other_subtrees(self) -> None:
        self.state.select_all_under("object", "a")
        delta = self.state.clear_under("object", "a>c")
        self.assertEqual(delta.removed, {"object:d"})
        self.assertEqual(list(self.state), ["object:b"])

    def test_unknown_paths_are_no_ops(self) -> None:
        self.assertFalse(self.state.select_all_under("object", "a>missing").changed)
        self.assertFalse(self.state.clear_under("object", "nope").changed)
        self.assertFalse(self.state.select_all_under("scene", "kitchen").changed)
        self.assertFalse(self.state.select_all_in_group("unknown").changed)

    def test_clear_group_removes_every_depth(self) -> None:
        self.state.toggle("object", "a")
        self.state.select_all_in_group("object")
        self.state.toggle("scene", "lab")
        delta = self.state.clear_group("object")
        self.assertEqual(delta.removed, {"object:a", "object:b", "object:d"})
        self.assertEqual(list(self.state), ["scene:lab"])

    def test_reset_empties_and_reports(self) -> None:
        self.state.select_all_in_group("scene")
        self.assertEqual(self.state.reset().removed, {"scene:kitchen", "scene:lab"})
        self.assertFalse(self.state.reset().changed)

    def test_by_key_groups_values(self) -> None:
        self.state.select_all_in_group("scene")
        self.state.toggle("object", "b")
        grouped = {k: sorted(v) for k, v in self.state.by_key().items()}
        self.assertEqual(grouped, {"scene": ["kitchen", "lab"], "object": ["b"]})


if __name__ == "__main__":
    unittest.main()
