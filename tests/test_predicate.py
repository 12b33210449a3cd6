from __future__ import annotations

import unittest

from facetscope.index.records import Record
from facetscope.service.predicate import apply_filters


A = Record.from_dict({"path": "a", "name": "Kitchen Arm One", "scenes": ["kitchen"], "robot": "arm1"})
B = Record.from_dict({"path": "b", "name": "Kitchen Arm Two", "scenes": ["kitchen"], "robot": ["arm2", "arm3"]})
C = Record.from_dict({
    "path": "c",
    "name": "Drill",
    "scenes": ["workshop"],
    "endEffector": "gripper",
    "objects": [{"hierarchy": ["tools", "drill"]}],
})
RECORDS = [A, B, C]


class ApplyFiltersTestCase(unittest.TestCase):
    def test_no_selection_no_query_returns_everything_in_order(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {}), RECORDS)

    def test_and_across_groups(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {"scene": ["kitchen"], "robot": ["arm1"]}), [A])

    def test_or_within_group(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {"scene": ["kitchen"]}), [A, B])
        self.assertEqual(apply_filters(RECORDS, {"robot": ["arm3", "arm1"]}), [A, B])

    def test_hierarchy_matches_ancestor_and_leaf(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {"object": ["tools"]}), [C])
        self.assertEqual(apply_filters(RECORDS, {"object": ["drill"]}), [C])

    def test_single_valued_end_effector(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {"end": ["gripper"]}), [C])
        self.assertEqual(apply_filters(RECORDS, {"end": ["suction"]}), [])

    def test_empty_group_imposes_nothing(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {"scene": []}), RECORDS)

    def test_query_is_case_insensitive_substring(self) -> None:
        self.assertEqual(apply_filters(RECORDS, {}, "ARM t"), [B])
        self.assertEqual(apply_filters(RECORDS, {"scene": ["kitchen"]}, "drill"), [])


if __name__ == "__main__":
    unittest.main()
