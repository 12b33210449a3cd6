from __future__ import annotations

import unittest

from facetscope.index.facets import (
    build_facet_groups,
    filter_id,
    filter_label,
    find_hierarchy_node,
    option_handles,
    split_filter_id,
)
from facetscope.index.records import Record


def _rec(path: str, *hierarchies, **fields) -> Record:
    data = {"path": path, "objects": [{"hierarchy": list(h)} for h in hierarchies]}
    data.update(fields)
    return Record.from_dict(data)


class BuildFacetGroupsTestCase(unittest.TestCase):
    def test_flat_groups_are_unions(self) -> None:
        records = [
            _rec("a", scenes=["kitchen"], robot=["arm1", "arm2"], endEffector="gripper", actions=["pick"]),
            _rec("b", scenes=["kitchen", "lab"], robot="arm1", actions=["pick", "place"]),
            _rec("c"),
        ]
        groups = build_facet_groups(records)
        self.assertEqual(list(groups), ["scene", "robot", "end", "action", "object"])
        self.assertEqual(groups["scene"].values, {"kitchen", "lab"})
        self.assertEqual(groups["robot"].values, {"arm1", "arm2"})
        self.assertEqual(groups["end"].values, {"gripper"})
        self.assertEqual(groups["action"].options(), ["pick", "place"])
        self.assertEqual(groups["end"].title, "end effector")
        self.assertTrue(groups["object"].is_hierarchical)
        self.assertEqual(groups["object"].roots, {})

    def test_leaf_flag_is_independent_of_children(self) -> None:
        # Longer path first, shorter path later: "drawer" must still become a leaf
        groups = build_facet_groups([
            _rec("a", ["kitchen", "drawer", "handle"]),
            _rec("b", ["kitchen", "drawer"]),
        ])
        drawer = find_hierarchy_node(groups["object"], "kitchen>drawer")
        self.assertIsNotNone(drawer)
        self.assertTrue(drawer.is_leaf)
        self.assertIn("handle", drawer.children)
        self.assertFalse(find_hierarchy_node(groups["object"], "kitchen").is_leaf)
        self.assertEqual(drawer.path, "kitchen>drawer")

    def test_tree_shape_does_not_depend_on_record_order(self) -> None:
        records = [
            _rec("a", ["z", "b"]),
            _rec("b", ["a", "c"]),
            _rec("c", ["z", "a", "q"]),
        ]
        forward = build_facet_groups(records)["object"]
        backward = build_facet_groups(list(reversed(records)))["object"]
        walk = lambda g: [(n.path, n.is_leaf) for n in g.walk()]
        self.assertEqual(walk(forward), walk(backward))
        self.assertEqual([n.path for n in forward.walk()], ["a", "a>c", "z", "z>a", "z>a>q", "z>b"])
        self.assertEqual(forward.options(), ["c", "q", "b"])

    def test_find_hierarchy_node_absence(self) -> None:
        groups = build_facet_groups([_rec("a", ["tools", "drill"])])
        self.assertIsNone(find_hierarchy_node(groups["object"], "tools>saw"))
        self.assertIsNone(find_hierarchy_node(groups["object"], ""))
        self.assertIsNone(find_hierarchy_node(groups["scene"], "tools"))
        self.assertIsNone(find_hierarchy_node(None, "tools"))

    def test_string_hierarchy_resolves_by_node_path(self) -> None:
        groups = build_facet_groups([
            Record.from_dict({"path": "a", "objects": [{"hierarchy": "kitchen>drawer>handle"}]}),
        ])
        drawer = find_hierarchy_node(groups["object"], "kitchen>drawer")
        self.assertIsNotNone(drawer)
        self.assertEqual([n.value for n in drawer.leaves()], ["handle"])

    def test_leaves_exclude_the_node_itself(self) -> None:
        groups = build_facet_groups([
            _rec("a", ["kitchen", "drawer"]),
            _rec("b", ["kitchen", "drawer", "handle"]),
            _rec("c", ["kitchen", "cup"]),
        ])
        drawer = find_hierarchy_node(groups["object"], "kitchen>drawer")
        self.assertTrue(drawer.is_leaf)
        self.assertEqual([n.value for n in drawer.leaves()], ["handle"])
        kitchen = find_hierarchy_node(groups["object"], "kitchen")
        self.assertEqual([n.value for n in kitchen.leaves()], ["cup", "drawer", "handle"])

    def test_empty_path_adds_nothing(self) -> None:
        group = build_facet_groups([])["object"]
        group.add_path([])
        self.assertEqual(group.roots, {})


class FilterIdTestCase(unittest.TestCase):
    def test_split_keeps_colons_in_value(self) -> None:
        fid = filter_id("object", "ratio:16:9")
        self.assertEqual(split_filter_id(fid), ("object", "ratio:16:9"))

    def test_labels(self) -> None:
        self.assertEqual(filter_label("end", "gripper"), "End Effector: gripper")
        self.assertEqual(filter_label("custom", "x"), "custom: x")

    def test_handles_follow_presentation_order(self) -> None:
        groups = build_facet_groups([
            _rec("a", ["tools", "drill"], scenes=["lab", "kitchen"]),
        ])
        handles = option_handles(groups)
        self.assertEqual(handles, {"scene:kitchen": 0, "scene:lab": 1, "object:drill": 2})


if __name__ == "__main__":
    unittest.main()
