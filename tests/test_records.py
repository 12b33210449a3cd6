from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from facetscope.index.records import ObjectEntry, Record, RecordsError, load_records


FIXTURE = Path(__file__).with_name("fixtures") / "records.json"


class RecordFromDictTestCase(unittest.TestCase):
    def test_camel_case_and_single_robot_are_normalized(self) -> None:
        rec = Record.from_dict({
            "path": "a/b",
            "robot": "arm1",
            "endEffector": "gripper",
            "scenes": ["kitchen", ""],
            "objects": [{"hierarchy": ["tools", "drill"]}],
            "fps": 30,
        })
        self.assertEqual(rec.robots, ("arm1",))
        self.assertEqual(rec.end_effector, "gripper")
        self.assertEqual(rec.scenes, ("kitchen",))
        self.assertEqual(rec.objects, (ObjectEntry(name="drill", hierarchy=("tools", "drill")),))
        self.assertEqual(rec.extra, {"fps": 30})

    def test_missing_fields_are_empty(self) -> None:
        rec = Record.from_dict({"path": "x/only_path"})
        self.assertEqual(rec.display_name, "only_path")
        for key in ("scene", "robot", "end", "action", "object", "unknown"):
            self.assertEqual(rec.values_for(key), ())

    def test_object_values_cover_every_depth(self) -> None:
        rec = Record.from_dict({"path": "p", "objects": [{"hierarchy": ["kitchen", "drawer", "handle"]}]})
        self.assertEqual(rec.values_for("object"), ("kitchen", "drawer", "handle"))

    def test_joined_hierarchy_string_is_split_into_segments(self) -> None:
        rec = Record.from_dict({
            "path": "p",
            "objects": [
                {"hierarchy": "kitchen>drawer"},
                {"hierarchy": ["tools", "power > drill"]},
                ["bench", "vise"],
            ],
        })
        self.assertEqual(
            [o.hierarchy for o in rec.objects],
            [("kitchen", "drawer"), ("tools", "power", "drill"), ("bench", "vise")],
        )
        self.assertEqual(rec.objects[0].name, "drawer")


class LoadRecordsTestCase(unittest.TestCase):
    def test_fixture_skips_malformed_and_duplicate_entries(self) -> None:
        with self.assertLogs("facetscope.index.records", level="WARNING"):
            records = load_records(FIXTURE)
        self.assertEqual(
            [r.path for r in records],
            ["hub/kitchen_pick", "hub/kitchen_drawer", "hub/workshop_drill", "hub/bare"],
        )
        self.assertEqual(records[0].name, "Kitchen Pick Cup")

    def test_top_level_list_is_accepted(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "list.json"
            path.write_text(json.dumps([{"path": "one"}, {"path": "two"}]), encoding="utf-8")
            self.assertEqual([r.path for r in load_records(path)], ["one", "two"])

    def test_bad_files_raise_records_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "bad.json").write_text("{not json", encoding="utf-8")
            (root / "scalar.json").write_text("42", encoding="utf-8")
            for name in ("bad.json", "scalar.json", "missing.json"):
                with self.assertRaises(RecordsError):
                    load_records(root / name)


if __name__ == "__main__":
    unittest.main()
