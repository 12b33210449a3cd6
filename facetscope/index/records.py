from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


log = logging.getLogger(__name__)

# Joins object hierarchy segments into a node path
PATH_SEP = ">"


class RecordsError(Exception):
    """Raised when a records file cannot be read or has the wrong shape."""


@dataclass(frozen=True)
class ObjectEntry:
    name: str
    hierarchy: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Record:
    path: str
    name: str = ""
    scenes: Tuple[str, ...] = ()
    robots: Tuple[str, ...] = ()
    end_effector: Optional[str] = None
    actions: Tuple[str, ...] = ()
    objects: Tuple[ObjectEntry, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def display_name(self) -> str:
        return self.name or self.path.rstrip("/").rsplit("/", 1)[-1]

    def hierarchy_segments(self) -> Tuple[str, ...]:
        # Every segment at any depth of every object path
        return tuple(seg for obj in self.objects for seg in obj.hierarchy)

    def values_for(self, key: str) -> Tuple[str, ...]:
        if key == "scene":
            return self.scenes
        if key == "robot":
            return self.robots
        if key == "end":
            return (self.end_effector,) if self.end_effector else ()
        if key == "action":
            return self.actions
        if key == "object":
            return self.hierarchy_segments()
        return ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Record":
        path = str(data["path"])
        known = {"path", "name", "scenes", "robot", "robots", "endEffector", "end_effector", "actions", "objects"}
        robots = data.get("robots", data.get("robot"))
        end = data.get("end_effector", data.get("endEffector"))
        return cls(
            path=path,
            name=str(data.get("name") or ""),
            scenes=_str_tuple(data.get("scenes")),
            robots=_str_tuple(robots),
            end_effector=str(end) if end else None,
            actions=_str_tuple(data.get("actions")),
            objects=_objects(data.get("objects")),
            extra={k: v for k, v in data.items() if k not in known},
        )


def _str_tuple(raw: Any) -> Tuple[str, ...]:
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, Iterable):
        return tuple(str(v) for v in raw if v is not None and v != "")
    return (str(raw),)


def _hierarchy(raw: Any) -> Tuple[str, ...]:
    """Object path segments. A segment holding PATH_SEP is split into its parts."""
    segments: List[str] = []
    for seg in _str_tuple(raw):
        if PATH_SEP not in seg:
            segments.append(seg)
            continue
        parts = [p.strip() for p in seg.split(PATH_SEP) if p.strip()]
        log.debug("Splitting object path %r into %d segments", seg, len(parts))
        segments.extend(parts)
    return tuple(segments)


def _objects(raw: Any) -> Tuple[ObjectEntry, ...]:
    if not isinstance(raw, list):
        return ()
    out: List[ObjectEntry] = []
    for item in raw:
        if isinstance(item, Mapping):
            hierarchy = _hierarchy(item.get("hierarchy"))
            name = str(item.get("name") or (hierarchy[-1] if hierarchy else ""))
        elif isinstance(item, (list, tuple)):
            hierarchy = _hierarchy(item)
            name = hierarchy[-1] if hierarchy else ""
        else:
            continue
        out.append(ObjectEntry(name=name, hierarchy=hierarchy))
    return tuple(out)


def parse_records(items: Iterable[Any]) -> List[Record]:
    records: List[Record] = []
    seen: set[str] = set()
    for idx, item in enumerate(items):
        if not isinstance(item, Mapping) or not item.get("path"):
            log.warning("Skipping record #%d: not an object with a path", idx)
            continue
        rec = Record.from_dict(item)
        if rec.path in seen:
            log.warning("Skipping duplicate record path %s", rec.path)
            continue
        seen.add(rec.path)
        records.append(rec)
    return records


def load_records(path: Path | str) -> List[Record]:
    p = Path(path).expanduser()
    try:
        data = json.loads(p.read_text("utf-8"))
    except OSError as exc:
        raise RecordsError(f"Cannot read records file {p}: {exc}") from exc
    except ValueError as exc:
        raise RecordsError(f"Invalid JSON in {p}: {exc}") from exc
    if isinstance(data, Mapping):
        data = data.get("datasets", data.get("records"))
    if not isinstance(data, list):
        raise RecordsError(f"{p} must contain a list of records")
    records = parse_records(data)
    log.info("Loaded %d records from %s", len(records), p)
    return records
