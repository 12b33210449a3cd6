from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .records import PATH_SEP, Record


FLAT = "flat"
HIERARCHICAL = "hierarchical"

# (key, title, type) in declaration order
FACET_DEFINITIONS: Tuple[Tuple[str, str, str], ...] = (
    ("scene", "scene", FLAT),
    ("robot", "robot", FLAT),
    ("end", "end effector", FLAT),
    ("action", "action", FLAT),
    ("object", "operation object", HIERARCHICAL),
)

KEY_LABELS: Dict[str, str] = {
    "scene": "Scene",
    "robot": "Robot",
    "end": "End Effector",
    "action": "Action",
    "object": "Object",
}


def filter_id(key: str, value: str) -> str:
    return f"{key}:{value}"


def split_filter_id(fid: str) -> Tuple[str, str]:
    key, _, value = fid.partition(":")
    return key, value


def filter_label(key: str, value: str) -> str:
    return f"{KEY_LABELS.get(key, key)}: {value}"


@dataclass
class HierarchyNode:
    value: str
    path: str
    children: Dict[str, "HierarchyNode"] = field(default_factory=dict)
    # Independent of children: a node can end one record's path and continue another's
    is_leaf: bool = False

    def sorted_children(self) -> List["HierarchyNode"]:
        return [self.children[k] for k in sorted(self.children)]

    def walk(self) -> Iterator["HierarchyNode"]:
        """Depth-first, self first, siblings in lexicographic order."""
        yield self
        for child in self.sorted_children():
            yield from child.walk()

    def descendants(self) -> Iterator["HierarchyNode"]:
        for child in self.sorted_children():
            yield from child.walk()

    def leaves(self) -> Iterator["HierarchyNode"]:
        """Leaf-flagged descendants, never the node itself."""
        return (n for n in self.descendants() if n.is_leaf)


@dataclass
class FacetGroup:
    key: str
    title: str
    type: str
    values: Set[str] = field(default_factory=set)
    roots: Dict[str, HierarchyNode] = field(default_factory=dict)

    @property
    def is_hierarchical(self) -> bool:
        return self.type == HIERARCHICAL

    def sorted_roots(self) -> List[HierarchyNode]:
        return [self.roots[k] for k in sorted(self.roots)]

    def walk(self) -> Iterator[HierarchyNode]:
        for root in self.sorted_roots():
            yield from root.walk()

    def options(self) -> List[str]:
        """Selectable values in presentation order."""
        if self.is_hierarchical:
            return [n.value for n in self.walk() if n.is_leaf]
        return sorted(self.values)

    def add_path(self, levels: Sequence[str]) -> None:
        current = self.roots
        node: Optional[HierarchyNode] = None
        parent_path = ""
        for level in levels:
            node = current.get(level)
            if node is None:
                path = f"{parent_path}{PATH_SEP}{level}" if parent_path else level
                node = HierarchyNode(value=level, path=path)
                current[level] = node
            parent_path = node.path
            current = node.children
        if node is not None:
            node.is_leaf = True


def build_facet_groups(records: Sequence[Record]) -> Dict[str, FacetGroup]:
    groups: Dict[str, FacetGroup] = {
        key: FacetGroup(key=key, title=title, type=kind) for key, title, kind in FACET_DEFINITIONS
    }
    for rec in records:
        for key, _title, kind in FACET_DEFINITIONS:
            if kind == FLAT:
                groups[key].values.update(rec.values_for(key))
        for obj in rec.objects:
            groups["object"].add_path(obj.hierarchy)
    return groups


def find_hierarchy_node(group: Optional[FacetGroup], path: str) -> Optional[HierarchyNode]:
    if group is None or not group.is_hierarchical or not path:
        return None
    current = group.roots
    node: Optional[HierarchyNode] = None
    for part in path.split(PATH_SEP):
        node = current.get(part)
        if node is None:
            return None
        current = node.children
    return node


def option_handles(groups: Dict[str, FacetGroup]) -> Dict[str, int]:
    handles: Dict[str, int] = {}
    for group in groups.values():
        for value in group.options():
            handles.setdefault(filter_id(group.key, value), len(handles))
    return handles
