from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Set

from facetscope.index.facets import FacetGroup, filter_id, find_hierarchy_node, split_filter_id


@dataclass(frozen=True)
class SelectionDelta:
    added: FrozenSet[str] = frozenset()
    removed: FrozenSet[str] = frozenset()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


@dataclass
class SelectionState:
    """Set of active FilterIds.

    All operations only mutate the member set and report what changed;
    notifying listeners is the engine's job.
    """

    groups: Dict[str, FacetGroup] = field(default_factory=dict)
    _selected: Set[str] = field(default_factory=set)

    def __contains__(self, fid: str) -> bool:
        return fid in self._selected

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._selected))

    def __len__(self) -> int:
        return len(self._selected)

    def is_selected(self, key: str, value: str) -> bool:
        return filter_id(key, value) in self._selected

    def by_key(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for fid in self._selected:
            key, value = split_filter_id(fid)
            out.setdefault(key, []).append(value)
        return out

    def toggle(self, key: str, value: str) -> bool:
        fid = filter_id(key, value)
        if fid in self._selected:
            self._selected.discard(fid)
            return False
        self._selected.add(fid)
        return True

    def select_all_in_group(self, key: str) -> SelectionDelta:
        group = self.groups.get(key)
        if group is None:
            return SelectionDelta()
        return self._add(key, group.options())

    def clear_group(self, key: str) -> SelectionDelta:
        doomed = [fid for fid in self._selected if split_filter_id(fid)[0] == key]
        self._selected.difference_update(doomed)
        return SelectionDelta(removed=frozenset(doomed))

    def select_all_under(self, key: str, path: str) -> SelectionDelta:
        node = find_hierarchy_node(self.groups.get(key), path)
        if node is None:
            return SelectionDelta()
        return self._add(key, (n.value for n in node.leaves()))

    def clear_under(self, key: str, path: str) -> SelectionDelta:
        node = find_hierarchy_node(self.groups.get(key), path)
        if node is None:
            return SelectionDelta()
        doomed = {filter_id(key, n.value) for n in node.leaves()} & self._selected
        self._selected.difference_update(doomed)
        return SelectionDelta(removed=frozenset(doomed))

    def reset(self) -> SelectionDelta:
        removed = frozenset(self._selected)
        self._selected.clear()
        return SelectionDelta(removed=removed)

    def _add(self, key: str, values: Iterable[str]) -> SelectionDelta:
        added = {filter_id(key, v) for v in values} - self._selected
        self._selected.update(added)
        return SelectionDelta(added=frozenset(added))
