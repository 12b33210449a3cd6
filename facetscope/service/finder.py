from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from facetscope.index.facets import PATH_SEP, FacetGroup, HierarchyNode, filter_id


log = logging.getLogger(__name__)

NEXT = "next"
PREV = "prev"


class FinderState(enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    NAVIGATING = "navigating"


@dataclass(frozen=True)
class FilterMatch:
    label: str
    key: str
    value: str
    node_path: Optional[str] = None
    selectable: bool = True

    @property
    def filter_id(self) -> str:
        return filter_id(self.key, self.value)


def ancestor_paths(node_path: str) -> List[str]:
    parts = node_path.split(PATH_SEP)
    return [PATH_SEP.join(parts[:i]) for i in range(1, len(parts))]


@dataclass
class ExpansionState:
    """Which groups and hierarchy nodes are open in the facet view.

    Groups start expanded, hierarchy nodes start collapsed.
    """

    collapsed_groups: Set[str] = field(default_factory=set)
    expanded_nodes: Set[Tuple[str, str]] = field(default_factory=set)

    def is_group_expanded(self, key: str) -> bool:
        return key not in self.collapsed_groups

    def expand_group(self, key: str) -> None:
        self.collapsed_groups.discard(key)

    def collapse_group(self, key: str) -> None:
        self.collapsed_groups.add(key)

    def is_node_expanded(self, key: str, node_path: str) -> bool:
        return (key, node_path) in self.expanded_nodes

    def expand_node(self, key: str, node_path: str) -> None:
        self.expanded_nodes.add((key, node_path))

    def collapse_node(self, key: str, node_path: str) -> None:
        self.expanded_nodes.discard((key, node_path))

    def reveal(self, key: str, node_path: Optional[str] = None) -> None:
        """Open the group and every ancestor of ``node_path``."""
        self.expand_group(key)
        if node_path:
            for anc in ancestor_paths(node_path):
                self.expand_node(key, anc)


class MatchNavigator:
    """Incremental search over facet option labels.

    Matches follow facet view order: groups in declaration order, flat values
    sorted, hierarchy nodes depth-first with sorted siblings.
    """

    def __init__(self, groups: Optional[Dict[str, FacetGroup]] = None, expansion: Optional[ExpansionState] = None) -> None:
        self.groups: Dict[str, FacetGroup] = groups or {}
        self.expansion = expansion or ExpansionState()
        self.query = ""
        self.matches: List[FilterMatch] = []
        self.current_index = -1
        self._hidden_groups: Set[str] = set()
        self._hidden_options: Set[Tuple[str, str]] = set()

    @property
    def state(self) -> FinderState:
        if not self.query:
            return FinderState.IDLE
        if self.current_index < 0:
            return FinderState.SEARCHING
        return FinderState.NAVIGATING

    @property
    def current(self) -> Optional[FilterMatch]:
        if 0 <= self.current_index < len(self.matches):
            return self.matches[self.current_index]
        return None

    def search(self, query: str) -> List[FilterMatch]:
        self.clear()
        query = (query or "").strip()
        if not query:
            return self.matches
        self.query = query
        needle = query.lower()
        for group in self.groups.values():
            if group.is_hierarchical:
                hits = self._scan_hierarchy(group, needle)
            else:
                hits = self._scan_flat(group, needle)
            if not hits:
                self._hidden_groups.add(group.key)
                continue
            for match in hits:
                self.expansion.reveal(group.key, match.node_path)
            self.matches.extend(hits)
        if self.matches:
            self.current_index = 0
        log.debug("Search %r: %d matches", query, len(self.matches))
        return self.matches

    def navigate(self, direction: str) -> Optional[FilterMatch]:
        if direction not in (NEXT, PREV):
            raise ValueError(f"Unknown direction {direction!r}")
        if not self.matches:
            return None
        step = 1 if direction == NEXT else -1
        self.current_index = (self.current_index + step) % len(self.matches)
        match = self.matches[self.current_index]
        self.expansion.reveal(match.key, match.node_path)
        return match

    def clear(self) -> None:
        self.query = ""
        self.matches = []
        self.current_index = -1
        self._hidden_groups.clear()
        self._hidden_options.clear()

    def refresh(self, groups: Dict[str, FacetGroup]) -> None:
        """Swap in rebuilt groups and re-run the active query, keeping the current match if it survives."""
        previous = self.current
        query = self.query
        self.groups = groups
        if not query:
            return
        self.search(query)
        if previous is None:
            return
        for idx, match in enumerate(self.matches):
            if (match.key, match.value, match.node_path) == (previous.key, previous.value, previous.node_path):
                self.current_index = idx
                break

    def is_group_hidden(self, key: str) -> bool:
        return key in self._hidden_groups

    def is_option_hidden(self, key: str, ident: str) -> bool:
        """``ident`` is the value for flat groups and the node path for hierarchies."""
        return key in self._hidden_groups or (key, ident) in self._hidden_options

    def _scan_flat(self, group: FacetGroup, needle: str) -> List[FilterMatch]:
        hits: List[FilterMatch] = []
        for value in group.options():
            if needle in value.lower():
                hits.append(FilterMatch(label=value, key=group.key, value=value))
            else:
                self._hidden_options.add((group.key, value))
        return hits

    def _scan_hierarchy(self, group: FacetGroup, needle: str) -> List[FilterMatch]:
        hits: List[FilterMatch] = []
        for root in group.sorted_roots():
            self._scan_node(group.key, root, needle, hits)
        return hits

    def _scan_node(self, key: str, node: HierarchyNode, needle: str, hits: List[FilterMatch]) -> None:
        before = len(hits)
        if needle in node.value.lower():
            hits.append(FilterMatch(label=node.value, key=key, value=node.value, node_path=node.path, selectable=node.is_leaf))
        for child in node.sorted_children():
            self._scan_node(key, child, needle, hits)
        if len(hits) == before:
            self._hidden_options.add((key, node.path))
