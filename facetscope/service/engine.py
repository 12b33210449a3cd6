from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from PySide6 import QtCore

from facetscope.index.facets import (
    FacetGroup,
    HierarchyNode,
    build_facet_groups,
    filter_id,
    filter_label,
    find_hierarchy_node,
    option_handles,
)
from facetscope.index.records import Record
from .counts import AffectedCounts
from .finder import FilterMatch, FinderState, MatchNavigator
from .predicate import apply_filters
from .scheduler import DEFAULT_DEBOUNCE_MS, Debouncer
from .selection import SelectionDelta, SelectionState


log = logging.getLogger(__name__)


class FilterEngine(QtCore.QObject):
    """Facet model, selection, search and counts behind one object.

    ``filtersChanged`` is emitted once per debounced burst of selection
    changes; it carries no payload; listeners call ``apply_filters``.
    """

    filtersChanged = QtCore.Signal()

    def __init__(
        self,
        records: Sequence[Record] = (),
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.records: List[Record] = []
        self.groups: Dict[str, FacetGroup] = {}
        self.selection = SelectionState()
        self.finder = MatchNavigator()
        self.counts = AffectedCounts()
        self._handles: Dict[str, int] = {}
        self._scheduler = Debouncer(debounce_ms, self)
        self._scheduler.fired.connect(self.filtersChanged.emit)
        self.build_facet_groups(records)

    # Subscriptions

    def subscribe(self, callback: Callable[[], None]) -> None:
        self.filtersChanged.connect(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        self.filtersChanged.disconnect(callback)

    @property
    def debounce_ms(self) -> int:
        return self._scheduler.interval_ms

    def is_pending(self) -> bool:
        return self._scheduler.is_pending()

    def flush(self) -> bool:
        return self._scheduler.flush()

    # Facet model

    def build_facet_groups(self, records: Optional[Sequence[Record]] = None) -> Dict[str, FacetGroup]:
        if records is not None:
            self.records = list(records)
        self.groups = build_facet_groups(self.records)
        self._handles = option_handles(self.groups)
        self.selection.groups = self.groups
        self.counts.set_records(self.records)
        self.finder.refresh(self.groups)
        log.info("Built facet groups from %d records (%d options)", len(self.records), len(self._handles))
        return self.groups

    def find_hierarchy_node(self, key: str, path: str) -> Optional[HierarchyNode]:
        node = find_hierarchy_node(self.groups.get(key), path)
        if node is None:
            log.debug("No hierarchy node %r in group %r", path, key)
        return node

    def option_handle(self, key: str, value: str) -> Optional[int]:
        return self._handles.get(filter_id(key, value))

    @staticmethod
    def filter_label(key: str, value: str) -> str:
        return filter_label(key, value)

    # Filtering

    def apply_filters(self, query: str = "") -> List[Record]:
        return apply_filters(self.records, self.selection.by_key(), query)

    # Selection

    @property
    def selected_count(self) -> int:
        return len(self.selection)

    def selected_filters(self) -> List[str]:
        return list(self.selection)

    def is_selected(self, key: str, value: str) -> bool:
        return self.selection.is_selected(key, value)

    def toggle(self, key: str, value: str) -> bool:
        selected = self.selection.toggle(key, value)
        self._scheduler.trigger()
        return selected

    def select_all_in_group(self, key: str) -> SelectionDelta:
        return self._notify(self.selection.select_all_in_group(key))

    def clear_group(self, key: str) -> SelectionDelta:
        return self._notify(self.selection.clear_group(key))

    def select_all_under(self, key: str, path: str) -> SelectionDelta:
        return self._notify(self.selection.select_all_under(key, path))

    def clear_under(self, key: str, path: str) -> SelectionDelta:
        return self._notify(self.selection.clear_under(key, path))

    def reset(self) -> SelectionDelta:
        # A stale pending signal must not fire after the state is cleared
        was_pending = self._scheduler.cancel()
        delta = self.selection.reset()
        if delta.changed or was_pending:
            self.filtersChanged.emit()
        return delta

    # Search

    @property
    def search_state(self) -> FinderState:
        return self.finder.state

    def search(self, query: str) -> List[FilterMatch]:
        return self.finder.search(query)

    def navigate(self, direction: str) -> Optional[FilterMatch]:
        return self.finder.navigate(direction)

    def clear_search(self) -> None:
        self.finder.clear()

    def commit_current_match(self) -> Optional[bool]:
        """Toggle the current match. Returns the new selection state, or None if nothing was toggled."""
        match = self.finder.current
        if match is None or not match.selectable:
            return None
        return self.toggle(match.key, match.value)

    # Counts

    def count(self, key: str, value: str) -> int:
        return self.counts.count(key, value)

    def _notify(self, delta: SelectionDelta) -> SelectionDelta:
        if delta.changed:
            self._scheduler.trigger()
        return delta
