from __future__ import annotations

from typing import Dict, Optional, Tuple

from PySide6 import QtCore, QtGui, QtWidgets

from facetscope.index.facets import FacetGroup, HierarchyNode
from facetscope.service.engine import FilterEngine
from facetscope.service.finder import NEXT, PREV
from facetscope.service.scheduler import Debouncer


# Item payload: (kind, key, value, node path)
ItemInfo = Tuple[str, str, str, Optional[str]]
INFO_ROLE = QtCore.Qt.UserRole + 1


class _FinderEdit(QtWidgets.QLineEdit):
    navigateRequested = QtCore.Signal(str)
    commitRequested = QtCore.Signal()
    clearRequested = QtCore.Signal()

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:  # type: ignore[override]
        key = event.key()
        if key == QtCore.Qt.Key_Escape:
            self.clearRequested.emit()
            return
        if key == QtCore.Qt.Key_Up and self.text().strip():
            self.navigateRequested.emit(PREV)
            return
        if key == QtCore.Qt.Key_Down and self.text().strip():
            self.navigateRequested.emit(NEXT)
            return
        if key in (QtCore.Qt.Key_Return, QtCore.Qt.Key_Enter):
            if self.text().strip():
                self.commitRequested.emit()
            return
        super().keyPressEvent(event)


class FacetsPanel(QtWidgets.QWidget):
    def __init__(self, engine: FilterEngine, tooltip_delay_ms: int = 300) -> None:
        super().__init__()
        self.engine = engine
        self._items: Dict[int, QtWidgets.QTreeWidgetItem] = {}
        self._syncing = False
        self._hover: Optional[QtWidgets.QTreeWidgetItem] = None

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # Find bar
        bar = QtWidgets.QHBoxLayout()
        self.find_edit = _FinderEdit()
        self.find_edit.setPlaceholderText("Find filter…")
        self.find_edit.setClearButtonEnabled(True)
        self.prev_btn = QtWidgets.QToolButton()
        self.prev_btn.setText("▲")
        self.next_btn = QtWidgets.QToolButton()
        self.next_btn.setText("▼")
        self.count_label = QtWidgets.QLabel("0/0")
        for w in (self.find_edit, self.prev_btn, self.next_btn, self.count_label):
            bar.addWidget(w)
        layout.addLayout(bar)

        self.tree = QtWidgets.QTreeWidget()
        self.tree.setHeaderHidden(True)
        self.tree.setMouseTracking(True)
        self.tree.viewport().setMouseTracking(True)
        self.tree.setContextMenuPolicy(QtCore.Qt.CustomContextMenu)
        layout.addWidget(self.tree, 1)

        self._tooltip = Debouncer(tooltip_delay_ms, self)
        self._tooltip.fired.connect(self._show_tooltip)

        self.find_edit.textChanged.connect(self._on_find_text)
        self.find_edit.navigateRequested.connect(self._navigate)
        self.find_edit.commitRequested.connect(self._commit)
        self.find_edit.clearRequested.connect(self.clear_search)
        self.prev_btn.clicked.connect(lambda: self._navigate(PREV))
        self.next_btn.clicked.connect(lambda: self._navigate(NEXT))
        self.tree.itemChanged.connect(self._on_item_changed)
        self.tree.itemExpanded.connect(lambda it: self._on_expand(it, True))
        self.tree.itemCollapsed.connect(lambda it: self._on_expand(it, False))
        self.tree.itemEntered.connect(self._on_item_entered)
        self.tree.customContextMenuRequested.connect(self._context_menu)
        self.engine.subscribe(self.sync_selection)

        shortcut = QtGui.QShortcut(QtGui.QKeySequence.Find, self)
        shortcut.activated.connect(self.focus_find)

        self.rebuild()

    # Building

    def rebuild(self) -> None:
        self._syncing = True
        try:
            self.tree.clear()
            self._items.clear()
            for group in self.engine.groups.values():
                self._add_group(group)
        finally:
            self._syncing = False
        self._apply_search_view()

    def _add_group(self, group: FacetGroup) -> None:
        top = QtWidgets.QTreeWidgetItem([group.title])
        top.setData(0, INFO_ROLE, ("group", group.key, "", None))
        self.tree.addTopLevelItem(top)
        if group.is_hierarchical:
            for root in group.sorted_roots():
                self._add_node(top, group.key, root)
        else:
            for value in group.options():
                self._add_option(top, ("option", group.key, value, None), value, checkable=True)
        top.setExpanded(self.engine.finder.expansion.is_group_expanded(group.key))

    def _add_node(self, parent: QtWidgets.QTreeWidgetItem, key: str, node: HierarchyNode) -> None:
        item = self._add_option(parent, ("node", key, node.value, node.path), node.value, checkable=node.is_leaf)
        for child in node.sorted_children():
            self._add_node(item, key, child)
        item.setExpanded(self.engine.finder.expansion.is_node_expanded(key, node.path))

    def _add_option(self, parent: QtWidgets.QTreeWidgetItem, info: ItemInfo, label: str, checkable: bool) -> QtWidgets.QTreeWidgetItem:
        item = QtWidgets.QTreeWidgetItem(parent, [label])
        item.setData(0, INFO_ROLE, info)
        if checkable:
            _kind, key, value, _path = info
            item.setFlags(item.flags() | QtCore.Qt.ItemIsUserCheckable)
            item.setCheckState(0, QtCore.Qt.Checked if self.engine.is_selected(key, value) else QtCore.Qt.Unchecked)
            handle = self.engine.option_handle(key, value)
            if handle is not None:
                self._items.setdefault(handle, item)
        return item

    def item_for(self, key: str, value: str) -> Optional[QtWidgets.QTreeWidgetItem]:
        handle = self.engine.option_handle(key, value)
        return self._items.get(handle) if handle is not None else None

    def _iter_items(self):
        it = QtWidgets.QTreeWidgetItemIterator(self.tree)
        while it.value():
            yield it.value()
            it += 1

    # Selection mirroring

    def sync_selection(self) -> None:
        self._syncing = True
        try:
            for item in self._iter_items():
                kind, key, value, _path = item.data(0, INFO_ROLE)
                if kind == "group" or not (item.flags() & QtCore.Qt.ItemIsUserCheckable):
                    continue
                state = QtCore.Qt.Checked if self.engine.is_selected(key, value) else QtCore.Qt.Unchecked
                if item.checkState(0) != state:
                    item.setCheckState(0, state)
        finally:
            self._syncing = False

    def _on_item_changed(self, item: QtWidgets.QTreeWidgetItem, column: int) -> None:
        if self._syncing:
            return
        kind, key, value, _path = item.data(0, INFO_ROLE)
        if kind == "group":
            return
        wanted = item.checkState(0) == QtCore.Qt.Checked
        if wanted != self.engine.is_selected(key, value):
            self.engine.toggle(key, value)
        # Same value may appear under several parents
        self.sync_selection()

    def _context_menu(self, pos: QtCore.QPoint) -> None:
        item = self.tree.itemAt(pos)
        if item is None:
            return
        kind, key, _value, path = item.data(0, INFO_ROLE)
        menu = QtWidgets.QMenu(self)
        if kind == "group":
            menu.addAction("Select All", lambda: self.engine.select_all_in_group(key))
            menu.addAction("Clear", lambda: self.engine.clear_group(key))
        elif kind == "node" and item.childCount():
            menu.addAction("Select All Below", lambda: self.engine.select_all_under(key, path))
            menu.addAction("Clear Below", lambda: self.engine.clear_under(key, path))
        else:
            return
        menu.exec(self.tree.viewport().mapToGlobal(pos))
        self.sync_selection()

    def _on_expand(self, item: QtWidgets.QTreeWidgetItem, expanded: bool) -> None:
        if self._syncing:
            return
        kind, key, _value, path = item.data(0, INFO_ROLE)
        expansion = self.engine.finder.expansion
        if kind == "group":
            (expansion.expand_group if expanded else expansion.collapse_group)(key)
        elif path:
            (expansion.expand_node if expanded else expansion.collapse_node)(key, path)

    # Find bar

    def focus_find(self) -> None:
        self.find_edit.setFocus()
        self.find_edit.selectAll()

    def clear_search(self) -> None:
        self.find_edit.blockSignals(True)
        self.find_edit.clear()
        self.find_edit.blockSignals(False)
        self.engine.clear_search()
        self._apply_search_view()

    def _on_find_text(self, text: str) -> None:
        self.engine.search(text)
        self._apply_search_view()

    def _navigate(self, direction: str) -> None:
        self.engine.navigate(direction)
        self._apply_search_view()

    def _commit(self) -> None:
        if self.engine.commit_current_match() is not None:
            self.sync_selection()

    def _apply_search_view(self) -> None:
        finder = self.engine.finder
        expansion = finder.expansion
        current = finder.current
        current_item: Optional[QtWidgets.QTreeWidgetItem] = None
        self._syncing = True
        try:
            for item in self._iter_items():
                kind, key, value, path = item.data(0, INFO_ROLE)
                if kind == "group":
                    item.setHidden(finder.is_group_hidden(key))
                    item.setExpanded(expansion.is_group_expanded(key))
                    continue
                item.setHidden(finder.is_option_hidden(key, path or value))
                if path:
                    item.setExpanded(expansion.is_node_expanded(key, path))
                if current is not None and (key, value, path) == (current.key, current.value, current.node_path):
                    current_item = item
        finally:
            self._syncing = False
        total = len(finder.matches)
        self.count_label.setText(f"{finder.current_index + 1 if total else 0}/{total}")
        self.prev_btn.setEnabled(total > 0)
        self.next_btn.setEnabled(total > 0)
        if current_item is not None:
            self.tree.setCurrentItem(current_item)
            self.tree.scrollToItem(current_item, QtWidgets.QAbstractItemView.PositionAtCenter)

    # Tooltips

    def _on_item_entered(self, item: QtWidgets.QTreeWidgetItem, column: int) -> None:
        kind = item.data(0, INFO_ROLE)[0]
        if kind == "group":
            self.hide_tooltip()
            return
        self._hover = item
        self._tooltip.trigger()

    def _show_tooltip(self) -> None:
        if self._hover is None:
            return
        _kind, key, value, _path = self._hover.data(0, INFO_ROLE)
        count = self.engine.count(key, value)
        text = f"{self.engine.filter_label(key, value)}\n{count} dataset{'s' if count != 1 else ''}"
        QtWidgets.QToolTip.showText(QtGui.QCursor.pos(), text, self.tree)

    def hide_tooltip(self) -> None:
        self._tooltip.cancel()
        self._hover = None
        QtWidgets.QToolTip.hideText()

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        self.hide_tooltip()
        super().leaveEvent(event)
