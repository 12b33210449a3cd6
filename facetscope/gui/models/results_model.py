from __future__ import annotations

from typing import List, Sequence

from PySide6 import QtCore

from facetscope.index.records import Record


class RecordsTableModel(QtCore.QAbstractTableModel):
    HEADERS = ["Name", "Scene", "Robot", "End Effector", "Action", "Objects"]

    def __init__(self, rows: Sequence[Record] | None = None) -> None:
        super().__init__()
        self._rows: List[Record] = list(rows or [])

    def set_rows(self, rows: Sequence[Record]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        rec = self._rows[index.row()]
        col = index.column()
        if role == QtCore.Qt.DisplayRole:
            if col == 0:
                return rec.display_name
            if col == 1:
                return ", ".join(rec.scenes)
            if col == 2:
                return ", ".join(rec.robots)
            if col == 3:
                return rec.end_effector or ""
            if col == 4:
                return ", ".join(rec.actions)
            if col == 5:
                return "; ".join(" > ".join(o.hierarchy) for o in rec.objects)
        if role == QtCore.Qt.ToolTipRole:
            return rec.path
        return None

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation, role: int = QtCore.Qt.DisplayRole):  # type: ignore[override]
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return self.HEADERS[section]
        return None

    def row_path(self, row: int) -> str:
        return self._rows[row].path
