from __future__ import annotations

from typing import Sequence

from PySide6 import QtCore, QtWidgets

from facetscope.index.records import Record
from ..models.results_model import RecordsTableModel


class ResultsView(QtWidgets.QTableView):
    pathActivated = QtCore.Signal(str)

    def __init__(self) -> None:
        super().__init__()
        self.setModel(RecordsTableModel())
        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        self.setAlternatingRowColors(True)
        self.setShowGrid(False)
        self.setSortingEnabled(False)
        self.verticalHeader().hide()
        self.horizontalHeader().setStretchLastSection(True)
        self.horizontalHeader().setSectionResizeMode(0, QtWidgets.QHeaderView.Stretch)
        for col in range(1, 5):
            self.horizontalHeader().setSectionResizeMode(col, QtWidgets.QHeaderView.ResizeMode.ResizeToContents)
        self.doubleClicked.connect(self._on_double_clicked)

    def set_rows(self, rows: Sequence[Record]) -> None:
        model: RecordsTableModel = self.model()  # type: ignore[assignment]
        model.set_rows(rows)

    def row_count(self) -> int:
        return self.model().rowCount()

    def _on_double_clicked(self, index: QtCore.QModelIndex) -> None:
        model: RecordsTableModel = self.model()  # type: ignore[assignment]
        self.pathActivated.emit(model.row_path(index.row()))
