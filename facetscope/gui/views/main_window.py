from __future__ import annotations

import logging
from pathlib import Path

from PySide6 import QtCore, QtGui, QtWidgets

from facetscope.index.records import RecordsError, load_records
from facetscope.service.engine import FilterEngine
from facetscope.service.scheduler import Debouncer
from .facets_panel import FacetsPanel
from .results_view import ResultsView


log = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    # Emitted from the watcher thread; delivered queued on the UI thread
    recordsFileChanged = QtCore.Signal(str)

    def __init__(
        self,
        engine: FilterEngine,
        records_path: Path | None = None,
        watcher=None,
        tooltip_delay_ms: int = 300,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"FacetScope - {records_path.name}" if records_path else "FacetScope")
        self.engine = engine
        self.records_path = records_path
        self.watcher = watcher

        # Toolbar: name search, badge, reset
        toolbar = QtWidgets.QToolBar()
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        self.search_edit = QtWidgets.QLineEdit()
        self.search_edit.setPlaceholderText("Search datasets by name…")
        self.search_edit.setClearButtonEnabled(True)
        toolbar.addWidget(self.search_edit)
        toolbar.addSeparator()
        self.badge = QtWidgets.QLabel("")
        toolbar.addWidget(self.badge)
        self.reset_btn = QtWidgets.QToolButton()
        self.reset_btn.setText("Reset Filters")
        toolbar.addWidget(self.reset_btn)

        splitter = QtWidgets.QSplitter()
        self.setCentralWidget(splitter)
        self.facets_panel = FacetsPanel(engine, tooltip_delay_ms=tooltip_delay_ms)
        splitter.addWidget(self.facets_panel)
        self.results = ResultsView()
        splitter.addWidget(self.results)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)

        self.status = self.statusBar()
        self._status_label = QtWidgets.QLabel("Ready")
        self.status.addPermanentWidget(self._status_label)

        # Name search goes through its own quiet period
        self._name_search = Debouncer(engine.debounce_ms, self)
        self._name_search.fired.connect(self.refresh_results)
        self.search_edit.textChanged.connect(self._name_search.trigger)

        self.reset_btn.clicked.connect(self.reset_filters)
        self.engine.subscribe(self._on_filters_changed)
        self._subscribed = True
        self.results.pathActivated.connect(self._open_path)
        self.recordsFileChanged.connect(self.reload_records)
        self.refresh_results()

    def _set_status(self, text: str) -> None:
        self._status_label.setText(text)

    def _on_filters_changed(self) -> None:
        self.refresh_results()

    def refresh_results(self) -> None:
        rows = self.engine.apply_filters(self.search_edit.text())
        self.results.set_rows(rows)
        count = self.engine.selected_count
        self.badge.setText(f"{count} filter{'s' if count != 1 else ''}" if count else "")
        self._set_status(f"{len(rows)} of {len(self.engine.records)} datasets")

    def reset_filters(self) -> None:
        self._name_search.cancel()
        self.search_edit.blockSignals(True)
        self.search_edit.clear()
        self.search_edit.blockSignals(False)
        self.facets_panel.hide_tooltip()
        self.engine.reset()
        self.facets_panel.sync_selection()
        self.refresh_results()

    @QtCore.Slot(str)
    def reload_records(self, path: str) -> None:
        try:
            records = load_records(path)
        except RecordsError as exc:
            log.warning("%s", exc)
            self._set_status(str(exc))
            return
        self.engine.build_facet_groups(records)
        self.facets_panel.rebuild()
        self.refresh_results()

    def _open_path(self, path: str) -> None:
        QtGui.QDesktopServices.openUrl(QtCore.QUrl.fromLocalFile(path))

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        if self.watcher is not None:
            self.watcher.stop()
        if self._subscribed:
            self.engine.unsubscribe(self._on_filters_changed)
            self._subscribed = False
        super().closeEvent(event)
