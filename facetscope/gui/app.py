from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from PySide6 import QtWidgets

from facetscope.config.settings import (
    Settings,
    default_debounce_ms,
    default_tooltip_delay_ms,
    resolve_records_path,
)
from facetscope.index.records import Record, RecordsError, load_records
from facetscope.service.engine import FilterEngine
from facetscope.service.watcher import RecordsWatcher
from .views.main_window import MainWindow


log = logging.getLogger(__name__)


def _initial_records(path: Path | None) -> List[Record]:
    if path is None:
        log.info("No records file configured; starting empty")
        return []
    try:
        return load_records(path)
    except RecordsError as exc:
        log.error("%s", exc)
        return []


def run_gui(records_path: Path | None = None) -> None:
    # Basic logging
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    app.setOrganizationName("FacetScope")
    app.setApplicationName("FacetScope")

    settings = Settings.load()
    path = Path(records_path).expanduser() if records_path else resolve_records_path(settings)
    records = _initial_records(path)
    if path is not None and records and str(path) != settings.records_path:
        settings.records_path = str(path)
        try:
            settings.save()
        except OSError:
            log.warning("Could not save settings to remember %s", path)

    engine = FilterEngine(records, debounce_ms=default_debounce_ms())
    win = MainWindow(engine, records_path=path, tooltip_delay_ms=default_tooltip_delay_ms())
    if path is not None and path.parent.is_dir() and settings.watch_records:
        win.watcher = RecordsWatcher(path, lambda p: win.recordsFileChanged.emit(str(p)))
        win.watcher.start()
    win.resize(1250, 760)
    win.show()

    app.exec()


if __name__ == "__main__":
    run_gui()
