from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from facetscope.index.facets import FACET_DEFINITIONS, filter_id
from facetscope.index.records import Record


log = logging.getLogger(__name__)


class AffectedCounts:
    """Per-FilterId record counts, independent of the current selection.

    The whole table is invalidated together and rebuilt lazily on the next
    lookup.
    """

    def __init__(self, records: Sequence[Record] = ()) -> None:
        self._records: Sequence[Record] = records
        self._counts: Optional[Dict[str, int]] = None

    def set_records(self, records: Sequence[Record]) -> None:
        self._records = records
        self.invalidate()

    def invalidate(self) -> None:
        self._counts = None

    @property
    def is_valid(self) -> bool:
        return self._counts is not None

    def count(self, key: str, value: str) -> int:
        if self._counts is None:
            self._counts = self._compute()
        return self._counts.get(filter_id(key, value), 0)

    def _compute(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for rec in self._records:
            for key, _title, _kind in FACET_DEFINITIONS:
                # A record counts once per value, however many times it carries it
                for value in set(rec.values_for(key)):
                    fid = filter_id(key, value)
                    counts[fid] = counts.get(fid, 0) + 1
        log.debug("Computed affected counts for %d filter ids over %d records", len(counts), len(self._records))
        return counts
