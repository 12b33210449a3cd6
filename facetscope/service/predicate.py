from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Set

from facetscope.index.records import Record


def matches_query(record: Record, query: str) -> bool:
    if not query:
        return True
    return query.lower() in record.display_name.lower()


def matches_facets(record: Record, selected: Dict[str, Set[str]]) -> bool:
    # AND across facet keys, OR within a key
    for key, wanted in selected.items():
        if wanted.isdisjoint(record.values_for(key)):
            return False
    return True


def apply_filters(records: Sequence[Record], selected: Dict[str, Iterable[str]], query: str = "") -> List[Record]:
    """Return the records passing both the name query and the facet selection, in input order."""
    wanted = {key: set(values) for key, values in selected.items()}
    wanted = {key: values for key, values in wanted.items() if values}
    return [r for r in records if matches_query(r, query) and matches_facets(r, wanted)]
