"""Case pool providers: the ordered list of case ids a new session shuffles."""

from typing import Any, Dict, Iterable, List

from reading_engine.store import CASES, DocumentStore, doc_path


class StoreCasePoolProvider:
    """Reads case ids from the cases collection (seeded by scripts/seed_cases.py)."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_case_ids(self) -> List[str]:
        return sorted(d["case_id"] for d in self._store.list_collection(CASES) if d.get("case_id"))

    def get_cases(self) -> List[Dict[str, Any]]:
        return sorted(self._store.list_collection(CASES), key=lambda d: d.get("case_id", ""))

    def put_cases(self, cases: Iterable[Dict[str, Any]]) -> int:
        """Write case documents keyed by case_id. Returns how many were written."""
        count = 0
        for case in cases:
            self._store.put(doc_path(CASES, case["case_id"]), dict(case))
            count += 1
        return count


class StaticCasePoolProvider:
    """Fixed list of case ids (tests and offline runs)."""

    def __init__(self, case_ids: Iterable[str]):
        self._case_ids = list(case_ids)

    def get_case_ids(self) -> List[str]:
        return list(self._case_ids)
