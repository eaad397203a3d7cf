"""
Reader identifier allocation.

Each facility document carries a counter (next_reader_number) and a pool of
freed numbers (recycled_numbers). Allocation takes the smallest recycled number
when one exists, otherwise the counter value, inside a store transaction so
concurrent registrations at one facility never share a number.
"""

import logging

from .errors import FacilityNotFoundError, InvariantViolationError
from .models.reader import AllocatedReaderId
from .store import DocumentStore, Transaction, facility_path

logger = logging.getLogger(__name__)


def format_reader_id(prefix: str, reader_number: int) -> str:
    """Human-readable id: <prefix>_<number padded to 3 digits>."""
    return f"{prefix}_{reader_number:03d}"


class ReaderIdAllocator:
    """Issues unique reader ids per facility and takes freed numbers back."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def allocate(self, facility_id: str) -> AllocatedReaderId:
        path = facility_path(facility_id)

        def _allocate(txn: Transaction) -> AllocatedReaderId:
            facility = txn.get(path)
            if facility is None:
                raise FacilityNotFoundError(facility_id)
            recycled = sorted(set(int(n) for n in facility.get("recycled_numbers") or []))
            next_number = int(facility.get("next_reader_number") or 1)
            if recycled:
                number = recycled[0]
                if number >= next_number:
                    raise InvariantViolationError(
                        f"facility {facility_id}: recycled number {number} was never issued "
                        f"(next_reader_number={next_number})"
                    )
                updated = dict(facility, recycled_numbers=recycled[1:])
            else:
                number = next_number
                updated = dict(facility, next_reader_number=next_number + 1)
            txn.set(path, updated)
            return AllocatedReaderId(
                reader_id=format_reader_id(facility["prefix"], number),
                reader_number=number,
            )

        allocated = self._store.run_transaction(_allocate)
        logger.info("[allocator] facility=%s issued %s", facility_id, allocated.reader_id)
        return allocated

    def recycle(self, facility_id: str, reader_number: int) -> None:
        """Return a number to the facility's pool. Adding a number twice is a no-op."""
        path = facility_path(facility_id)

        def _recycle(current):
            if current is None:
                raise FacilityNotFoundError(facility_id)
            pending = set(int(n) for n in current.get("recycled_numbers") or [])
            if reader_number in pending:
                return None, False
            if reader_number >= int(current.get("next_reader_number") or 1):
                raise InvariantViolationError(
                    f"facility {facility_id}: cannot recycle {reader_number}, it was never issued"
                )
            pending.add(reader_number)
            return dict(current, recycled_numbers=sorted(pending)), True

        if self._store.atomic_update(path, _recycle):
            logger.info("[allocator] facility=%s recycled number %d", facility_id, reader_number)
