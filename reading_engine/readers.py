"""
Reader registry: facilities, reader registration, soft delete with data purge,
and role resolution.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .allocator import ReaderIdAllocator
from .errors import (
    DuplicateError,
    FacilityNotFoundError,
    ReaderDisabledError,
    ReaderNotFoundError,
)
from .models.catalog import ExperienceLevel
from .models.reader import Facility, ReaderProfile, UserRole
from .store import (
    FACILITIES,
    READERS,
    SESSIONS,
    DocumentStore,
    Transaction,
    facility_path,
    reader_path,
    result_path,
    results_collection,
    session_path,
)
from .utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    """Normalize for use as reader doc id: strip and lowercase."""
    return email.strip().lower()


class ReaderRegistry:
    """Facility and reader records in the shared store."""

    def __init__(
        self,
        store: DocumentStore,
        allocator: Optional[ReaderIdAllocator] = None,
        clock: Clock = utc_now,
    ):
        self._store = store
        self._allocator = allocator or ReaderIdAllocator(store)
        self._clock = clock

    # ------------------------------------------------------------------
    # Facilities
    # ------------------------------------------------------------------

    def create_facility(
        self,
        name: str,
        slug: str,
        prefix: str,
        admins: Optional[List[str]] = None,
        facility_id: Optional[str] = None,
    ) -> Facility:
        name, slug, prefix = name.strip(), slug.strip().lower(), prefix.strip()
        if not name or not slug or not prefix:
            raise ValueError("name, slug and prefix are required")
        if self.get_facility_by_slug(slug) is not None:
            raise DuplicateError(f"Facility slug already in use: {slug}")
        facility = Facility(
            facility_id=facility_id or slug,
            name=name,
            slug=slug,
            prefix=prefix,
            admins=admins or [],
            created_at=self._clock(),
        )
        path = facility_path(facility.facility_id)

        def _create(txn: Transaction) -> None:
            if txn.get(path) is not None:
                raise DuplicateError(f"Facility already exists: {facility.facility_id}")
            txn.set(path, facility.to_document())

        self._store.run_transaction(_create)
        logger.info("[registry] created facility %s (prefix=%s)", facility.facility_id, prefix)
        return facility

    def get_facility(self, facility_id: str) -> Facility:
        data = self._store.get(facility_path(facility_id))
        if data is None:
            raise FacilityNotFoundError(facility_id)
        return Facility.model_validate(data)

    def get_facility_by_slug(self, slug: str) -> Optional[Facility]:
        docs = self._store.query(FACILITIES, slug=slug.strip().lower())
        return Facility.model_validate(docs[0]) if docs else None

    def list_facilities(self) -> List[Facility]:
        facilities = [Facility.model_validate(d) for d in self._store.list_collection(FACILITIES)]
        return sorted(facilities, key=lambda f: f.name)

    def facilities_for_admin(self, email: str) -> List[Facility]:
        email = _normalize_email(email)
        return [f for f in self.list_facilities() if email in f.admins]

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        facility_id: str,
        reader_level: Optional[ExperienceLevel] = None,
        display_name: Optional[str] = None,
    ) -> Tuple[ReaderProfile, bool]:
        """
        Return (profile, created). An active reader gets their existing profile
        back; a soft-deleted reader may not register again.
        """
        email = _normalize_email(email)
        if not email:
            raise ValueError("email cannot be empty")
        existing = self._store.get(reader_path(email))
        if existing is not None:
            profile = ReaderProfile.model_validate(existing)
            if profile.disabled:
                raise ReaderDisabledError(f"Reader {email} was removed and cannot register again")
            return profile, False

        facility = self.get_facility(facility_id)
        allocated = self._allocator.allocate(facility.facility_id)
        profile = ReaderProfile(
            email=email,
            reader_id=allocated.reader_id,
            reader_number=allocated.reader_number,
            facility_id=facility.facility_id,
            facility_name=facility.name,
            reader_level=reader_level,
            display_name=display_name,
            created_at=self._clock(),
        )
        path = reader_path(email)

        def _create(txn: Transaction) -> Optional[dict]:
            current = txn.get(path)
            if current is not None:
                return current
            txn.set(path, profile.to_document())
            return None

        raced = self._store.run_transaction(_create)
        if raced is not None:
            # A concurrent registration for the same email won; give the number back
            self._allocator.recycle(facility.facility_id, allocated.reader_number)
            return ReaderProfile.model_validate(raced), False
        logger.info("[registry] registered %s as %s", email, profile.reader_id)
        return profile, True

    def get_profile(self, email: str, include_disabled: bool = False) -> ReaderProfile:
        data = self._store.get(reader_path(email))
        if data is None:
            raise ReaderNotFoundError(email)
        profile = ReaderProfile.model_validate(data)
        if profile.disabled and not include_disabled:
            raise ReaderNotFoundError(email)
        return profile

    def list_readers(self, facility_id: Optional[str] = None) -> List[ReaderProfile]:
        filters = {"disabled": False}
        if facility_id:
            filters["facility_id"] = facility_id
        readers = [ReaderProfile.model_validate(d) for d in self._store.query(READERS, **filters)]
        return sorted(readers, key=lambda r: r.reader_id)

    def update_level(self, email: str, reader_level: ExperienceLevel) -> ReaderProfile:
        level = ExperienceLevel(reader_level)

        def _update(current):
            if current is None or current.get("disabled"):
                raise ReaderNotFoundError(email)
            updated = dict(current, reader_level=level.value)
            return updated, ReaderProfile.model_validate(updated)

        return self._store.atomic_update(reader_path(email), _update)

    def soft_delete(self, email: str) -> int:
        """
        Disable the reader, return their number to the facility pool, and purge
        their sessions and results. Returns the number of documents deleted.
        """

        def _disable(current):
            if current is None:
                raise ReaderNotFoundError(email)
            profile = ReaderProfile.model_validate(current)
            if profile.disabled:
                return None, (profile, False)
            return dict(current, disabled=True), (profile, True)

        profile, newly_disabled = self._store.atomic_update(reader_path(email), _disable)
        if not newly_disabled:
            # Number and data were released by the first delete; the number
            # may already belong to someone else.
            logger.info("[registry] %s is already removed; nothing to do", profile.email)
            return 0
        self._allocator.recycle(profile.facility_id, profile.reader_number)

        paths = []
        for session in self._store.query(SESSIONS, reader_id=profile.reader_id):
            sid = session["session_id"]
            for result in self._store.list_collection(results_collection(sid)):
                paths.append(result_path(sid, result["case_id"]))
            paths.append(session_path(sid))
        self._store.delete_many(paths)
        logger.info(
            "[registry] soft-deleted %s (%s), purged %d documents",
            profile.email, profile.reader_id, len(paths),
        )
        return len(paths)

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def resolve_role(self, email: str, super_admin_emails: Iterable[str]) -> Tuple[UserRole, List[Facility]]:
        """Role for an email. The super-admin list is configuration passed in by the caller."""
        email = _normalize_email(email)
        if email in {_normalize_email(e) for e in super_admin_emails if e and e.strip()}:
            return UserRole.SUPER_ADMIN, []
        facilities = self.facilities_for_admin(email)
        if facilities:
            return UserRole.FACILITY_ADMIN, facilities
        return UserRole.READER, []
