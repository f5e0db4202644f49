from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.camping_gate.camping_gate.access.service import CampingAccessPolicy
from src.camping_gate.camping_gate.admission.service import AdmissionResolver
from src.camping_gate.camping_gate.core.constants import ALREADY_ADMITTED
from src.camping_gate.camping_gate.core.enums import MembershipStatus, Permission, Role
from src.camping_gate.camping_gate.core.exceptions import ConflictError
from src.camping_gate.camping_gate.identity.model import Affiliate, FamilyGroupMember, FamilyMember, Guest, Person
from src.camping_gate.camping_gate.shifts.model import Shift, ShiftVisit
from src.camping_gate.camping_gate.shifts.service import ShiftService
from src.camping_gate.camping_gate.sync.model import SyncLog
from src.camping_gate.camping_gate.sync.service import SyncService
from src.camping_gate.camping_gate.users.model import RoleAssignment, User
from src.camping_gate.camping_gate.visits.model import DailyVisit, Visit, VisitRecord, VisitWrite
from src.camping_gate.camping_gate.visits.service import VisitService

ADMIN_ID = 1
OPERATOR_CAMPING_1 = 2
OPERATOR_CAMPING_2 = 3
OFFLINE_DEVICE = 4
AFFILIATE_USER = 5

CAMPING_PERMISSIONS = (
    Permission.READ_AFFILIATES.value,
    Permission.CREATE_VISITS.value,
    Permission.READ_VISITS.value,
    Permission.OPEN_SHIFT.value,
    Permission.CLOSE_SHIFT.value,
    Permission.SYNC_VISITS.value,
)


@dataclass
class InMemoryIdentity:
    people: Dict[int, Person] = field(default_factory=dict)
    affiliates: Dict[int, Affiliate] = field(default_factory=dict)
    family_members: List[FamilyMember] = field(default_factory=list)
    guests: List[Guest] = field(default_factory=list)
    qr_updates: List[tuple] = field(default_factory=list)

    def add_person(self, person_id: int, dni: str, last_name: str = "Test", qr_code: Optional[str] = None) -> Person:
        person = Person(
            person_id=person_id,
            document_number=dni,
            last_name=last_name,
            first_names=f"Person{person_id}",
            qr_code=qr_code or f"qr-{person_id}",
        )
        self.people[person_id] = person
        return person

    def add_affiliate(self, affiliate_id: int, person_id: int, status=MembershipStatus.ACTIVE, is_active=True) -> Affiliate:
        affiliate = Affiliate(
            affiliate_id=affiliate_id,
            person_id=person_id,
            membership_status=status,
            health_plan_status=MembershipStatus.ACTIVE,
            is_active=is_active,
        )
        self.affiliates[affiliate_id] = affiliate
        return affiliate

    def add_family(self, family_member_id: int, person_id: int, affiliate_id: int, *, withdrawn=False, is_active=True):
        link = FamilyMember(
            family_member_id=family_member_id,
            person_id=person_id,
            affiliate_id=affiliate_id,
            withdrawn=withdrawn,
            is_active=is_active,
        )
        self.family_members.append(link)
        return link

    def add_guest(self, guest_id: int, person_id: int, valid_from=None, valid_to=None, is_active=True) -> Guest:
        guest = Guest(guest_id=guest_id, person_id=person_id, valid_from=valid_from, valid_to=valid_to, is_active=is_active)
        self.guests.append(guest)
        return guest

    def find_person_by_id(self, person_id: int) -> Optional[Person]:
        return self.people.get(int(person_id))

    def find_person_by_qr(self, qr_code: str) -> Optional[Person]:
        return next((p for p in self.people.values() if p.qr_code == qr_code), None)

    def find_person_by_document(self, document_number: str) -> Optional[Person]:
        return next((p for p in self.people.values() if p.document_number == document_number), None)

    def find_affiliate_by_person(self, person_id: int) -> Optional[Affiliate]:
        return next((a for a in self.affiliates.values() if a.person_id == person_id), None)

    def find_affiliate_by_id(self, affiliate_id: int) -> Optional[Affiliate]:
        return self.affiliates.get(int(affiliate_id))

    def list_family_members_by_person(self, person_id: int) -> List[FamilyMember]:
        return [f for f in self.family_members if f.person_id == person_id]

    def list_family_members_by_titular(self, affiliate_id: int) -> List[FamilyGroupMember]:
        return [
            FamilyGroupMember(
                family_member_id=f.family_member_id,
                person_id=f.person_id,
                document_number=self.people[f.person_id].document_number,
                full_name=self.people[f.person_id].full_name,
                is_active=f.is_active,
                withdrawn=f.withdrawn,
            )
            for f in self.family_members
            if f.affiliate_id == affiliate_id and f.eligible
        ]

    def find_active_guest_by_person(self, person_id: int) -> Optional[Guest]:
        active = [g for g in self.guests if g.person_id == person_id and g.is_active]
        return max(active, key=lambda g: g.guest_id) if active else None

    def update_person_qr(self, person_id: int, qr_code: str) -> bool:
        person = self.people.get(person_id)
        if not person:
            return False
        self.people[person_id] = replace(person, qr_code=qr_code)
        self.qr_updates.append((person_id, qr_code))
        return True


@dataclass
class InMemoryUsers:
    users: Dict[int, User] = field(default_factory=dict)
    assignments: Dict[int, List[RoleAssignment]] = field(default_factory=dict)

    def add(self, user_id: int, username: str, password: str, *assignments: RoleAssignment, is_active=True) -> User:
        user = User(
            user_id=user_id,
            username=username,
            password_hash=generate_password_hash(password),
            is_active=is_active,
        )
        self.users[user_id] = user
        self.assignments[user_id] = list(assignments)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    def list_role_assignments(self, user_id: int) -> List[RoleAssignment]:
        return list(self.assignments.get(int(user_id), []))


@dataclass
class InMemoryShifts:
    shifts: Dict[int, Shift] = field(default_factory=dict)
    shift_visits: Dict[int, List[ShiftVisit]] = field(default_factory=dict)
    fail_increment: bool = False
    _next_id: int = 1

    def get_active(self, camping_id: int) -> Optional[Shift]:
        return next((s for s in self.shifts.values() if s.camping_id == camping_id and s.is_open), None)

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.shifts.get(shift_id)

    def list_history(self, camping_id: int, limit: int) -> List[Shift]:
        rows = [s for s in self.shifts.values() if s.camping_id == camping_id]
        rows.sort(key=lambda s: s.opened_at, reverse=True)
        return rows[:limit]

    def list_visits(self, shift_id: int) -> List[ShiftVisit]:
        return list(self.shift_visits.get(shift_id, []))

    def open_shift(self, *, camping_id: int, opened_by: int, opened_at: datetime, notes: Optional[str]) -> Shift:
        if self.get_active(camping_id):
            raise ConflictError("An open shift already exists for this camping")
        shift = Shift(shift_id=self._next_id, camping_id=camping_id, opened_by=opened_by, opened_at=opened_at, notes=notes)
        self.shifts[shift.shift_id] = shift
        self._next_id += 1
        return shift

    def close_shift(self, *, shift_id: int, closed_by: int, closed_at: datetime, notes: Optional[str]) -> Optional[Shift]:
        shift = self.shifts.get(shift_id)
        if not shift or not shift.is_open:
            return None
        closed = replace(shift, closed_by=closed_by, closed_at=closed_at, is_active=False, notes=notes or shift.notes)
        self.shifts[shift_id] = closed
        return closed

    def increment_visit_count(self, shift_id: int) -> bool:
        if self.fail_increment:
            raise RuntimeError("counter unavailable")
        shift = self.shifts.get(shift_id)
        if not shift:
            return False
        self.shifts[shift_id] = replace(shift, visit_count=shift.visit_count + 1)
        return True


@dataclass
class InMemoryVisits:
    identity: InMemoryIdentity
    visits: Dict[int, Visit] = field(default_factory=dict)

    def get_by_uuid(self, uuid: str) -> Optional[Visit]:
        return next((v for v in self.visits.values() if v.uuid == uuid), None)

    def exists_for_person_and_shift(self, person_id: int, shift_id: int) -> bool:
        return any(v.person_id == person_id and v.shift_id == shift_id for v in self.visits.values())

    def create_visit(self, record: VisitRecord) -> VisitWrite:
        existing = self.get_by_uuid(record.uuid)
        if existing:
            return VisitWrite(visit_id=existing.visit_id, created=False)
        if record.shift_id is not None and self.exists_for_person_and_shift(record.person_id, record.shift_id):
            raise ConflictError(ALREADY_ADMITTED)

        visit_id = len(self.visits) + 1
        self.visits[visit_id] = Visit(
            visit_id=visit_id,
            uuid=record.uuid,
            person_id=record.person_id,
            affiliate_id=record.affiliate_id,
            camping_id=record.camping_id,
            shift_id=record.shift_id,
            registered_by=record.registered_by,
            entry_condition=record.entry_condition,
            companions=list(record.companions),
            notes=record.notes,
            is_offline=record.is_offline,
            is_synchronized=record.is_synchronized,
            entered_at=record.entered_at,
        )
        return VisitWrite(visit_id=visit_id, created=True)

    def list_by_day(self, camping_id: int, day: date) -> List[DailyVisit]:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        rows = [v for v in self.visits.values() if v.camping_id == camping_id and start <= v.entered_at < end]
        rows.sort(key=lambda v: v.entered_at, reverse=True)
        return [
            DailyVisit(
                visit_id=v.visit_id,
                uuid=v.uuid,
                entered_at=v.entered_at,
                entry_condition=v.entry_condition,
                shift_id=v.shift_id,
                is_offline=v.is_offline,
                document_number=self.identity.people[v.person_id].document_number,
                full_name=self.identity.people[v.person_id].full_name,
            )
            for v in rows
        ]


@dataclass
class InMemorySyncLogs:
    logs: List[SyncLog] = field(default_factory=list)
    fail: bool = False

    def create_log(self, *, user_id, camping_id, batch_type, synchronized_count, status, details) -> int:
        if self.fail:
            raise RuntimeError("sync_logs table unavailable")
        log = SyncLog(
            sync_log_id=len(self.logs) + 1,
            user_id=user_id,
            camping_id=camping_id,
            batch_type=batch_type,
            synchronized_count=synchronized_count,
            status=status,
            details=dict(details),
        )
        self.logs.append(log)
        return log.sync_log_id

    def list_logs(self, camping_id: int, limit: int) -> List[SyncLog]:
        rows = [log for log in self.logs if log.camping_id == camping_id]
        return list(reversed(rows))[:limit]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 15, 10, 30, 0)


@pytest.fixture
def identity() -> InMemoryIdentity:
    """Mirrors database/seed.sql."""
    repo = InMemoryIdentity()
    repo.add_person(1, "28444555", "Gomez", qr_code="QR-00000001")
    repo.add_person(2, "45111222", "Gomez", qr_code="7c0f3c1e-5a8b-4d52-9a53-0f1c2f6f5a11")
    repo.add_person(3, "30111222", "Perez", qr_code="3f1b6a5e-1a8e-4f55-b5a6-2d3c4e5f6a7b")
    repo.add_person(4, "33999000", "Diaz", qr_code="9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d")
    repo.add_affiliate(1, 1)
    repo.add_affiliate(2, 3, status=MembershipStatus.SUSPENDED)
    repo.add_family(1, 2, 1)
    repo.add_guest(1, 4)
    return repo


@pytest.fixture
def users() -> InMemoryUsers:
    repo = InMemoryUsers()
    repo.add(ADMIN_ID, "admin", "admin123", RoleAssignment(Role.ADMIN.value, (Permission.ALL.value,)))
    repo.add(OPERATOR_CAMPING_1, "gate1", "gate123", RoleAssignment(Role.CAMPING.value, CAMPING_PERMISSIONS, camping_id=1))
    repo.add(OPERATOR_CAMPING_2, "gate2", "gate123", RoleAssignment(Role.CAMPING.value, CAMPING_PERMISSIONS, camping_id=2))
    repo.add(OFFLINE_DEVICE, "offline_generic", "offline123", RoleAssignment(Role.CAMPING.value, CAMPING_PERMISSIONS))
    repo.add(
        AFFILIATE_USER,
        "ana",
        "ana123",
        RoleAssignment(Role.AFFILIATE.value, (Permission.READ_OWN.value, Permission.READ_QR.value), camping_id=1),
    )
    return repo


@pytest.fixture
def shifts_repo() -> InMemoryShifts:
    return InMemoryShifts()


@pytest.fixture
def visits_repo(identity) -> InMemoryVisits:
    return InMemoryVisits(identity)


@pytest.fixture
def sync_logs() -> InMemorySyncLogs:
    return InMemorySyncLogs()


@pytest.fixture
def access(users) -> CampingAccessPolicy:
    return CampingAccessPolicy(users)


@pytest.fixture
def resolver(identity) -> AdmissionResolver:
    return AdmissionResolver(identity)


@pytest.fixture
def shift_service(shifts_repo, access) -> ShiftService:
    return ShiftService(shifts_repo, access)


@pytest.fixture
def visit_service(visits_repo, identity, shift_service, access) -> VisitService:
    return VisitService(visits_repo, identity, shift_service, access)


@pytest.fixture
def sync_service(visit_service, visits_repo, identity, sync_logs, access) -> SyncService:
    return SyncService(visit_service, visits_repo, identity, sync_logs, access)
