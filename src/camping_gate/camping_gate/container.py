from __future__ import annotations

from dataclasses import dataclass

from .access.service import CampingAccessPolicy
from .admission.policy import AdmissionPolicy
from .admission.service import AdmissionResolver
from .core.constants import DEFAULT_HISTORY_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .identity.mysql_identity_repository import MySQLIdentityRepository
from .identity.service import PersonService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .sync.mysql_sync_repository import MySQLSyncLogRepository
from .sync.service import SyncService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService
from .visits.mysql_visit_repository import MySQLVisitRepository
from .visits.service import VisitService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    identity_repo: MySQLIdentityRepository
    shifts_repo: MySQLShiftRepository
    visits_repo: MySQLVisitRepository
    sync_logs_repo: MySQLSyncLogRepository

    auth_service: AuthService
    access_policy: CampingAccessPolicy
    person_service: PersonService
    admission_resolver: AdmissionResolver
    shift_service: ShiftService
    visit_service: VisitService
    sync_service: SyncService


def build_container(*, db_config: dict, history_limit: int = DEFAULT_HISTORY_LIMIT) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    identity_repo = MySQLIdentityRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    visits_repo = MySQLVisitRepository(conn)
    sync_logs_repo = MySQLSyncLogRepository(conn)

    access_policy = CampingAccessPolicy(users_repo)
    admission_policy = AdmissionPolicy(identity_repo)
    shift_service = ShiftService(shifts_repo, access_policy, history_limit=history_limit)
    visit_service = VisitService(visits_repo, identity_repo, shift_service, access_policy, policy=admission_policy)

    return Container(
        conn=conn,
        users_repo=users_repo,
        identity_repo=identity_repo,
        shifts_repo=shifts_repo,
        visits_repo=visits_repo,
        sync_logs_repo=sync_logs_repo,
        auth_service=AuthService(users_repo),
        access_policy=access_policy,
        person_service=PersonService(identity_repo),
        admission_resolver=AdmissionResolver(identity_repo, policy=admission_policy),
        shift_service=shift_service,
        visit_service=visit_service,
        sync_service=SyncService(visit_service, visits_repo, identity_repo, sync_logs_repo, access_policy),
    )
