from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role names assigned to users."""

    ADMIN = "admin"
    CAMPING = "camping"
    AFFILIATE = "afiliado"


class Permission(str, Enum):
    """Closed set of permissions; ALL is the wildcard."""

    ALL = "all"
    READ_AFFILIATES = "read:afiliados"
    UPDATE_AFFILIATES = "update:afiliados"
    READ_OWN = "read:own"
    UPDATE_OWN = "update:own"
    READ_QR = "read:qr"
    READ_HISTORY = "read:historial"
    CREATE_VISITS = "create:visitas"
    READ_VISITS = "read:visitas"
    SYNC_VISITS = "sync:visitas"
    OPEN_SHIFT = "create:periodo"
    CLOSE_SHIFT = "close:periodo"
    MANAGE_SHIFTS = "manage:caja"
    READ_SHIFTS = "read:caja"
    ADMIN = "admin"


class MembershipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class PersonRole(str, Enum):
    """Roles a scanned person can hold at the gate."""

    AFFILIATE = "AFFILIATE"
    FAMILY = "FAMILY"
    GUEST = "GUEST"


class AdmissionReason(str, Enum):
    """Reason code returned with every admission decision."""

    PERSON_NOT_FOUND = "PERSON_NOT_FOUND"
    GUEST_VALID = "GUEST_VALID"
    AFFILIATE_ACTIVE = "AFFILIATE_ACTIVE"
    AFFILIATE_INACTIVE = "AFFILIATE_INACTIVE"
    FAMILY_VALID = "FAMILY_VALID"
    TITULAR_INACTIVE = "TITULAR_INACTIVE"
    FAMILY_INACTIVE = "FAMILY_INACTIVE"
    PERSON_NO_ROLE = "PERSON_NO_ROLE"


class EntryCondition(str, Enum):
    """Snapshot of the admission category stored on a visit."""

    AFFILIATE = "AFFILIATE"
    FAMILY = "FAMILY"
    GUEST = "GUEST"
    UNKNOWN = "UNKNOWN"


class ShiftState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
