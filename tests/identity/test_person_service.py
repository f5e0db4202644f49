from __future__ import annotations

import uuid

import pytest

from src.camping_gate.camping_gate.core.exceptions import NotFoundError
from src.camping_gate.camping_gate.identity.service import PersonService, is_legacy_qr


@pytest.fixture
def person_service(identity) -> PersonService:
    return PersonService(identity)


@pytest.mark.parametrize(
    "code, expected",
    [("QR-00000001", True), ("QR-1", True), ("QR-abc", False), ("qr-1", False), ("", False), (None, False)],
)
def test_is_legacy_qr(code, expected):
    assert is_legacy_qr(code) is expected


def test_legacy_qr_is_migrated_on_detail_read(person_service, identity):
    detail = person_service.get_detail(1)

    new_code = detail.person.qr_code
    assert uuid.UUID(new_code).version == 4
    assert identity.find_person_by_id(1).qr_code == new_code
    assert identity.find_person_by_qr("QR-00000001") is None


def test_migration_happens_once(person_service, identity):
    first = person_service.get_detail(1).person.qr_code
    second = person_service.get_detail(1).person.qr_code

    assert first == second
    assert len(identity.qr_updates) == 1


def test_modern_qr_is_left_alone(person_service, identity):
    person_service.get_detail(2)

    assert identity.qr_updates == []


def test_detail_includes_family_group_for_affiliates(person_service):
    detail = person_service.get_detail(1)

    assert detail.affiliate.affiliate_id == 1
    assert [m.person_id for m in detail.family_group] == [2]


def test_detail_of_dependant_lists_links(person_service):
    detail = person_service.get_detail(2)

    assert detail.affiliate is None
    assert [f.affiliate_id for f in detail.family_links] == [1]
    assert detail.family_group == []


def test_unknown_person_is_not_found(person_service):
    with pytest.raises(NotFoundError):
        person_service.get_detail(404)


def test_qr_png_is_rendered(person_service):
    png = person_service.render_qr_png(2)

    assert png.startswith(b"\x89PNG\r\n\x1a\n")
