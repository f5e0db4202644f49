from __future__ import annotations

from datetime import datetime

import pytest

from src.camping_gate.camping_gate.core.enums import EntryCondition, SyncStatus
from src.camping_gate.camping_gate.core.exceptions import AuthorizationError, ValidationError

OFFLINE = 4
GATE_2 = 3


def _item(uuid: str, **ref) -> dict:
    return dict(uuid=uuid, captured_at="2025-01-15T09:00:00", **ref)


def test_batch_with_missing_person_is_partial(sync_service, sync_logs):
    result = sync_service.sync_visits(
        1,
        [_item("u-1", person_id=1), _item("u-2", person_id=404), _item("u-3", dni="33999000")],
        OFFLINE,
    )

    assert (result.synchronized, result.errors) == (2, 1)
    assert result.failures[0].uuid == "u-2"
    assert sync_logs.logs[-1].status == SyncStatus.PARTIAL
    assert sync_logs.logs[-1].synchronized_count == 2
    assert sync_logs.logs[-1].details == {"total": 3, "synchronized": 2, "errors": 1}


def test_resubmitting_a_batch_creates_nothing_new(sync_service, visits_repo):
    batch = [_item("u-1", person_id=1), _item("u-2", qr_code="9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d")]

    first = sync_service.sync_visits(1, batch, OFFLINE)
    second = sync_service.sync_visits(1, batch, OFFLINE)

    assert (first.synchronized, first.errors) == (2, 0)
    assert (second.synchronized, second.errors) == (0, 0)
    assert len(visits_repo.visits) == 2


def test_synced_visits_are_offline_and_keep_capture_time(sync_service, visits_repo):
    sync_service.sync_visits(1, [_item("u-1", person_id=2, shift_id=None)], OFFLINE)

    visit = visits_repo.get_by_uuid("u-1")
    assert visit.is_offline is True
    assert visit.is_synchronized is True
    assert visit.entered_at == datetime(2025, 1, 15, 9, 0)
    assert visit.entry_condition == EntryCondition.FAMILY


def test_nested_person_ref_is_accepted(sync_service, visits_repo):
    result = sync_service.sync_visits(1, [{"uuid": "u-9", "person_ref": {"affiliate_id": 1}}], OFFLINE)

    assert result.synchronized == 1
    assert visits_repo.get_by_uuid("u-9").person_id == 1


def test_duplicate_person_in_same_shift_counts_as_error(sync_service, shift_service, fixed_now):
    shift = shift_service.open(1, OFFLINE, now=fixed_now)

    result = sync_service.sync_visits(
        1,
        [_item("u-1", person_id=1, shift_id=shift.shift_id), _item("u-2", person_id=1, shift_id=shift.shift_id)],
        OFFLINE,
    )

    assert (result.synchronized, result.errors) == (1, 1)


def test_malformed_items_are_errors_not_aborts(sync_service):
    result = sync_service.sync_visits(
        1,
        ["not-an-object", {"person_id": 1}, {"uuid": "u-5"}, _item("u-6", person_id=1)],
        OFFLINE,
    )

    assert (result.synchronized, result.errors) == (1, 3)
    assert [f.uuid for f in result.failures] == [None, None, "u-5"]


def test_all_failed_batch_logs_failed_status(sync_service, sync_logs):
    sync_service.sync_visits(1, [_item("u-1", dni="00000000")], OFFLINE)

    assert sync_logs.logs[-1].status == SyncStatus.FAILED


def test_empty_batch_logs_success(sync_service, sync_logs):
    result = sync_service.sync_visits(1, [], OFFLINE)

    assert (result.synchronized, result.errors) == (0, 0)
    assert sync_logs.logs[-1].status == SyncStatus.SUCCESS


def test_log_write_failure_does_not_change_the_result(sync_service, sync_logs, visits_repo):
    sync_logs.fail = True

    result = sync_service.sync_visits(1, [_item("u-1", person_id=1)], OFFLINE)

    assert result.synchronized == 1
    assert visits_repo.get_by_uuid("u-1") is not None


def test_unexpected_store_error_is_reported_per_item(sync_service, visits_repo, monkeypatch):
    real_create = visits_repo.create_visit

    def flaky(record):
        if record.uuid == "u-1":
            raise RuntimeError("lost connection")
        return real_create(record)

    monkeypatch.setattr(visits_repo, "create_visit", flaky)

    result = sync_service.sync_visits(1, [_item("u-1", person_id=1), _item("u-2", person_id=4)], OFFLINE)

    assert (result.synchronized, result.errors) == (1, 1)
    assert result.failures[0].message == "lost connection"


@pytest.mark.parametrize("camping_id, visits", [(None, []), (1, None), (1, {"uuid": "x"})])
def test_invalid_envelope_is_rejected(sync_service, camping_id, visits):
    with pytest.raises(ValidationError):
        sync_service.sync_visits(camping_id, visits, OFFLINE)


def test_items_for_inaccessible_camping_fail_individually(sync_service, visits_repo):
    result = sync_service.sync_visits(1, [_item("u-1", person_id=1)], GATE_2)

    assert (result.synchronized, result.errors) == (0, 1)
    assert visits_repo.visits == {}


def test_logs_are_listed_newest_first_with_access_check(sync_service):
    sync_service.sync_visits(1, [_item("u-1", person_id=1)], OFFLINE)
    sync_service.sync_visits(1, [_item("u-2", person_id=404)], OFFLINE)

    logs = sync_service.list_logs(1, OFFLINE)

    assert [log.status for log in logs] == [SyncStatus.FAILED, SyncStatus.SUCCESS]
    assert logs[0].to_dict()["type"] == "batch"
    with pytest.raises(AuthorizationError):
        sync_service.list_logs(1, GATE_2)


def test_item_pointing_at_another_campings_shift_is_one_error(sync_service, shift_service, shifts_repo, visits_repo, fixed_now):
    other = shift_service.open(2, OFFLINE, now=fixed_now)

    result = sync_service.sync_visits(
        1,
        [_item("u-1", person_id=1, shift_id=other.shift_id), _item("u-2", person_id=4), _item("u-3", person_id=2, shift_id=999)],
        OFFLINE,
    )

    assert (result.synchronized, result.errors) == (1, 2)
    assert [f.uuid for f in result.failures] == ["u-1", "u-3"]
    assert result.failures[1].message == "Shift not found"
    assert shifts_repo.get_by_id(other.shift_id).visit_count == 0
    assert visits_repo.get_by_uuid("u-1") is None


def test_item_with_mismatched_person_and_affiliate_is_one_error(sync_service):
    result = sync_service.sync_visits(1, [_item("u-1", person_id=4, affiliate_id=1)], OFFLINE)

    assert (result.synchronized, result.errors) == (0, 1)
