# tests/test_task_service.py

from __future__ import annotations

import pytest

from teamtask.core.paging import Pagination
from teamtask.core.state import AppState
from teamtask.errors import Forbidden, NotFound, ValidationError
from teamtask.tasks.task_models import TaskStatus
from teamtask.tasks.task_service import (
    DUE_MAX_TS,
    DUE_MIN_TS,
    TaskService,
    parse_due_date,
    parse_filters,
    parse_task_patch,
)

from .fakes import DAY, FixedClock


@pytest.fixture()
def service(state: AppState, clock: FixedClock) -> TaskService:
    return TaskService(state.tasks, state.users, clock=clock)


def _iso(ts: float) -> str:
    from datetime import datetime, timezone

    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _payload(clock: FixedClock, assignee_id: int, **overrides) -> dict:
    body = {
        "title": "Write report",
        "description": "Q3 summary",
        "dueDate": _iso(clock.now + DAY),
        "assignee": assignee_id,
    }
    body.update(overrides)
    return body


def test_create_applies_defaults_and_creator(service, clock, admin, member_x) -> None:
    view = service.create_task(admin.user, _payload(clock, member_x.user.id))

    t = view.task
    assert t.status == TaskStatus.TODO
    assert t.priority.value == "medium"
    assert t.tags == []
    assert t.created_by_id == admin.user.id
    assert view.assignee.id == member_x.user.id
    assert view.created_by.id == admin.user.id
    assert t.is_overdue is False


def test_create_reports_every_problem(service, admin) -> None:
    with pytest.raises(ValidationError) as exc:
        service.create_task(
            admin.user,
            {"title": "x" * 101, "description": "d" * 1001, "priority": "someday"},
        )
    fields = {e["field"] for e in exc.value.errors}
    assert fields == {"title", "description", "dueDate", "assignee", "priority"}


def test_create_rejects_unknown_assignee(service, clock, admin) -> None:
    with pytest.raises(ValidationError) as exc:
        service.create_task(admin.user, _payload(clock, 9999))
    assert exc.value.errors == [{"field": "assignee", "message": "Assignee not found"}]


def test_overdue_at_write_time(service, clock, admin, member_x) -> None:
    view = service.create_task(
        admin.user, _payload(clock, member_x.user.id, dueDate=_iso(clock.now - DAY))
    )
    assert view.task.is_overdue is True

    done = service.create_task(
        admin.user,
        _payload(clock, member_x.user.id, dueDate=_iso(clock.now - DAY), status="completed"),
    )
    assert done.task.is_overdue is False


def test_overdue_flag_is_not_refreshed_on_read(service, clock, admin, member_x) -> None:
    view = service.create_task(
        admin.user, _payload(clock, member_x.user.id, dueDate=_iso(clock.now + 60))
    )
    clock.advance(3600)
    assert service.get_task(admin.user, view.task.id).task.is_overdue is False

    updated = service.update_task(admin.user, view.task.id, parse_task_patch({"priority": "high"}))
    assert updated.task.is_overdue is True


def test_member_sees_only_assigned_tasks(service, clock, admin, member_x, member_y) -> None:
    for i in range(3):
        service.create_task(admin.user, _payload(clock, member_x.user.id, title=f"x{i}"))
    service.create_task(admin.user, _payload(clock, member_y.user.id, title="y0"))
    # A member creating a task for someone else does not get to see it.
    service.create_task(member_x.user, _payload(clock, member_y.user.id, title="y1"))

    page_x = service.list_tasks(member_x.user)
    assert {v.task.assignee_id for v in page_x.items} == {member_x.user.id}
    assert page_x.total_count == 3

    page_admin = service.list_tasks(admin.user)
    assert page_admin.total_count == 5


def test_list_filters_and_pagination(service, clock, admin, member_x) -> None:
    for i in range(5):
        service.create_task(
            admin.user,
            _payload(clock, member_x.user.id, title=f"report {i}", priority="high" if i % 2 else "low"),
        )
        clock.advance(1)

    page = service.list_tasks(
        admin.user, parse_filters(priority="low"), Pagination(page=1, limit=2)
    )
    assert page.total_count == 3
    assert [v.task.title for v in page.items] == ["report 4", "report 2"]
    assert page.has_next is True
    assert page.has_prev is False

    last = service.list_tasks(admin.user, parse_filters(priority="low"), Pagination(page=2, limit=2))
    assert [v.task.title for v in last.items] == ["report 0"]
    assert last.has_next is False
    assert last.has_prev is True


def test_bad_filter_value() -> None:
    with pytest.raises(ValidationError):
        parse_filters(status="done")


def test_get_missing_and_forbidden(service, clock, admin, member_x, member_y) -> None:
    with pytest.raises(NotFound):
        service.get_task(admin.user, 12345)

    view = service.create_task(admin.user, _payload(clock, member_x.user.id))
    with pytest.raises(Forbidden):
        service.get_task(member_y.user, view.task.id)
    assert service.get_task(member_x.user, view.task.id).task.id == view.task.id


def test_created_by_cannot_be_changed(service, clock, admin, member_x) -> None:
    view = service.create_task(admin.user, _payload(clock, member_x.user.id))

    patch = parse_task_patch({"createdBy": member_x.user.id, "title": "Renamed"})
    updated = service.update_task(member_x.user, view.task.id, patch)

    assert updated.task.title == "Renamed"
    assert updated.task.created_by_id == admin.user.id


def test_update_validates_and_reresolves_assignee(service, clock, admin, member_x, member_y) -> None:
    view = service.create_task(admin.user, _payload(clock, member_x.user.id))

    with pytest.raises(ValidationError):
        parse_task_patch({"title": "", "status": "nope"})
    with pytest.raises(ValidationError):
        service.update_task(admin.user, view.task.id, parse_task_patch({"assignee": 9999}))

    moved = service.update_task(
        admin.user, view.task.id, parse_task_patch({"assignee": str(member_y.user.id)})
    )
    assert moved.task.assignee_id == member_y.user.id

    # member_x lost access with the reassignment.
    with pytest.raises(Forbidden):
        service.update_task(member_x.user, view.task.id, parse_task_patch({"title": "mine"}))


def test_delete(service, clock, admin, member_x, member_y) -> None:
    view = service.create_task(admin.user, _payload(clock, member_x.user.id))

    with pytest.raises(Forbidden):
        service.delete_task(member_y.user, view.task.id)

    service.delete_task(member_x.user, view.task.id)
    with pytest.raises(NotFound):
        service.delete_task(member_x.user, view.task.id)


def test_overview_is_scoped(service, clock, admin, member_x, member_y) -> None:
    service.create_task(admin.user, _payload(clock, member_x.user.id, dueDate=_iso(clock.now - DAY)))
    service.create_task(admin.user, _payload(clock, member_x.user.id, status="completed"))
    service.create_task(admin.user, _payload(clock, member_y.user.id))

    mine = service.overview(member_x.user)
    assert (mine.total, mine.completed, mine.pending, mine.overdue) == (2, 1, 1, 1)
    everything = service.overview(admin.user)
    assert everything.total == 3


@pytest.mark.parametrize(
    "due",
    ["9999-12-31T23:00:00-05:00", "0001-01-01T00:00:00+05:00", "0001-01-01"],
)
def test_unrenderable_due_dates_are_rejected(service, clock, admin, member_x, due) -> None:
    with pytest.raises(ValidationError) as exc:
        service.create_task(admin.user, _payload(clock, member_x.user.id, dueDate=due))
    assert exc.value.errors == [{"field": "dueDate", "message": "Invalid due date"}]

    view = service.create_task(admin.user, _payload(clock, member_x.user.id))
    with pytest.raises(ValidationError):
        service.update_task(admin.user, view.task.id, parse_task_patch({"dueDate": due}))


def test_due_date_range_edges() -> None:
    assert parse_due_date("9999-12-31T23:59:59Z") == DUE_MAX_TS
    assert parse_due_date("0001-01-02") == DUE_MIN_TS
    with pytest.raises(ValueError):
        parse_due_date("9999-12-31T23:59:59.5Z")


@pytest.mark.parametrize("assignee", [2**63, "99999999999999999999", 0, -1])
def test_out_of_range_assignee_is_a_validation_error(service, clock, admin, assignee) -> None:
    with pytest.raises(ValidationError) as exc:
        service.create_task(admin.user, _payload(clock, 1, assignee=assignee))
    assert [e["field"] for e in exc.value.errors] == ["assignee"]


def test_out_of_range_task_id_is_not_found(service, admin) -> None:
    with pytest.raises(NotFound):
        service.get_task(admin.user, 99999999999999999999)
    with pytest.raises(NotFound):
        service.delete_task(admin.user, 2**63)
