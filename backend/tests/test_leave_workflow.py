import uuid
from datetime import date, timedelta

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.errors import (
    AlreadyProcessed,
    Forbidden,
    InsufficientBalance,
    InvalidRange,
    NotFound,
    PastDate,
    ValidationError,
)
from app.db.models.audit_log import AuditLog
from app.db.models.leave_application import LeaveApplication
from app.services import leave_workflow, ledger


def _submit(db, employee, start, days=1, leave_type="casual", reason="Family function"):
    return leave_workflow.submit(
        db,
        employee,
        start_date=start,
        end_date=start + timedelta(days=days - 1),
        leave_type=leave_type,
        reason=reason,
    )


def _balance(db, employee, on_date):
    balance = ledger.balance_for(db, employee.user_id, on_date)
    db.refresh(balance)
    return balance


def test_days_count_is_inclusive():
    day = date(2030, 5, 10)
    assert leave_workflow.days_between(day, day) == 1
    assert leave_workflow.days_between(day, day + timedelta(days=2)) == 3
    assert leave_workflow.days_between(date(2030, 5, 30), date(2030, 6, 2)) == 4


def test_submit_creates_pending_application_without_touching_balance(db, make_user, leave_start):
    teacher = make_user()

    leave = _submit(db, teacher, leave_start, days=2)

    assert leave.status == "pending"
    assert leave.days_count == 2
    assert leave.employee_id == teacher.user_id
    assert leave.reviewed_by is None
    assert leave.reviewed_at is None
    assert leave.applied_at is not None
    balance = _balance(db, teacher, leave_start)
    assert balance.total_taken == 0
    assert balance.total_remaining == 5


def test_submit_today_is_allowed_but_yesterday_is_past(db, make_user):
    teacher = make_user()
    today = date.today()

    assert _submit(db, teacher, today).status == "pending"
    with pytest.raises(PastDate):
        _submit(db, teacher, today - timedelta(days=1))


def test_submit_rejects_end_before_start(db, make_user, leave_start):
    teacher = make_user()
    with pytest.raises(InvalidRange):
        leave_workflow.submit(
            db,
            teacher,
            start_date=leave_start + timedelta(days=2),
            end_date=leave_start,
            leave_type="sick",
            reason="Surgery recovery",
        )


@pytest.mark.parametrize(
    "overrides",
    [
        {"reason": "   "},
        {"reason": None},
        {"leave_type": None},
        {"leave_type": "sabbatical"},
        {"start_date": None},
        {"end_date": None},
    ],
)
def test_submit_validates_fields(db, make_user, leave_start, overrides):
    teacher = make_user()
    fields = {
        "start_date": leave_start,
        "end_date": leave_start,
        "leave_type": "casual",
        "reason": "Family function",
    }
    fields.update(overrides)

    with pytest.raises(ValidationError):
        leave_workflow.submit(db, teacher, **fields)


def test_short_reason_is_accepted_by_the_server(db, make_user, leave_start):
    teacher = make_user()
    leave = _submit(db, teacher, leave_start, reason="Flu")
    assert leave.reason == "Flu"


def test_attachments_are_kept_without_blank_entries(db, make_user, leave_start):
    teacher = make_user()
    leave = leave_workflow.submit(
        db,
        teacher,
        start_date=leave_start,
        end_date=leave_start,
        leave_type="sick",
        reason="Surgery",
        attachments=[" certificate.pdf ", "", "   ", "scan.png"],
    )

    assert leave.attachments == ["certificate.pdf", "scan.png"]
    assert _submit(db, teacher, leave_start + timedelta(days=1)).attachments == []


def test_leave_type_is_normalised(db, make_user, leave_start):
    teacher = make_user()
    leave = _submit(db, teacher, leave_start, leave_type=" Sick ")
    assert leave.leave_type == "sick"


def test_submit_boundary_on_remaining_days(db, make_user, leave_start):
    teacher = make_user()

    with pytest.raises(InsufficientBalance):
        _submit(db, teacher, leave_start, days=6)
    assert _submit(db, teacher, leave_start, days=5).days_count == 5


def test_balance_is_keyed_by_the_start_month(db, make_user, leave_start):
    teacher = make_user()
    hod = make_user(role="hod")
    later = (leave_start + timedelta(days=40)).replace(day=1)

    leave = _submit(db, teacher, later - timedelta(days=1), days=3)
    leave_workflow.approve(db, leave.leave_id, hod)

    starting_month = _balance(db, teacher, later - timedelta(days=1))
    following_month = _balance(db, teacher, later)
    assert starting_month.total_taken == 3
    assert following_month.total_taken == 0


def test_leave_balance_scenario(db, make_user, leave_start):
    employee = make_user(department="Physics")
    reviewer = make_user(role="hod", department="Physics")

    leave = _submit(db, employee, leave_start, days=2, leave_type="casual")
    assert _balance(db, employee, leave_start).total_taken == 0

    approved = leave_workflow.approve(db, leave.leave_id, reviewer, "Enjoy")

    assert approved.status == "approved"
    assert approved.reviewed_by == reviewer.user_id
    assert approved.reviewed_at is not None
    assert approved.review_comments == "Enjoy"
    balance = _balance(db, employee, leave_start)
    assert balance.total_taken == 2
    assert balance.total_remaining == 3
    assert balance.per_category_taken["casual"] == 2

    with pytest.raises(InsufficientBalance):
        _submit(db, employee, leave_start + timedelta(days=5), days=4, leave_type="casual")


def test_reject_leaves_the_ledger_untouched(db, make_user, leave_start):
    teacher = make_user()
    principal = make_user(role="principal", department="Administration")
    leave = _submit(db, teacher, leave_start, days=3, leave_type="sick")

    rejected = leave_workflow.reject(db, leave.leave_id, principal, "Exams week")

    assert rejected.status == "rejected"
    assert rejected.review_comments == "Exams week"
    balance = _balance(db, teacher, leave_start)
    assert balance.total_taken == 0
    assert balance.total_remaining == 5
    assert balance.sick_taken == 0


def test_processed_applications_cannot_transition_again(db, make_user, leave_start):
    teacher = make_user()
    hod = make_user(role="hod")
    approved = _submit(db, teacher, leave_start)
    rejected = _submit(db, teacher, leave_start + timedelta(days=1))
    leave_workflow.approve(db, approved.leave_id, hod)
    leave_workflow.reject(db, rejected.leave_id, hod)

    with pytest.raises(AlreadyProcessed):
        leave_workflow.approve(db, approved.leave_id, hod)
    with pytest.raises(AlreadyProcessed):
        leave_workflow.reject(db, approved.leave_id, hod)
    with pytest.raises(AlreadyProcessed):
        leave_workflow.approve(db, rejected.leave_id, hod)

    assert _balance(db, teacher, leave_start).total_taken == 1


def test_status_guard_applies_to_the_stored_row(db, make_user, leave_start):
    teacher = make_user()
    hod = make_user(role="hod")
    leave = _submit(db, teacher, leave_start)
    # Simulate another reviewer deciding after this session loaded the row.
    db.execute(
        update(LeaveApplication)
        .where(LeaveApplication.leave_id == leave.leave_id)
        .values(status="rejected")
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(AlreadyProcessed):
        leave_workflow._transition(db, leave, "approved", hod, "")


@pytest.mark.parametrize("column, value", [("status", "cancelled"), ("leave_type", "vacation")])
def test_table_rejects_unknown_status_and_category(db, make_user, leave_start, column, value):
    leave = _submit(db, make_user(), leave_start)

    with pytest.raises(IntegrityError):
        db.execute(
            update(LeaveApplication)
            .where(LeaveApplication.leave_id == leave.leave_id)
            .values({column: value})
            .execution_options(synchronize_session=False)
        )


def test_teacher_cannot_review(db, make_user, leave_start):
    teacher = make_user()
    colleague = make_user()
    leave = _submit(db, teacher, leave_start)

    with pytest.raises(Forbidden):
        leave_workflow.approve(db, leave.leave_id, colleague)
    with pytest.raises(Forbidden):
        leave_workflow.reject(db, leave.leave_id, teacher)
    db.refresh(leave)
    assert leave.status == "pending"


def test_hod_is_limited_to_their_department(db, make_user, leave_start):
    teacher = make_user(department="Mathematics")
    hod = make_user(role="hod", department="Computer Science")
    leave = _submit(db, teacher, leave_start)

    with pytest.raises(Forbidden):
        leave_workflow.approve(db, leave.leave_id, hod)
    db.refresh(leave)
    assert leave.status == "pending"


def test_department_scope_can_be_switched_off(db, make_user, leave_start, monkeypatch):
    monkeypatch.setattr(settings, "reviewer_department_scope", False)
    teacher = make_user(department="Mathematics")
    hod = make_user(role="hod", department="Computer Science")
    leave = _submit(db, teacher, leave_start)

    assert leave_workflow.approve(db, leave.leave_id, hod).status == "approved"


def test_principal_reviews_any_department(db, make_user, leave_start):
    teacher = make_user(department="English")
    principal = make_user(role="principal", department="Administration")
    leave = _submit(db, teacher, leave_start)

    assert leave_workflow.approve(db, leave.leave_id, principal).status == "approved"


def test_legacy_admin_role_reviews_like_an_hod(db, make_user, leave_start):
    teacher = make_user(department="Chemistry")
    admin = make_user(role="admin", department="Chemistry")
    leave = _submit(db, teacher, leave_start)

    assert leave_workflow.approve(db, leave.leave_id, admin).status == "approved"


def test_unknown_application_is_not_found(db, make_user):
    hod = make_user(role="hod")
    with pytest.raises(NotFound):
        leave_workflow.approve(db, uuid.uuid4(), hod)


def test_approval_rechecks_balance_and_keeps_application_pending(db, make_user, leave_start):
    teacher = make_user()
    hod = make_user(role="hod")
    first = _submit(db, teacher, leave_start, days=3)
    second = _submit(db, teacher, leave_start + timedelta(days=7), days=3)
    leave_workflow.approve(db, first.leave_id, hod)

    with pytest.raises(InsufficientBalance):
        leave_workflow.approve(db, second.leave_id, hod)

    db.refresh(second)
    assert second.status == "pending"
    balance = _balance(db, teacher, leave_start)
    assert balance.total_taken == 3
    assert balance.total_remaining == 2


def test_teacher_lists_only_their_own_newest_first(db, make_user, leave_start):
    teacher = make_user()
    other = make_user()
    older = _submit(db, teacher, leave_start)
    newer = _submit(db, teacher, leave_start + timedelta(days=1))
    _submit(db, other, leave_start)
    db.execute(
        update(LeaveApplication)
        .where(LeaveApplication.leave_id == older.leave_id)
        .values(applied_at=newer.applied_at - timedelta(hours=1))
    )

    rows = leave_workflow.list_for(db, teacher)

    assert [leave.leave_id for leave, _ in rows] == [newer.leave_id, older.leave_id]


def test_reviewer_list_puts_pending_first_and_adds_applicant_details(db, make_user, leave_start):
    teacher = make_user(name="Asha Rao")
    hod = make_user(role="hod")
    decided = _submit(db, teacher, leave_start)
    pending = _submit(db, teacher, leave_start + timedelta(days=1))
    leave_workflow.reject(db, decided.leave_id, hod)
    # The decided application is the most recent one.
    db.execute(
        update(LeaveApplication)
        .where(LeaveApplication.leave_id == decided.leave_id)
        .values(applied_at=pending.applied_at + timedelta(hours=1))
    )

    rows = leave_workflow.list_for(db, hod)

    assert [leave.leave_id for leave, _ in rows] == [pending.leave_id, decided.leave_id]
    assert all(applicant.name == "Asha Rao" for _, applicant in rows)
    assert all(applicant.department == "Computer Science" for _, applicant in rows)


def test_reviewer_visibility_follows_department_scope(db, make_user, leave_start, monkeypatch):
    cs_teacher = make_user(department="Computer Science")
    math_teacher = make_user(department="Mathematics")
    hod = make_user(role="hod", department="Computer Science")
    principal = make_user(role="principal", department="Administration")
    _submit(db, cs_teacher, leave_start)
    _submit(db, math_teacher, leave_start)

    assert len(leave_workflow.list_for(db, hod)) == 1
    assert len(leave_workflow.list_for(db, principal)) == 2

    monkeypatch.setattr(settings, "reviewer_department_scope", False)
    assert len(leave_workflow.list_for(db, hod)) == 2


def test_get_checks_visibility(db, make_user, leave_start):
    teacher = make_user()
    colleague = make_user()
    hod = make_user(role="hod")
    leave = _submit(db, teacher, leave_start)

    assert leave_workflow.get(db, leave.leave_id, teacher)[0].leave_id == leave.leave_id
    assert leave_workflow.get(db, leave.leave_id, hod)[1].user_id == teacher.user_id
    with pytest.raises(Forbidden):
        leave_workflow.get(db, leave.leave_id, colleague)
    with pytest.raises(NotFound):
        leave_workflow.get(db, uuid.uuid4(), teacher)


def test_transitions_are_audited(db, make_user, leave_start):
    teacher = make_user()
    hod = make_user(role="hod")
    leave = _submit(db, teacher, leave_start, days=2)
    leave_workflow.approve(db, leave.leave_id, hod)

    entries = {
        e.action: e
        for e in db.execute(select(AuditLog).where(AuditLog.target_id == str(leave.leave_id))).scalars()
    }

    assert set(entries) == {"leave.submitted", "leave.approved"}
    assert entries["leave.submitted"].actor_user_id == teacher.user_id
    assert entries["leave.approved"].actor_user_id == hod.user_id
    assert entries["leave.approved"].meta["days"] == 2
