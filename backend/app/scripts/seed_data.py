"""Module: seed_data."""

import argparse
import random
from datetime import date, timedelta

from faker import Faker
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import AppError
from app.core.security import hash_password
from app.db.models.department import Department
from app.db.models.leave_application import LEAVE_TYPES
from app.db.models.user import User
from app.services import leave_workflow, slot_registry

fake = Faker()

DEFAULT_DEPARTMENTS = [
    ("Computer Science", "CS"),
    ("Mathematics", "MATH"),
    ("Physics", "PHY"),
    ("Chemistry", "CHEM"),
    ("English", "ENG"),
]

# Demo accounts shown on the login page of the portal.
DEFAULT_USERS = [
    {
        "name": "Dr. Principal",
        "email": "principal@college.edu",
        "password": "principal123",
        "role": "principal",
        "department": "Administration",
        "employee_id": "EMP001",
    },
    {
        "name": "Prof. John HOD",
        "email": "hod.cs@college.edu",
        "password": "hod123",
        "role": "hod",
        "department": "Computer Science",
        "employee_id": "EMP002",
    },
    {
        "name": "Dr. Sarah Teacher",
        "email": "sarah.teacher@college.edu",
        "password": "teacher123",
        "role": "teacher",
        "department": "Computer Science",
        "employee_id": "EMP003",
    },
]

DEMO_REASONS = [
    "Family wedding ceremony",
    "Medical appointment",
    "Family emergency",
    "Attending an academic conference",
    "Personal errands out of town",
]


def seed_departments(session: Session) -> list[Department]:
    existing = {d.code: d for d in session.execute(select(Department)).scalars().all()}
    created = []
    for name, code in DEFAULT_DEPARTMENTS:
        if code in existing:
            continue
        department = Department(name=name, code=code, is_active=True)
        session.add(department)
        created.append(department)
    session.flush()
    return created


def seed_users(session: Session) -> list[User]:
    created = []
    for data in DEFAULT_USERS:
        exists = session.execute(select(User.user_id).where(User.email == data["email"])).first()
        if exists:
            continue
        user = User(
            name=data["name"],
            email=data["email"],
            password=hash_password(data["password"]),
            role=data["role"],
            department=data["department"],
            employee_id=data["employee_id"],
        )
        session.add(user)
        created.append(user)
    session.flush()

    # Link each department to its HOD, when one is registered.
    for department in session.execute(select(Department).where(Department.hod_user_id.is_(None))).scalars():
        hod = session.execute(
            select(User).where(User.role == "hod", User.department == department.name)
        ).scalars().first()
        if hod:
            department.hod_user_id = hod.user_id
    session.flush()
    return created


def seed_defaults(session: Session) -> dict:
    """Departments, demo accounts and the slot schedule; safe to run repeatedly."""
    departments = seed_departments(session)
    users = seed_users(session)
    slots = slot_registry.ensure_schedule(session)
    session.commit()
    return {"departments": len(departments), "users": len(users), "slots": slots}


def seed_demo_teachers(session: Session, count: int) -> list[User]:
    departments = [name for name, _ in DEFAULT_DEPARTMENTS]
    next_number = session.execute(select(func.count(User.user_id))).scalar_one() + 1
    teachers = []
    for _ in range(count):
        first, last = fake.first_name(), fake.last_name()
        teacher = User(
            name=f"{first} {last}",
            email=f"{first.lower()}.{last.lower()}.{next_number}@college.edu",
            password=hash_password("teacher123"),
            role="teacher",
            department=random.choice(departments),
            employee_id=f"EMP{next_number:03d}",
        )
        session.add(teacher)
        teachers.append(teacher)
        next_number += 1
    session.flush()
    return teachers


def seed_demo_leaves(session: Session, teachers: list[User]) -> int:
    """Submit one or two upcoming leave requests per teacher; some get reviewed."""
    principal = session.execute(select(User).where(User.role == "principal")).scalars().first()
    today = date.today()
    submitted = 0
    for teacher in teachers:
        for _ in range(random.randint(1, 2)):
            start = today + timedelta(days=random.randint(1, 45))
            end = start + timedelta(days=random.randint(0, 1))
            try:
                leave = leave_workflow.submit(
                    session,
                    teacher,
                    start_date=start,
                    end_date=end,
                    leave_type=random.choice(LEAVE_TYPES),
                    reason=random.choice(DEMO_REASONS),
                )
                submitted += 1
                if principal is None:
                    continue
                decision = random.choices(["pending", "approved", "rejected"], weights=[0.5, 0.35, 0.15], k=1)[0]
                if decision == "approved":
                    leave_workflow.approve(session, leave.leave_id, principal, "Approved")
                elif decision == "rejected":
                    leave_workflow.reject(session, leave.leave_id, principal, "Insufficient cover")
            except AppError as exc:
                print(f"Skipping leave for {teacher.email}: {exc.message}")
    session.commit()
    return submitted


if __name__ == "__main__":
    # python -m app.scripts.seed_data [--demo-teachers N]
    from app.db.init_db import init_db
    from app.db.session import SessionLocal, engine

    parser = argparse.ArgumentParser(description="Seed the college leave database")
    parser.add_argument("--demo-teachers", type=int, default=0, help="Generate N fake teachers with leave history")
    args = parser.parse_args()

    init_db(engine)
    session = SessionLocal()
    try:
        print("Seeding departments, default users and time slots...")
        counts = seed_defaults(session)
        print(f"Created departments={counts['departments']}, users={counts['users']}, slots={counts['slots']}")

        if args.demo_teachers:
            print(f"Seeding demo teachers ({args.demo_teachers})...")
            teachers = seed_demo_teachers(session, args.demo_teachers)
            leave_n = seed_demo_leaves(session, teachers)
            print(f"Done. teachers={len(teachers)}, leave_applications={leave_n}")
        print("Default logins: principal@college.edu / hod.cs@college.edu / sarah.teacher@college.edu")
    finally:
        session.close()
