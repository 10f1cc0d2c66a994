"""Module: departments."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.v1.routes.deps import get_db
from app.db.models.department import Department

router = APIRouter()


@router.get("", summary="Active departments")
def list_departments(db: Session = Depends(get_db)):
    rows = db.execute(
        select(Department).where(Department.is_active.is_(True)).order_by(Department.name)
    ).scalars().all()
    return [
        {
            "department_id": str(d.department_id),
            "name": d.name,
            "code": d.code,
            "hod_user_id": str(d.hod_user_id) if d.hod_user_id else None,
        }
        for d in rows
    ]
