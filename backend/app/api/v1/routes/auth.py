import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.v1.routes.deps import bearer_token, get_current_user, get_db
from app.core.errors import Conflict, Unauthorized, ValidationError
from app.core.roles import Role, parse_role
from app.core.security import hash_password, issue_token, revoke_token, verify_password
from app.db.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    department: str
    employee_id: str
    role: str = Role.TEACHER.value


class UserPayload(BaseModel):
    user_id: str
    name: str
    email: str
    role: str
    department: str
    employee_id: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPayload


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def as_user_payload(user: User) -> UserPayload:
    return UserPayload(
        user_id=str(user.user_id),
        name=user.name,
        email=user.email,
        role=parse_role(user.role).value,
        department=user.department,
        employee_id=user.employee_id,
    )


@router.post("/register", response_model=LoginResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    fields = (payload.name, payload.email, payload.password, payload.department, payload.employee_id)
    if any(not (value or "").strip() for value in fields):
        raise ValidationError("Name, email, password, department, and employee ID are required")

    try:
        role = parse_role(payload.role)
    except ValueError:
        raise ValidationError("Invalid role. Must be teacher, hod, or principal")

    normalized_email = _normalize_email(payload.email)
    exists = db.execute(select(User.user_id).where(func.lower(User.email) == normalized_email)).first()
    if exists:
        raise Conflict("Email already registered")

    employee_id = payload.employee_id.strip()
    exists = db.execute(select(User.user_id).where(User.employee_id == employee_id)).first()
    if exists:
        raise Conflict("Employee ID already exists")

    user = User(
        name=payload.name.strip(),
        email=normalized_email,
        password=hash_password(payload.password),
        role=role.value,
        department=payload.department.strip(),
        employee_id=employee_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered %s user %s (%s)", role.value, user.user_id, user.department)
    return LoginResponse(access_token=issue_token(str(user.user_id)), user=as_user_payload(user))


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    normalized_email = _normalize_email(payload.email)
    user = db.execute(
        select(User).where(func.lower(User.email) == normalized_email)
    ).scalar_one_or_none()

    if not user or not verify_password(payload.password, user.password):
        raise Unauthorized("Invalid email or password")

    return LoginResponse(
        access_token=issue_token(str(user.user_id)),
        user=as_user_payload(user),
    )


@router.get("/me", response_model=UserPayload)
def me(user: User = Depends(get_current_user)):
    return as_user_payload(user)


@router.post("/logout")
def logout(token: str = Depends(bearer_token)):
    revoke_token(token)
    return {"message": "Logged out successfully"}
