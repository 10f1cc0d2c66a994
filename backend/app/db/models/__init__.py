# backend/app/db/models/__init__.py

from app.db.models.user import User
from app.db.models.department import Department
from app.db.models.leave_application import LeaveApplication
from app.db.models.leave_balance import LeaveBalance
from app.db.models.time_slot import TimeSlot
from app.db.models.audit_log import AuditLog
