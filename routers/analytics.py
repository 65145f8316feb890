# routers/analytics.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from data.database import get_session
from models.helper import utcnow
from models.tasks import Task, TaskBucket, TaskStatus
from models.users import User
from core.permissions import is_admin, is_admin_or_manager
from routers.auth import get_current_user
from routers.tasks import to_read

router = APIRouter(prefix="/analytics", tags=["analytics"])

BUCKETS = [b.value for b in TaskBucket]


def _zero() -> Dict[str, int]:
    return {k: 0 for k in BUCKETS} | {"total": 0}

def bucket_filter(bucket: TaskBucket, now=None) -> list:
    """
    WHERE clauses for a bucket:
      completed -> status == "completed"
      pending   -> status == "ongoing"
      overdue   -> status == "ongoing" and due_date <= now
    """
    if bucket == TaskBucket.completed:
        return [Task.status == TaskStatus.completed.value]
    if bucket == TaskBucket.pending:
        return [Task.status == TaskStatus.ongoing.value]
    return [
        Task.status == TaskStatus.ongoing.value,
        Task.due_date.is_not(None),
        Task.due_date <= (now or utcnow()),
    ]

def employee_scope(user: User) -> list:
    return [Task.assigned_to_id == user.employee_id]

def manager_scope(user: User) -> list:
    if not is_admin_or_manager(user):
        raise HTTPException(status_code=403, detail="You are not authorized to proceed further")
    if is_admin(user):
        return []
    return [Task.manager_id == user.employee_id]

def count_buckets(session: Session, scope: list) -> Dict[str, int]:
    now = utcnow()
    out = _zero()
    for bucket in TaskBucket:
        stmt = select(func.count()).select_from(Task).where(*scope, *bucket_filter(bucket, now))
        out[bucket.value] = int(session.exec(stmt).one())
    out["total"] = int(session.exec(select(func.count()).select_from(Task).where(*scope)).one())
    return out

def list_bucket(session: Session, scope: list, bucket: TaskBucket):
    stmt = select(Task).where(*scope, *bucket_filter(bucket)).order_by(Task.created_at.desc())
    return [to_read(t) for t in session.exec(stmt).all()]


# ---------------------------------------------------------------------
# Employee: tasks assigned to me
# ---------------------------------------------------------------------

@router.get("/employee")
def employee_counts(session: Session = Depends(get_session), current: User = Depends(get_current_user)):
    return count_buckets(session, employee_scope(current))

@router.get("/employee/{bucket}")
def employee_bucket(bucket: TaskBucket, session: Session = Depends(get_session), current: User = Depends(get_current_user)):
    return list_bucket(session, employee_scope(current), bucket)

# ---------------------------------------------------------------------
# Manager: tasks I manage (admin: every task)
# ---------------------------------------------------------------------

@router.get("/manager")
def manager_counts(session: Session = Depends(get_session), current: User = Depends(get_current_user)):
    return count_buckets(session, manager_scope(current))

@router.get("/manager/{bucket}")
def manager_bucket(bucket: TaskBucket, session: Session = Depends(get_session), current: User = Depends(get_current_user)):
    return list_bucket(session, manager_scope(current), bucket)

@router.get("/assignees")
def counts_by_assignee(session: Session = Depends(get_session), current: User = Depends(get_current_user)) -> List[Dict[str, Any]]:
    """
    Per-assignee bucket counts within the caller's manager scope,
    busiest assignee first.
    """
    scope = manager_scope(current)
    rows = session.exec(
        select(Task.assigned_to_id, Task.assigned_to_username, Task.status, Task.due_date)
        .where(*scope, Task.assigned_to_id.is_not(None))
    ).all()

    now = utcnow()
    per: Dict[int, Dict[str, Any]] = {}
    for employee_id, name, raw_status, due_date in rows:
        entry = per.setdefault(employee_id, {"employee_id": employee_id, "name": name, "counts": _zero()})
        counts = entry["counts"]
        counts["total"] += 1
        if raw_status == TaskStatus.completed.value:
            counts["completed"] += 1
        elif raw_status == TaskStatus.ongoing.value:
            counts["pending"] += 1
            if due_date is not None and due_date <= now:
                counts["overdue"] += 1

    out = list(per.values())
    out.sort(key=lambda r: (-r["counts"]["total"], r["employee_id"]))
    return out
