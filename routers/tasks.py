# routers/tasks.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select
from sqlalchemy import or_, update

from data.database import get_session
from models.helper import utcnow
from models.tasks import Task, TaskCreate, TaskRead, TaskUpdate, TaskStatus, TaskStatusUpdate, TaskAssign
from models.users import User
from core.permissions import (
    is_admin, is_manager, is_admin_or_manager, is_assignee,
    can_view_task, can_edit_task, can_delete_task, can_assign_to,
)
from routers.auth import get_current_user, get_user_by_employee_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

VALID_ASSIGNEE_STATUSES = {s.value for s in TaskStatus}

# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def to_read(t: Task) -> TaskRead:
    return TaskRead.model_validate(t)

def visible_tasks(user: User):
    """SELECT over the tasks ``user`` may see."""
    stmt = select(Task)
    if is_admin(user):
        return stmt
    preds = [Task.owner_id == user.id, Task.assigned_to_id == user.employee_id]
    if is_manager(user):
        preds.append(Task.manager_id == user.employee_id)
    return stmt.where(or_(*preds))

def get_task_or_404(session: Session, task_id: str) -> Task:
    t = session.get(Task, task_id)
    if not t:
        raise HTTPException(status_code=404, detail="Task not found")
    return t

def forbid(user: User, action: str, task: Task):
    logger.warning("User %s (%s) denied %s on task %s", user.id, user.role.value, action, task.id)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"You are not authorized to {action} this task")

def get_assignee_or_404(session: Session, employee_id: int) -> User:
    assignee = get_user_by_employee_id(session, employee_id)
    if not assignee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return assignee

# ---------------------------------------------------------------------
# Read endpoints (fixed paths BEFORE param route)
# ---------------------------------------------------------------------

@router.get("", response_model=List[TaskRead])
def list_tasks(session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    rows = session.exec(visible_tasks(current_user).order_by(Task.created_at.desc())).all()
    return [to_read(t) for t in rows]

@router.get("/search", response_model=List[TaskRead])
def search_tasks(
    q: Optional[str] = Query(None, description="Search in title/description/status/tag/assignee name"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    term = (q or "").strip()
    if not term:
        raise HTTPException(status_code=400, detail="Search query is required")

    stmt = visible_tasks(current_user).where(
        or_(
            Task.title.icontains(term, autoescape=True),
            Task.description.icontains(term, autoescape=True),
            Task.status.icontains(term, autoescape=True),
            Task.tag.icontains(term, autoescape=True),
            Task.assigned_to_username.icontains(term, autoescape=True),
        )
    )
    rows = session.exec(stmt.order_by(Task.created_at.desc())).all()
    return [to_read(t) for t in rows]

@router.get("/{task_id}", response_model=TaskRead)
def get_task(task_id: str, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    t = get_task_or_404(session, task_id)
    if not can_view_task(current_user, t):
        forbid(current_user, "view", t)
    return to_read(t)

# ---------------------------------------------------------------------
# Write endpoints
# ---------------------------------------------------------------------

@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    t = Task(
        **payload.model_dump(exclude={"assigned_to_id"}),
        owner_id=current_user.id,
        username=current_user.name,
    )
    if is_manager(current_user):
        t.manager_id = current_user.employee_id

    if payload.assigned_to_id is not None:
        if not is_admin_or_manager(current_user):
            raise HTTPException(status_code=403, detail="Only managers and admins can assign tasks")
        assignee = get_assignee_or_404(session, payload.assigned_to_id)
        if not can_assign_to(current_user, assignee):
            raise HTTPException(status_code=403, detail="Employee is not on your team")
        t.assigned_to_id = assignee.employee_id
        t.assigned_to_username = assignee.name
        if is_admin(current_user) and t.manager_id is None:
            t.manager_id = assignee.manager_id

    session.add(t)
    session.commit()
    session.refresh(t)
    logger.info("User %s created task %s", current_user.id, t.id)
    return to_read(t)

@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    t = get_task_or_404(session, task_id)
    if not can_edit_task(current_user, t):
        forbid(current_user, "update", t)

    # blank/omitted fields are left untouched
    data = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    for k, v in data.items():
        setattr(t, k, v)

    t.updated_at = utcnow()
    session.add(t)
    session.commit()
    session.refresh(t)
    return to_read(t)

@router.put("/{task_id}/status", response_model=TaskRead)
def update_status(
    task_id: str,
    payload: TaskStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Accepts {'status': 'ongoing'} or {'status': 'completed'}."""
    t = get_task_or_404(session, task_id)
    if not (is_assignee(current_user, t) or can_edit_task(current_user, t)):
        forbid(current_user, "update", t)

    new_status = (payload.status or "").strip().lower()
    if new_status not in VALID_ASSIGNEE_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    t.status = new_status
    t.updated_at = utcnow()
    session.add(t)
    session.commit()
    session.refresh(t)
    return to_read(t)

@router.put("/{task_id}/assign", response_model=TaskRead)
def assign_task(
    task_id: str,
    payload: TaskAssign,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if not is_admin_or_manager(current_user):
        raise HTTPException(status_code=403, detail="Only managers and admins can assign tasks")

    t = get_task_or_404(session, task_id)
    assignee = get_assignee_or_404(session, payload.employee_id)
    if not can_assign_to(current_user, assignee):
        raise HTTPException(status_code=403, detail="Employee is not on your team")

    now = utcnow()
    if is_admin(current_user):
        t.assigned_to_id = assignee.employee_id
        t.assigned_to_username = assignee.name
        if t.manager_id is None:
            t.manager_id = assignee.manager_id
        t.updated_at = now
        session.add(t)
    else:
        # Claim the task in one statement so two managers cannot both win
        result = session.exec(
            update(Task)
            .where(
                Task.id == t.id,
                or_(Task.manager_id.is_(None), Task.manager_id == current_user.employee_id),
            )
            .values(
                manager_id=current_user.employee_id,
                assigned_to_id=assignee.employee_id,
                assigned_to_username=assignee.name,
                updated_at=now,
            )
        )
        if result.rowcount == 0:
            session.rollback()
            logger.warning("Manager %s tried to take over task %s managed by %s",
                           current_user.employee_id, t.id, t.manager_id)
            raise HTTPException(status_code=403, detail="Task is managed by another manager")

    session.commit()
    session.refresh(t)
    logger.info("User %s assigned task %s to employee %s", current_user.id, t.id, assignee.employee_id)
    return to_read(t)

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
    t = get_task_or_404(session, task_id)
    if not can_delete_task(current_user, t):
        forbid(current_user, "delete", t)
    session.delete(t)
    session.commit()
    logger.info("User %s deleted task %s", current_user.id, task_id)
    return None
