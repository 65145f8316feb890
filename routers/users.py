# routers/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from data.database import get_session
from models.helper import utcnow
from models.tasks import Task
from models.users import User, UserRead, UserSelfUpdate, PasswordChange, RoleUpdate, ManagerAssign, Role
from core.permissions import STAFF_ROLES, is_admin, is_manager, is_admin_or_manager, is_team_member
from core.security import get_password_hash, verify_password, is_strong_password, PASSWORD_RULES
from routers.auth import get_current_user, get_user_by_employee_id
from routers.tasks import to_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

# ---------------------------
# Helpers
# ---------------------------
def to_user_read(u: User) -> UserRead:
    return UserRead.model_validate(u)

def get_user_or_404(session: Session, employee_id: int) -> User:
    user = get_user_by_employee_id(session, employee_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

def get_manager_or_400(session: Session, manager_id: int) -> User:
    manager = get_user_by_employee_id(session, manager_id)
    if manager is None or manager.role not in {Role.manager, Role.admin}:
        raise HTTPException(status_code=400, detail="Manager ID does not match any manager")
    return manager

def require_admin(current: User = Depends(get_current_user)) -> User:
    if not is_admin(current):
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return current

def require_admin_or_manager(current: User = Depends(get_current_user)) -> User:
    if not is_admin_or_manager(current):
        raise HTTPException(status_code=403, detail="Manager or admin privileges required")
    return current

def save(session: Session, user: User) -> User:
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

# ---------------------------
# Me (current user)
# ---------------------------
@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return to_user_read(user)

@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserSelfUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    if payload.name is not None:
        name = payload.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Name must not be blank")
        user.name = name
    if payload.bio is not None:
        user.bio = payload.bio
    return to_user_read(save(session, user))

@router.patch("/me/password")
def change_my_password(
    payload: PasswordChange,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    if not is_strong_password(payload.new_password):
        raise HTTPException(status_code=400, detail=PASSWORD_RULES)

    user.password_hash = get_password_hash(payload.new_password)
    save(session, user)
    logger.info("User %s changed their password", user.id)
    return {"ok": True}

@router.get("/me/tasks")
def my_assigned_tasks(session: Session = Depends(get_session), user: User = Depends(get_current_user)):
    rows = session.exec(
        select(Task).where(Task.assigned_to_id == user.employee_id).order_by(Task.created_at.desc())
    ).all()
    return [to_read(t) for t in rows]

# ---------------------------
# Team / directory
# ---------------------------
@router.get("/team")
def my_team(session: Session = Depends(get_session), current: User = Depends(require_admin_or_manager)):
    employees = session.exec(
        select(User).where(User.manager_id == current.employee_id).order_by(User.employee_id)
    ).all()
    tasks = session.exec(
        select(Task).where(Task.manager_id == current.employee_id).order_by(Task.created_at.desc())
    ).all()
    return {
        "employees": [to_user_read(u) for u in employees],
        "tasks": [to_read(t) for t in tasks],
    }

@router.get("", response_model=List[UserRead])
def list_users(session: Session = Depends(get_session), current: User = Depends(require_admin_or_manager)):
    stmt = select(User).order_by(User.employee_id)
    if not is_admin(current):
        stmt = stmt.where(User.manager_id == current.employee_id)
    return [to_user_read(u) for u in session.exec(stmt).all()]

@router.get("/{employee_id}", response_model=UserRead)
def get_user(employee_id: int, session: Session = Depends(get_session), current: User = Depends(get_current_user)):
    user = get_user_or_404(session, employee_id)
    allowed = (
        is_admin(current)
        or user.id == current.id
        or (is_manager(current) and is_team_member(current, user))
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="You are not authorized to view this user")
    return to_user_read(user)

# ---------------------------
# Role / manager reassignment
# ---------------------------
@router.put("/{employee_id}/role", response_model=UserRead)
def update_role(
    employee_id: int,
    payload: RoleUpdate,
    session: Session = Depends(get_session),
    current: User = Depends(require_admin_or_manager),
):
    target = get_user_or_404(session, employee_id)
    fields = payload.model_dump(exclude_unset=True)

    if is_admin(current):
        if "manager_id" in fields and fields["manager_id"] is not None:
            if fields["manager_id"] == target.employee_id:
                raise HTTPException(status_code=400, detail="A user cannot manage themselves")
            get_manager_or_400(session, fields["manager_id"])
        if "manager_id" in fields:
            target.manager_id = fields["manager_id"]
        target.role = payload.role
    else:
        # managers only move staff onto their own team
        if target.role not in STAFF_ROLES:
            raise HTTPException(status_code=403, detail="You are not authorized to update this user")
        if target.manager_id is not None and not is_team_member(current, target):
            raise HTTPException(status_code=403, detail="User belongs to another manager's team")
        if payload.role not in STAFF_ROLES:
            raise HTTPException(status_code=403, detail="Managers can only assign employee or intern roles")
        if fields.get("manager_id") not in (None, current.employee_id):
            raise HTTPException(status_code=403, detail="Managers can only add users to their own team")
        target.role = payload.role
        target.manager_id = current.employee_id

    save(session, target)
    logger.info("User %s set employee %s role=%s manager=%s",
                current.id, target.employee_id, target.role.value, target.manager_id)
    return to_user_read(target)

@router.put("/{employee_id}/manager", response_model=UserRead)
def assign_manager(
    employee_id: int,
    payload: ManagerAssign,
    session: Session = Depends(get_session),
    current: User = Depends(require_admin),
):
    target = get_user_or_404(session, employee_id)
    if payload.manager_id == target.employee_id:
        raise HTTPException(status_code=400, detail="A user cannot manage themselves")
    get_manager_or_400(session, payload.manager_id)

    target.manager_id = payload.manager_id
    save(session, target)
    logger.info("User %s moved employee %s under manager %s", current.id, target.employee_id, payload.manager_id)
    return to_user_read(target)
