# core/permissions.py
"""
Role hierarchy checks shared by the routers.

admin > manager > employee == intern. A manager's team is every user whose
``manager_id`` equals the manager's ``employee_id``; a manager manages a task
when the task's ``manager_id`` equals their ``employee_id``.
"""
from models.users import User, Role
from models.tasks import Task

ROLE_RANK = {
    Role.intern: 0,
    Role.employee: 0,
    Role.manager: 1,
    Role.admin: 2,
}

STAFF_ROLES = {Role.employee, Role.intern}


def is_admin(user: User) -> bool:
    return user.role == Role.admin

def is_manager(user: User) -> bool:
    return user.role == Role.manager

def is_admin_or_manager(user: User) -> bool:
    return ROLE_RANK.get(user.role, 0) >= ROLE_RANK[Role.manager]

def is_team_member(manager: User, user: User) -> bool:
    return user.manager_id is not None and user.manager_id == manager.employee_id


# ---------------------------
# Task permissions
# ---------------------------
def is_owner(user: User, task: Task) -> bool:
    return task.owner_id == user.id

def is_assignee(user: User, task: Task) -> bool:
    return task.assigned_to_id is not None and task.assigned_to_id == user.employee_id

def manages_task(user: User, task: Task) -> bool:
    return (
        is_manager(user)
        and task.manager_id is not None
        and task.manager_id == user.employee_id
    )

def can_view_task(user: User, task: Task) -> bool:
    return (
        is_admin(user)
        or is_owner(user, task)
        or is_assignee(user, task)
        or manages_task(user, task)
    )

def can_edit_task(user: User, task: Task) -> bool:
    return is_admin(user) or is_owner(user, task) or manages_task(user, task)

can_delete_task = can_edit_task

def can_assign_to(user: User, assignee: User) -> bool:
    """Admins assign anyone; managers assign themselves or their team."""
    if is_admin(user):
        return True
    if is_manager(user):
        return assignee.id == user.id or is_team_member(user, assignee)
    return False
