# scripts/seed_admin.py
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from sqlmodel import Session, select
from data.database import engine, init_db
from models.users import User, Role
from core.security import get_password_hash, is_strong_password, PASSWORD_RULES

def main(name: str, email: str, password: str, employee_id: int) -> int:
    if not is_strong_password(password):
        print("[ERROR]", PASSWORD_RULES)
        return 1
    init_db(engine)
    email = email.strip().lower()
    with Session(engine) as s:
        existing = s.exec(
            select(User).where((User.email == email) | (User.employee_id == employee_id))
        ).first()
        if existing:
            print("[INFO] User already exists:", existing.email, existing.employee_id)
            return 0
        u = User(
            name=name,
            email=email,
            employee_id=employee_id,
            role=Role.admin,
            password_hash=get_password_hash(password),
        )
        s.add(u)
        s.commit()
        s.refresh(u)
        print("[OK] Seeded admin:", u.id, u.email)
    return 0

if __name__ == "__main__":
    # Usage: python -m scripts.seed_admin "Ada Admin" admin@example.com StrongPass1! 1
    if len(sys.argv) < 5 or not sys.argv[4].isdigit():
        print("Usage: python -m scripts.seed_admin <name> <email> <password> <employee_id>")
        sys.exit(1)
    sys.exit(main(sys.argv[1], sys.argv[2], sys.argv[3], int(sys.argv[4])))
