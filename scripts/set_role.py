# scripts/set_role.py
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from sqlmodel import Session, select
from data.database import engine
from models.helper import utcnow
from models.users import User, Role

def main(email: str, role: str) -> int:
    try:
        new_role = Role(role.strip().lower())
    except ValueError:
        print("Unknown role:", role, "(choose from", ", ".join(r.value for r in Role) + ")")
        return 1
    with Session(engine) as s:
        u = s.exec(select(User).where(User.email == email.strip().lower())).first()
        if not u:
            print("User not found")
            return 1
        u.role = new_role
        u.updated_at = utcnow()
        s.add(u)
        s.commit()
        s.refresh(u)
        print(f"Set role of {u.email} to {u.role.value}")
    return 0

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.set_role <email> <admin|manager|employee|intern>")
        raise SystemExit(1)
    raise SystemExit(main(sys.argv[1], sys.argv[2]))
