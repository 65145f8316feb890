# scripts/reset_password.py
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from sqlmodel import Session, select
from data.database import engine
from models.helper import utcnow
from models.users import User
from core.security import get_password_hash, is_strong_password, PASSWORD_RULES

def main(email: str, new_password: str) -> int:
    if not is_strong_password(new_password):
        print("[ERROR]", PASSWORD_RULES)
        return 1
    with Session(engine) as s:
        u = s.exec(select(User).where(User.email == email.strip().lower())).first()
        if not u:
            print("User not found")
            return 1
        u.password_hash = get_password_hash(new_password)
        u.updated_at = utcnow()
        s.add(u)
        s.commit()
        print("Password reset for:", u.email)
    return 0

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.reset_password <email> <new_password>")
        sys.exit(1)
    sys.exit(main(sys.argv[1], sys.argv[2]))
