# routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlmodel import Session, select
from jose import JWTError

from data.database import get_session as get_db
from models.users import User, UserCreate, Role
from core.permissions import STAFF_ROLES
from core.rate_limit import login_limiter
from core.security import verify_password, get_password_hash, create_access_token, decode_access_token
from core.token_blocklist import blocklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.exec(select(User).where(User.email == email.strip().lower())).first()

def get_user_by_employee_id(db: Session, employee_id: int) -> User | None:
    return db.exec(select(User).where(User.employee_id == employee_id)).first()

def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if not user:
        return None
    try:
        if not verify_password(password, user.password_hash):
            return None
    except ValueError:
        # unknown/invalid hash format -> treat as bad creds
        return None
    return user

def issue_token(user: User) -> dict:
    token = create_access_token(
        subject=user.id,
        extra_claims={"eid": user.employee_id, "role": user.role.value},
    )
    return {"access_token": token, "token_type": "bearer"}


def _token_payload(token: str = Depends(oauth2_scheme)) -> dict:
    cred_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise cred_exc
    if payload.get("sub") is None:
        raise cred_exc
    if blocklist.is_revoked(payload.get("jti")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload

def get_current_user(payload: dict = Depends(_token_payload), db: Session = Depends(get_db)) -> User:
    user = db.get(User, payload["sub"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    # Bootstrap: the very first account becomes the admin
    is_bootstrap = db.exec(select(User.id).limit(1)).first() is None

    if not is_bootstrap and payload.role not in STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin and manager roles are granted by an administrator",
        )

    # Uniqueness checks
    if db.exec(select(User).where(User.email == payload.email)).first():
        raise HTTPException(status_code=400, detail="User already exists")
    if get_user_by_employee_id(db, payload.employee_id):
        raise HTTPException(status_code=400, detail="Employee ID already registered")

    if payload.manager_id is not None:
        manager = get_user_by_employee_id(db, payload.manager_id)
        if manager is None or manager.role not in {Role.manager, Role.admin}:
            raise HTTPException(status_code=400, detail="Manager ID does not match any manager")

    user = User(
        name=payload.name,
        email=payload.email,
        employee_id=payload.employee_id,
        manager_id=payload.manager_id,
        role=Role.admin if is_bootstrap else payload.role,
        bio=payload.bio,
        password_hash=get_password_hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (employee %s, role %s)", user.id, user.employee_id, user.role.value)
    return issue_token(user)

@router.post("/login", dependencies=[Depends(login_limiter)])
def login(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate_user(db, form.username, form.password)
    if not user:
        logger.warning("Failed login for %r", form.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("User %s logged in", user.id)
    return issue_token(user)

@router.post("/logout")
def logout(payload: dict = Depends(_token_payload)):
    if payload.get("jti"):
        blocklist.revoke(payload["jti"], payload.get("exp"))
    logger.info("User %s logged out", payload["sub"])
    return {"detail": "Logged out successfully"}
