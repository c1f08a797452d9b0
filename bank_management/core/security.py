from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from bank_management.core import config
from bank_management.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from bank_management.database import get_session
from bank_management.models.admin_user import AdminUser
from bank_management.utils.dates import utcnow

SYSTEM_ACTOR = "system"

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# auto_error=False so a missing token can be allowed when auth is switched off
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def authenticate_admin(session: Session, username: str, password: str) -> Optional[AdminUser]:
    admin = session.exec(select(AdminUser).where(AdminUser.username == username)).first()
    if not admin or not admin.is_active:
        return None
    if not verify_password(password, admin.hashed_password):
        return None
    return admin


def _unauthorized(detail: str = "Invalid or expired token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_admin(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> str:
    """Username of the authenticated admin, used as the audit actor."""
    if not config.AUTH_ENABLED:
        return SYSTEM_ACTOR

    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized()

    username = payload.get("sub")
    if username is None:
        raise _unauthorized()

    admin = session.exec(select(AdminUser).where(AdminUser.username == username)).first()
    if not admin or not admin.is_active:
        raise _unauthorized("Admin user not found")
    if admin.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator role required")

    return admin.username
