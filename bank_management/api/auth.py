from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from bank_management.core.exceptions import AuthenticationError
from bank_management.core.logging_config import get_logger
from bank_management.core.security import authenticate_admin, create_access_token, get_current_admin
from bank_management.database import get_session
from bank_management.models.admin_user import AdminUser
from bank_management.schemas.admin_user import AdminRead, Token
from bank_management.schemas.common import ApiResponse, ok

router = APIRouter(prefix="/auth", tags=["auth"])

logger = get_logger(__name__)


# Login
@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    admin = authenticate_admin(session, form_data.username, form_data.password)
    if not admin:
        logger.warning("Failed login attempt for %s", form_data.username)
        raise AuthenticationError("Incorrect username or password")

    access_token = create_access_token(data={"sub": admin.username})
    logger.info("Admin %s logged in", admin.username)
    return Token(access_token=access_token)


@router.get("/me", response_model=ApiResponse[AdminRead])
def read_current_admin(
    username: str = Depends(get_current_admin),
    session: Session = Depends(get_session),
):
    admin = session.exec(select(AdminUser).where(AdminUser.username == username)).first()
    role = admin.role if admin else "admin"
    return ok(AdminRead(username=username, role=role))
