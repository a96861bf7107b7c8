from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lectro.api.deps import get_current_user, get_db
from lectro.core.config import get_settings
from lectro.core.security import create_access_token, verify_password
from lectro.models.user import User
from lectro.schemas.user import Token, UserLogin, UserOut
from lectro.services.audit import log_activity
from lectro.services.rate_limit import enforce_rate_limit

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


def authenticate_user(payload: UserLogin, db: Session) -> User:
    user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("Rejected login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)) -> Token:
    enforce_rate_limit(
        request=request,
        scope="auth.login",
        limit=settings.auth_rate_limit_login_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
    )
    user = authenticate_user(payload, db)
    log_activity(db, user=user, action="auth.login", entity_type="user", entity_id=user.id)
    db.commit()
    db.refresh(user)

    access_token = create_access_token(
        user.id,
        role=user.role.value,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return Token(access_token=access_token, token_type="bearer", user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def read_current_user(current_user: User = Depends(get_current_user)) -> UserOut:
    return current_user
