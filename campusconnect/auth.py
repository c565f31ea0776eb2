# campusconnect/auth.py
"""Bearer-token identity for the API: who is calling and which role they hold."""
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from campusconnect import database, models
from campusconnect.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="users/login")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict) -> str:
    """Signs ``data`` (``sub`` is the user's e-mail) with an expiry claim."""
    claims = dict(data)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

def _token_email(token: str) -> str:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise _unauthorized()
    email = payload.get("sub")
    if not email:
        raise _unauthorized()
    return email


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(database.get_db)):
    user = db.query(models.User).filter(models.User.email == _token_email(token)).first()
    # Deactivated accounts lose access even with an unexpired token
    if user is None or not user.is_active:
        raise _unauthorized()
    return user


def _require_role(user: models.User, roles, label: str) -> models.User:
    if user.role not in roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You do not have permission to perform this action ({label})."
        )
    return user

def verify_admin_user(current_user: models.User = Depends(get_current_user)):
    return _require_role(current_user, (models.Role.ADMIN.value,), "Admin only")

def verify_reviewer(current_user: models.User = Depends(get_current_user)):
    return _require_role(current_user, models.REVIEWER_ROLES, "Admin or Faculty only")
