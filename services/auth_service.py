from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from models.user import User
from services.config_service import get_access_token_expire_minutes, get_bcrypt_rounds, get_secret_key

ALGORITHM = "HS256"


class AuthService:
    """Service layer for authentication."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        # bcrypt only looks at the first 72 bytes
        secret = password.encode("utf-8")[:72]
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=get_bcrypt_rounds())).decode("utf-8")

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=get_access_token_expire_minutes())
        )
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, get_secret_key(), algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> dict:
        """Verify JWT token and return payload."""
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
        try:
            payload = jwt.decode(token, get_secret_key(), algorithms=[ALGORITHM])
        except JWTError:
            raise credentials_exception
        if payload.get("sub") is None:
            raise credentials_exception
        return payload

    @staticmethod
    def authenticate_user(username: str, password: str, db: Session) -> User:
        user = db.query(User).filter(User.username == username).first()  # type: ignore
        if not user or not AuthService.verify_password(password, str(user.hashed_password)):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        if not user.is_active:
            raise HTTPException(status_code=403, detail="Account is deactivated")
        return user

    @staticmethod
    def get_user_from_token(token: str, db: Session) -> User:
        payload = AuthService.verify_token(token)
        username = str(payload.get("sub"))

        user = db.query(User).filter(User.username == username).first()  # type: ignore
        if user is None:
            raise HTTPException(status_code=401, detail="User not found")
        if not user.is_active:
            raise HTTPException(status_code=403, detail="Account is deactivated")
        return user
