import logging
from typing import List, Optional

from sqlalchemy import Integer, cast
from sqlalchemy.orm import Session

from core.clock import utcnow
from core.exceptions import DuplicateEntityError, NotFoundError
from models.user import User
from schemas.user import UserCreate, UserUpdate
from services import id_allocator
from services.auth_service import AuthService

log = logging.getLogger(__name__)


class UserService:
    """Staff accounts and their permissions. Password hashes never leave this layer."""

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(cast(User.id, Integer)).all()

    @staticmethod
    def get_user(user_id: str, db: Session) -> User:
        user = db.query(User).filter(User.id == str(user_id)).first()
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    @staticmethod
    def _ensure_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None):
        if username:
            query = db.query(User).filter(User.username == username)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateEntityError("User", "username", username)
        if email:
            query = db.query(User).filter(User.email == email)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                raise DuplicateEntityError("User", "email", email)

    @staticmethod
    def create_user(user_in: UserCreate, db: Session) -> User:
        UserService._ensure_unique(db, user_in.username, str(user_in.email))

        new_user = User(
            id=id_allocator.allocate_id(db, id_allocator.USERS),
            username=user_in.username,
            email=str(user_in.email),
            hashed_password=AuthService.get_password_hash(user_in.password),
            role=user_in.role,
            permissions=list(user_in.permissions),
            is_active=True,
            created_at=utcnow(),
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        log.info("Created user %s (%s)", new_user.username, new_user.role)
        return new_user

    @staticmethod
    def update_user(user_id: str, user_in: UserUpdate, db: Session) -> User:
        """Shallow merge; a supplied password is re-hashed."""
        user = UserService.get_user(user_id, db)
        changes = user_in.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = str(changes["email"])

        UserService._ensure_unique(db, changes.get("username"), changes.get("email"), exclude_id=user.id)

        password = changes.pop("password", None)
        if password:
            user.hashed_password = AuthService.get_password_hash(password)
        for field, value in changes.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete_user(user_id: str, db: Session) -> None:
        user = UserService.get_user(user_id, db)
        db.delete(user)
        db.commit()
        log.info("Deleted user %s", user_id)
