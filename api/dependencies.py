from typing import List

from fastapi import Depends, HTTPException, status

from core.security import get_current_user
from models.user import User, role_name


class RoleChecker:
    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = allowed_roles

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if role_name(user).lower() not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Operation not permitted. Required roles: {self.allowed_roles}"
            )
        return user


class PermissionChecker:
    def __init__(self, permission: str):
        self.permission = permission

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if user.has_permission(self.permission):
            return user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Operation not permitted. Required permission: {self.permission}"
        )


# Define reusable dependencies
require_admin = RoleChecker(["admin"])


def require_permission(permission: str) -> PermissionChecker:
    return PermissionChecker(permission)
