"""
Services module - Business logic layer for the container yard.
"""
from services.auth_service import AuthService
from services.container_query_service import ContainerQueryService
from services.container_service import ContainerService
from services.dashboard_service import DashboardService
from services.user_service import UserService

__all__ = ["AuthService", "ContainerQueryService", "ContainerService", "DashboardService", "UserService"]
