from thrifthub.core.exceptions.app_exception import ForbiddenException
from thrifthub.enums.user_role import UserRole
from thrifthub.models.user.user import User


def is_admin(user: User):
    if user.role != UserRole.ADMIN:
        raise ForbiddenException("Admin access required")


def is_rider(user: User):
    if user.role != UserRole.RIDER:
        raise ForbiddenException("Rider access required")


def is_owner_or_admin(user: User, owner_id: int, detail: str = "Access denied"):
    if user.role != UserRole.ADMIN and user.id != owner_id:
        raise ForbiddenException(detail)
