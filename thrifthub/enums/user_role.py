from enum import Enum

class UserRole(str, Enum):
    STUDENT = "student"
    RIDER = "rider"
    ADMIN = "admin"
