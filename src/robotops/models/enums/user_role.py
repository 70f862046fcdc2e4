import enum


class UserRole(enum.Enum):
    user = "user"
    admin = "admin"
